#!/usr/bin/env python
# -*- coding: utf-8 -*-
from setuptools import setup

setup(
    name='django-sitemap-notifier',
    version='0.1.0',
    description='A Django app that pings search engines when your sitemap changes',
    long_description=open('README.rst', 'r').read(),
    packages=['django_sitemap_notifier'],
    python_requires='>=3.8',
    install_requires=[
        'Django>=3.2',
        'requests',
        'celery',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-django',
        ],
    },
)
