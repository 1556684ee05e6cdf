# encoding: utf-8
"""
Defines a Celery task to ping search engines outside of the request cycle

Usage:
>>> ping_sitemap.delay("http://www.example.com/sitemap.xml")

The notifier queues this task itself when SITEMAP_NOTIFIER_BACKGROUND is
enabled, after the delay window has been checked.
"""
from celery import shared_task

from .notifier import notifier


@shared_task(ignore_result=True)
def ping_sitemap(sitemap_url):
    results = notifier.ping_all(sitemap_url)
    return len([response for response in results.values() if response is not None])
