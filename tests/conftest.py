from unittest.mock import patch

import django
import pytest
from django.conf import settings


def pytest_configure():
    settings.configure(
        DEBUG=False,
        DATABASES={
            'default': {
                'ENGINE': 'django.db.backends.sqlite3',
                'NAME': ':memory:',
            }
        },
        INSTALLED_APPS=[
            'django.contrib.contenttypes',
            'django.contrib.sites',
            'django_sitemap_notifier',
            'testapp',
        ],
        SITE_ID=1,
        DEFAULT_AUTO_FIELD='django.db.models.AutoField',
        USE_TZ=True,
    )
    django.setup()


@pytest.fixture(autouse=True)
def notifier():
    from django_sitemap_notifier.notifier import notifier

    notifier.reset()
    notifier.configure(enabled=True, background=False)
    yield notifier
    notifier.reset()


@pytest.fixture
def http_get():
    with patch('django_sitemap_notifier.notifier.requests.get') as mock_get:
        yield mock_get
