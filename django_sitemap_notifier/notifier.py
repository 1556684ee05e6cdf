# encoding: utf-8
"""Ping search engines when the sitemap changes

`SitemapNotifier` decides whether a change to a model should be announced,
waits out a cooldown between announcements and then issues a GET request
against each configured ping URL using the requests[1]_ library.

Example usage::

>>> from django_sitemap_notifier.notifier import notifier
>>> notifier.configure(sitemap_url="http://www.example.com/sitemap.xml",
...                    models={"blog.Article": ["create", "delete"]})
>>> notifier.notify_of_changes_to(Article, "create")
True
>>> for ping_url, response in notifier.ping_all(notifier.sitemap_url).items():
...     print(ping_url, response and response.status_code)

Settings are read from the Django settings module the first time they are
needed and can be overridden with `configure()`:

    SITEMAP_NOTIFIER_SITEMAP_URL
    SITEMAP_NOTIFIER_MODELS
    SITEMAP_NOTIFIER_DELAY
    SITEMAP_NOTIFIER_PING_URLS
    SITEMAP_NOTIFIER_BACKGROUND
    SITEMAP_NOTIFIER_ENABLED
    SITEMAP_NOTIFIER_TIMEOUT

.. [1] See http://python-requests.org/
"""

import logging
import threading
import time
from urllib.parse import quote_plus

import requests
from django.apps import apps
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import models as django_models

logger = logging.getLogger(__name__)

ALL = 'all'
ACTIONS = ('create', 'update', 'delete')

DEFAULT_PING_URLS = (
    'http://www.google.com/webmasters/sitemaps/ping?sitemap={sitemap_url}',
    'http://www.bing.com/webmaster/ping.aspx?siteMap={sitemap_url}',
)


class InvalidSitemapNotifierConfiguration(ImproperlyConfigured):
    pass


def load_notifier_settings():
    '''Load the notifier configuration from the Django settings

    returns a dict with one entry per configurable attribute. `enabled`
    defaults to the opposite of DEBUG so development servers stay quiet.
    '''

    return {
        'sitemap_url': getattr(settings, 'SITEMAP_NOTIFIER_SITEMAP_URL', None),
        'models': getattr(settings, 'SITEMAP_NOTIFIER_MODELS', ()),
        'delay': getattr(settings, 'SITEMAP_NOTIFIER_DELAY', 600),
        'ping_urls': list(getattr(settings, 'SITEMAP_NOTIFIER_PING_URLS', DEFAULT_PING_URLS)),
        'background': getattr(settings, 'SITEMAP_NOTIFIER_BACKGROUND', True),
        'enabled': getattr(settings, 'SITEMAP_NOTIFIER_ENABLED', not settings.DEBUG),
        'timeout': getattr(settings, 'SITEMAP_NOTIFIER_TIMEOUT', 10),
    }


def format_ping_url(template, sitemap_url):
    try:
        return template.format(sitemap_url=quote_plus(sitemap_url))
    except (IndexError, KeyError, ValueError) as exc:
        raise InvalidSitemapNotifierConfiguration(
            "Invalid ping URL template %r, only {sitemap_url} may be substituted: %r" % (template, exc))


def validate_ping_urls(ping_urls):
    for template in ping_urls:
        format_ping_url(template, '')
    return ping_urls


def is_project_model(model):
    return not model.__module__.startswith('django.')


def _resolve_model(model):
    if isinstance(model, str):
        try:
            return apps.get_model(model)
        except (LookupError, ValueError) as exc:
            raise InvalidSitemapNotifierConfiguration(
                'Unknown model %r in SITEMAP_NOTIFIER_MODELS: %s' % (model, exc))
    if isinstance(model, type) and issubclass(model, django_models.Model):
        return model
    raise InvalidSitemapNotifierConfiguration("Don't know how to watch %r" % (model,))


def _normalize_actions(actions):
    if actions == ALL or actions == '__all__':
        return ALL
    if isinstance(actions, str):
        actions = [actions]
    elif not isinstance(actions, (list, tuple, set, frozenset)):
        raise InvalidSitemapNotifierConfiguration("Don't know how to handle actions %r" % (actions,))

    for action in actions:
        if action not in ACTIONS:
            raise InvalidSitemapNotifierConfiguration(
                'Unknown action %r, expected one of %s' % (action, ', '.join(ACTIONS)))
    return frozenset(actions)


def normalize_watch_list(watched):
    """
    Turn the `models` option into either `ALL` or a {model: actions} dict

    `watched` may be "all", a list or tuple of models, or a dict mapping
    models to a single action, a list of actions or "all". Models can be
    given as classes or "app_label.ModelName" strings.

    "all" only covers models defined outside of Django itself; sessions,
    contenttypes, the migration recorder etc. have to be listed explicitly.
    """

    if watched == ALL or watched == '__all__':
        return ALL
    if not watched:
        return {}
    if isinstance(watched, dict):
        return dict((_resolve_model(model), _normalize_actions(actions))
                    for model, actions in watched.items())
    if isinstance(watched, (list, tuple, set, frozenset)):
        return dict((_resolve_model(model), ALL) for model in watched)
    raise InvalidSitemapNotifierConfiguration("Don't know how to handle models %r" % (watched,))


class SitemapNotifier(object):
    OPTIONS = ('sitemap_url', 'models', 'delay', 'ping_urls', 'background', 'enabled', 'timeout')

    def __init__(self, **options):
        """Notify search engines about sitemap changes

        Options passed here override the values found in the Django
        settings; see `configure()`. Nothing is read from the settings until
        the notifier is first used, so instances can be created at import
        time.
        """

        self._options = None
        self._watch_list = None
        self._overrides = {}
        self._lock = threading.Lock()
        self.last_ping = None
        if options:
            self.configure(**options)

    def _load(self):
        if self._options is None:
            options = load_notifier_settings()
            options.update(self._overrides)
            validate_ping_urls(options['ping_urls'])
            self._options = options
        return self._options

    def __getattr__(self, name):
        if name in SitemapNotifier.OPTIONS:
            return self._load()[name]
        raise AttributeError(name)

    def configure(self, **options):
        unknown = set(options) - set(self.OPTIONS)
        if unknown:
            raise TypeError('Unknown sitemap notifier option(s): %s' % ', '.join(sorted(unknown)))

        if 'ping_urls' in options:
            options['ping_urls'] = validate_ping_urls(list(options['ping_urls']))
        self._overrides.update(options)
        if self._options is not None:
            self._options.update(options)
        if 'models' in options:
            self._watch_list = None

    def reset(self):
        '''Forget configure() overrides and the last ping time'''

        self._options = None
        self._watch_list = None
        self._overrides = {}
        self.last_ping = None

    @property
    def watch_list(self):
        if self._watch_list is None:
            self._watch_list = normalize_watch_list(self.models)
        return self._watch_list

    def notify_of_changes_to(self, model, action):
        """
        Should a change of kind `action` to `model` be announced?

        `model` may be a model class or an instance.
        """

        if not isinstance(model, type):
            model = type(model)

        watched = self.watch_list
        if watched == ALL:
            return is_project_model(model)

        actions = watched.get(model)
        if actions is None:
            return False
        return actions == ALL or action in actions

    def resolve_sitemap_url(self, instance=None):
        '''Find the sitemap URL to announce for a change to `instance`

        1. A `sitemap_url` method or attribute on the instance
        2. The configured sitemap URL
        3. /sitemap.xml on the current django.contrib.sites Site
        '''

        if instance is not None and hasattr(instance, 'sitemap_url'):
            url = instance.sitemap_url
            if callable(url):
                url = url()
            if url:
                return url

        if self.sitemap_url:
            return self.sitemap_url

        if apps.is_installed('django.contrib.sites'):
            from django.contrib.sites.models import Site
            return 'http://%s/sitemap.xml' % Site.objects.get_current().domain

        raise InvalidSitemapNotifierConfiguration('Cannot determine the sitemap URL to ping!')

    def ready_to_ping(self, now=None):
        if now is None:
            now = time.time()
        return self.last_ping is None or now - self.last_ping >= self.delay

    def notify(self, instance=None, sitemap_url=None):
        """Announce a sitemap change unless it is inside the delay window

        Returns True when a ping burst was dispatched (or queued), False
        when notifications are disabled or the change was debounced.
        """

        if not self.enabled:
            logger.debug('Sitemap notifications are disabled')
            return False

        if sitemap_url is None:
            sitemap_url = self.resolve_sitemap_url(instance)

        with self._lock:
            now = time.time()
            if not self.ready_to_ping(now):
                logger.debug('Skipping sitemap ping for %s, last ping was %d seconds ago',
                             sitemap_url, now - self.last_ping)
                return False
            previous_ping, self.last_ping = self.last_ping, now

        if self.background:
            from .tasks import ping_sitemap

            logger.debug('Queueing sitemap ping for %s', sitemap_url)
            try:
                ping_sitemap.delay(sitemap_url)
            except Exception:
                logger.exception('Could not queue sitemap ping for %s', sitemap_url)
                with self._lock:
                    # Nothing was sent, so the previous ping still opens the window
                    if self.last_ping == now:
                        self.last_ping = previous_ping
                return False
        else:
            self.ping_all(sitemap_url)
        return True

    def ping_all(self, sitemap_url):
        '''Ping every configured search engine, tolerating individual failures

        Templates are all formatted before the first request, so a broken
        template raises InvalidSitemapNotifierConfiguration without pinging
        anyone.
        '''

        ping_urls = [format_ping_url(template, sitemap_url) for template in self.ping_urls]

        results = {}
        for ping_url in ping_urls:
            try:
                results[ping_url] = self.ping(ping_url)
            except requests.RequestException as exc:
                logger.warning('Sitemap ping to %s failed: %s', ping_url, exc)
                results[ping_url] = None
        return results

    def ping(self, ping_url):
        logger.info('Pinging %s', ping_url)
        response = requests.get(ping_url, timeout=self.timeout)
        response.raise_for_status()
        return response


#: The notifier used by the model signal handlers and the Celery task
notifier = SitemapNotifier()
