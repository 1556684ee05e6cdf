from django.apps import AppConfig


class SitemapNotifierConfig(AppConfig):
    name = 'django_sitemap_notifier'
    verbose_name = 'Sitemap notifier'

    def ready(self):
        from .signals import connect_signals

        connect_signals()
