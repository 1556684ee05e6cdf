from django.db import models


class Article(models.Model):
    title = models.CharField(max_length=200, blank=True)


class Product(models.Model):
    name = models.CharField(max_length=200, blank=True)

    def sitemap_url(self):
        return 'http://mycustomurl.com/sitemapfile.xml'


class Member(models.Model):
    name = models.CharField(max_length=200, blank=True)


class Website(models.Model):
    has_sitemap = models.BooleanField(default=True)

    def notify_sitemap(self):
        return self.has_sitemap


class Page(models.Model):
    notify_sitemap = models.BooleanField(default=True)
    sitemap_url = models.CharField(max_length=200, blank=True)
