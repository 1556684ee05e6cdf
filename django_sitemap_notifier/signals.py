# encoding: utf-8
"""
This module connects the model lifecycle signals to the sitemap notifier and
defines a `sitemap_changed` signal other apps can send to request a ping
directly.

Models listed in SITEMAP_NOTIFIER_MODELS trigger a ping after being created,
updated or deleted. A model can veto individual notifications by defining
`notify_sitemap()` and can point at its own sitemap by defining
`sitemap_url`.

When sending `sitemap_changed`, sender can be a sitemap URL string, or the
model class together with the changed object as `instance`. Objects are
handled like a saved instance, minus the watch list check. Unsaved and
deleted objects are fine since only the class is used as sender.

Example:
>>> sitemap_changed.send("http://www.example.com/sitemap.xml")

Or:
>>> sitemap_changed.send(sender=type(obj), instance=obj)
"""
import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal

from .notifier import notifier

logger = logging.getLogger(__name__)


sitemap_changed = Signal()


def wants_notification(instance):
    flag = getattr(instance, 'notify_sitemap', True)
    if callable(flag):
        flag = flag()
    return bool(flag)


def notify_change(instance, action):
    if not notifier.notify_of_changes_to(instance, action):
        return False
    if not wants_notification(instance):
        logger.debug('%r declined a sitemap notification for %s', instance, action)
        return False
    return notifier.notify(instance)


def post_save_handler(sender, instance, created=False, raw=False, **kwargs):
    if raw:
        return
    notify_change(instance, 'create' if created else 'update')


def post_delete_handler(sender, instance, **kwargs):
    notify_change(instance, 'delete')


def sitemap_changed_handler(sender, instance=None, **kwargs):
    if instance is None:
        if isinstance(sender, str):
            return notifier.notify(sitemap_url=sender)
        return notifier.notify()
    if not wants_notification(instance):
        return False
    return notifier.notify(instance)

sitemap_changed.connect(sitemap_changed_handler)


def connect_signals():
    post_save.connect(post_save_handler, dispatch_uid='sitemap_notifier_post_save')
    post_delete.connect(post_delete_handler, dispatch_uid='sitemap_notifier_post_delete')


def disconnect_signals():
    post_save.disconnect(dispatch_uid='sitemap_notifier_post_save')
    post_delete.disconnect(dispatch_uid='sitemap_notifier_post_delete')
