"""
Cache invalidation signals
Automatically invalidate cached lists when the rows behind them change
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .model_cache import invalidate_master_list_cache, invalidate_project_options_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

# Model label -> master lists whose serialized rows embed it
MASTER_LIST_DEPENDENCIES = {
    'masters.Division': ['Division', 'Activity'],
    'masters.Activity': ['Activity'],
    'masters.Product': ['Product'],
    'masters.ResourceRole': ['ResourceRole', 'Resource'],
    'masters.Resource': ['Resource', 'ResourceRole'],
    'masters.ErrorCategory': ['ErrorCategory', 'ErrorSubCategory'],
    'masters.ErrorSubCategory': ['ErrorSubCategory'],
    'masters.DrawingDescription': ['DrawingDescription'],
}

# Models whose changes alter project dropdown labels
PROJECT_OPTION_SOURCES = {'projects.ProjectPlanning', 'masters.Product'}


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    Remember to call invalidate_all_lists() after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def invalidate_all_lists():
    """Manually invalidate every cached list"""
    names = set()
    for dependents in MASTER_LIST_DEPENDENCIES.values():
        names.update(dependents)
    for name in names:
        invalidate_master_list_cache(name)
    invalidate_project_options_cache()
    logger.info("Invalidated all cached lists (Manual)")


def _invalidate_for(label):
    for name in MASTER_LIST_DEPENDENCIES.get(label, []):
        invalidate_master_list_cache(name)
    if label in PROJECT_OPTION_SOURCES:
        invalidate_project_options_cache()


@receiver([post_save, post_delete])
def invalidate_list_caches(sender, instance, **kwargs):
    """Invalidate cached lists when master data or plannings change"""
    if is_suspended():
        return

    label = sender._meta.label
    if label not in MASTER_LIST_DEPENDENCIES and label not in PROJECT_OPTION_SOURCES:
        return

    # Dropped immediately and again once the transaction commits
    _invalidate_for(label)
    transaction.on_commit(lambda: _invalidate_for(label))
