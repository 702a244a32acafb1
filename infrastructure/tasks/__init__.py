"""Celery task infrastructure package.

Importing this module wires together the configured Celery app and the
order payment polling tasks.
"""
from .config.celery import celery_app

__all__ = ["celery_app"]
