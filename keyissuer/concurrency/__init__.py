"""Concurrency control utilities."""

from keyissuer.concurrency.locks import get_lock_count, hold_email_lock

__all__ = ["get_lock_count", "hold_email_lock"]
