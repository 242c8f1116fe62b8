"""Utility helpers."""

from campus_reservations.utils.datetime_utils import Clock, DateTimeHelper

__all__ = ["Clock", "DateTimeHelper"]
