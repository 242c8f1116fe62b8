"""
Configuration package for the campus reservation service.

Environment settings and logging configuration.
"""

from campus_reservations.config.settings import settings, get_settings

__all__ = ['settings', 'get_settings']
