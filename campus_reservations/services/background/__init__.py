"""
Background jobs run outside the request cycle.
"""

from campus_reservations.services.background.expiry_sweeper import ExpirySweeper

__all__ = ["ExpirySweeper"]
