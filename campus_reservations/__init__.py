"""
Campus reservation service.

Facility bookings pass through a per-resource, sequential multi-step
approval workflow with time-slot conflict detection and expiry.
"""

__version__ = "1.0.0"
