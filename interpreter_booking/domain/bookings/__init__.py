"""
Bookings Domain

Booking lifecycle, interpreter offers and the single confirmation path.
"""

from .router import assignments_router, router

__all__ = ["router", "assignments_router"]
