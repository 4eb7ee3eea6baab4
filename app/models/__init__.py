"""Database models."""

from app.core.immutability import register_immutability_enforcement
from app.models.booking import Booking, BookingStatusChange
from app.models.room import Room, RoomType

register_immutability_enforcement()

__all__ = [
    # Catalog
    "RoomType",
    "Room",
    # Booking
    "Booking",
    "BookingStatusChange",
]
