"""Room catalog models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base

if TYPE_CHECKING:
    from app.models.booking import Booking


class RoomType(Base):
    """Room category with its nightly base price."""

    __tablename__ = "room_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    rooms: Mapped[list["Room"]] = relationship("Room", back_populates="room_type")

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_room_types_base_price_non_negative"),
        CheckConstraint("max_occupancy > 0", name="ck_room_types_max_occupancy_positive"),
    )


class Room(Base):
    """Physical room."""

    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    floor: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    room_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("room_types.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="available"
    )  # available, maintenance, out_of_service
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    room_type: Mapped["RoomType"] = relationship(
        "RoomType", back_populates="rooms", lazy="joined", innerjoin=True
    )
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="room")

    @property
    def is_available(self) -> bool:
        """Catalog availability flag; occupancy comes from bookings."""
        return self.status == "available"
