"""Room catalog Pydantic schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class RoomTypeResponse(BaseModel):
    """Schema for room type response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    base_price: Decimal
    max_occupancy: int


class RoomResponse(BaseModel):
    """Schema for room response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    room_number: str
    floor: int
    status: str
    is_available: bool
    room_type: RoomTypeResponse
