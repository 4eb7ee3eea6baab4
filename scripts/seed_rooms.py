#!/usr/bin/env python3
"""Seed the room catalog with room types and rooms.

Existing room types and rooms (matched by name / room number) are updated in
place, so the script can be re-run safely.
"""

import asyncio
from decimal import Decimal

from sqlalchemy import select

from app.database import AsyncSessionLocal, init_db
from app.models.room import Room, RoomType

ROOM_TYPES = [
    ("Standard", "Queen bed, city view", Decimal("8000.00"), 2),
    ("Deluxe", "King bed, balcony", Decimal("12500.00"), 3),
    ("Family", "Two queen beds and a sofa bed", Decimal("16000.00"), 5),
    ("Suite", "Separate lounge, king bed", Decimal("25000.00"), 4),
]

# room_number, floor, room type name
ROOMS = [
    ("101", 1, "Standard"),
    ("102", 1, "Standard"),
    ("103", 1, "Family"),
    ("201", 2, "Deluxe"),
    ("202", 2, "Deluxe"),
    ("203", 2, "Family"),
    ("301", 3, "Suite"),
]


async def seed_rooms(create_tables: bool = False) -> None:
    """Create or update the catalog."""
    if create_tables:
        await init_db()

    async with AsyncSessionLocal() as session:
        types: dict[str, RoomType] = {}
        for name, description, base_price, max_occupancy in ROOM_TYPES:
            result = await session.execute(select(RoomType).where(RoomType.name == name))
            room_type = result.scalar_one_or_none()
            if room_type:
                room_type.description = description
                room_type.base_price = base_price
                room_type.max_occupancy = max_occupancy
                print(f"Updated room type: {name}")
            else:
                room_type = RoomType(
                    name=name,
                    description=description,
                    base_price=base_price,
                    max_occupancy=max_occupancy,
                )
                session.add(room_type)
                print(f"Created room type: {name}")
            types[name] = room_type
        await session.flush()

        for room_number, floor, type_name in ROOMS:
            result = await session.execute(select(Room).where(Room.room_number == room_number))
            room = result.unique().scalar_one_or_none()
            if room:
                room.floor = floor
                room.room_type_id = types[type_name].id
                print(f"Updated room: {room_number}")
            else:
                session.add(Room(room_number=room_number, floor=floor, room_type_id=types[type_name].id))
                print(f"Created room: {room_number} ({type_name})")

        await session.commit()

    print(f"Catalog ready: {len(ROOM_TYPES)} room types, {len(ROOMS)} rooms")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed the room catalog")
    parser.add_argument("--create-tables", action="store_true", help="Create tables first")
    args = parser.parse_args()

    asyncio.run(seed_rooms(create_tables=args.create_tables))
