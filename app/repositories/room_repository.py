"""Room catalog queries."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.room import Room


class RoomRepository:
    """Read-only access to rooms and their types."""

    async def get_room(self, db: AsyncSession, room_id: int, for_update: bool = False) -> Room | None:
        """Get a room with its type loaded.

        ``for_update`` takes a row lock on the room for the rest of the
        transaction on backends that support ``SELECT ... FOR UPDATE``.
        """
        query = select(Room).where(Room.id == room_id)
        if for_update:
            query = query.with_for_update(of=Room)
        result = await db.execute(query)
        return result.unique().scalar_one_or_none()

    async def list_rooms(self, db: AsyncSession, status: str | None = None) -> list[Room]:
        query = select(Room).order_by(Room.room_number)
        if status:
            query = query.where(Room.status == status)
        result = await db.execute(query)
        return list(result.unique().scalars().all())


room_repository = RoomRepository()
