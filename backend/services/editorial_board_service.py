"""
Editorial Board Service - the journal's public masthead.
"""

import logging
from typing import List

from fastapi import Depends
from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from exceptions import NotFoundError
from models import BoardMemberRole, EditorialBoardMember
from schemas.editorial_board import BoardMemberCreate, BoardMemberUpdate

logger = logging.getLogger(__name__)

# Masthead order: editor-in-chief first, advisors last
ROLE_ORDER = [
    BoardMemberRole.EDITOR_IN_CHIEF,
    BoardMemberRole.ASSOCIATE_EDITOR,
    BoardMemberRole.BOARD_MEMBER,
    BoardMemberRole.INTERNATIONAL_ADVISOR,
]


class EditorialBoardService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_active(self) -> List[EditorialBoardMember]:
        """Public list: active members by display_order."""
        result = await self.db.execute(
            select(EditorialBoardMember)
            .where(EditorialBoardMember.is_active == True)
            .order_by(EditorialBoardMember.display_order.asc(), EditorialBoardMember.id.asc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[EditorialBoardMember]:
        """Admin list: every member, grouped by role, then display_order."""
        role_rank = case(
            {role: rank for rank, role in enumerate(ROLE_ORDER)},
            value=EditorialBoardMember.role,
            else_=len(ROLE_ORDER),
        )
        result = await self.db.execute(
            select(EditorialBoardMember)
            .order_by(role_rank, EditorialBoardMember.display_order.asc(), EditorialBoardMember.id.asc())
        )
        return list(result.scalars().all())

    async def _get(self, member_id: int) -> EditorialBoardMember:
        member = await self.db.get(EditorialBoardMember, member_id)
        if member is None:
            raise NotFoundError("Board member not found")
        return member

    async def create(self, data: BoardMemberCreate) -> EditorialBoardMember:
        member = EditorialBoardMember(**data.model_dump())
        self.db.add(member)
        await self.db.commit()
        await self.db.refresh(member)
        logger.info(f"Added board member {member.id}: {member.name}")
        return member

    async def update(self, member_id: int, data: BoardMemberUpdate) -> EditorialBoardMember:
        member = await self._get(member_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(member, field, value)
        await self.db.commit()
        await self.db.refresh(member)
        logger.info(f"Updated board member {member_id}")
        return member

    async def delete(self, member_id: int) -> None:
        member = await self._get(member_id)
        await self.db.delete(member)
        await self.db.commit()
        logger.info(f"Deleted board member {member_id}")


async def get_editorial_board_service(
    db: AsyncSession = Depends(get_async_db)
) -> EditorialBoardService:
    return EditorialBoardService(db)
