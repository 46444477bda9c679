"""
Editorial board endpoints. Reading is public; changes are admin only.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from models import User
from schemas.editorial_board import BoardMember, BoardMemberCreate, BoardMemberUpdate
from services import auth_service
from services.editorial_board_service import EditorialBoardService, get_editorial_board_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/editorial-board", tags=["editorial-board"])


@router.get("", response_model=List[BoardMember], summary="Active board members")
async def list_board(service: EditorialBoardService = Depends(get_editorial_board_service)):
    return await service.list_active()


@router.get("/all", response_model=List[BoardMember], summary="All board members, by role")
async def list_all_members(
    current_user: User = Depends(auth_service.require_admin),
    service: EditorialBoardService = Depends(get_editorial_board_service),
):
    return await service.list_all()


@router.post("", response_model=BoardMember, status_code=status.HTTP_201_CREATED, summary="Add a board member")
async def create_member(
    body: BoardMemberCreate,
    current_user: User = Depends(auth_service.require_admin),
    service: EditorialBoardService = Depends(get_editorial_board_service),
):
    return await service.create(body)


@router.put("/{member_id}", response_model=BoardMember, summary="Update a board member")
async def update_member(
    member_id: int,
    body: BoardMemberUpdate,
    current_user: User = Depends(auth_service.require_admin),
    service: EditorialBoardService = Depends(get_editorial_board_service),
):
    return await service.update(member_id, body)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Remove a board member")
async def delete_member(
    member_id: int,
    current_user: User = Depends(auth_service.require_admin),
    service: EditorialBoardService = Depends(get_editorial_board_service),
):
    await service.delete(member_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
