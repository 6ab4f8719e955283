from typing import Annotated

from fastapi import APIRouter, Body, Depends, status
from pydantic import UUID4

from app.dependencies import ViewerId, get_block_service, get_match_engine
from app.models.block import Block, Report
from app.models.like import Like
from app.models.match import Match, MatchStatus
from app.schemas.database_records import (
    CreateBlockRecord,
    LikeRecord,
    RemoveBlockRecord,
    UnlikeRecord,
)
from app.schemas.requests import ReportRequest
from app.services.block import BlockService
from app.services.match import MatchEngine

router = APIRouter(prefix="/interactions", tags=["interactions"])

MatchEngineDep = Annotated[MatchEngine, Depends(get_match_engine)]
BlockServiceDep = Annotated[BlockService, Depends(get_block_service)]


@router.post(
    "/like/{user_id}", response_model=LikeRecord, status_code=status.HTTP_201_CREATED
)
async def like_user(
    user_id: UUID4, viewer_id: ViewerId, engine: MatchEngineDep
) -> LikeRecord:
    """Like a user.

    Args:
        user_id: ID of the user to like
        viewer_id: The current viewer
        engine: Match engine

    Returns:
        The like, with the match it completed if any
    """
    return await engine.like_user(viewer_id, user_id)


@router.delete("/like/{user_id}", response_model=UnlikeRecord)
async def unlike_user(
    user_id: UUID4, viewer_id: ViewerId, engine: MatchEngineDep
) -> UnlikeRecord:
    """Remove a like, ending the match if there was one."""
    return await engine.unlike_user(viewer_id, user_id)


@router.get("/match/{user_id}", response_model=MatchStatus)
async def check_match(
    user_id: UUID4, viewer_id: ViewerId, engine: MatchEngineDep
) -> MatchStatus:
    return await engine.check_match(viewer_id, user_id)


@router.get("/matches", response_model=list[Match])
async def get_matches(viewer_id: ViewerId, engine: MatchEngineDep) -> list[Match]:
    return await engine.get_matches(viewer_id)


@router.get("/likes/given", response_model=list[Like])
async def get_likes_given(viewer_id: ViewerId, engine: MatchEngineDep) -> list[Like]:
    return await engine.get_likes_given(viewer_id)


@router.get("/likes/received", response_model=list[Like])
async def get_likes_received(
    viewer_id: ViewerId, engine: MatchEngineDep
) -> list[Like]:
    return await engine.get_likes_received(viewer_id)


@router.post(
    "/block/{user_id}",
    response_model=CreateBlockRecord,
    status_code=status.HTTP_201_CREATED,
)
async def block_user(
    user_id: UUID4, viewer_id: ViewerId, block_service: BlockServiceDep
) -> CreateBlockRecord:
    """Block a user.

    Args:
        user_id: ID of the user to block
        viewer_id: The current viewer
        block_service: Block service

    Returns:
        The created block relationship record
    """
    return await block_service.block(viewer_id, user_id)


@router.delete("/block/{user_id}", response_model=RemoveBlockRecord)
async def unblock_user(
    user_id: UUID4, viewer_id: ViewerId, block_service: BlockServiceDep
) -> RemoveBlockRecord:
    return await block_service.unblock(viewer_id, user_id)


@router.get("/blocks", response_model=list[Block])
async def get_blocked_users(
    viewer_id: ViewerId, block_service: BlockServiceDep
) -> list[Block]:
    return await block_service.get_blocked_users(viewer_id)


@router.post(
    "/report/{user_id}", response_model=Report, status_code=status.HTTP_201_CREATED
)
async def report_user(
    user_id: UUID4,
    viewer_id: ViewerId,
    block_service: BlockServiceDep,
    request: Annotated[ReportRequest | None, Body()] = None,
) -> Report:
    """Report a user as a fake account, or for the given reason."""
    reason = request.reason if request else None
    return await block_service.report(viewer_id, user_id, reason)
