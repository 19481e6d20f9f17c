"""
SpeciesBoard Backend — Leaderboard Route Handlers
=================================================

What:  HTTP endpoints for reading and mutating player records.
How:   Each handler pulls the request fields, delegates to PlayerService,
       and returns its response model. Errors raised by the service are
       formatted by the global exception handlers in main.py.

Routes:
    GET  /top3               Three best scores
    GET  /all/alphabetical   All scores, login A→Z
    GET  /all/points         All scores, highest first
    GET  /all/logins         Login/password pairs (plaintext!)
    GET  /logins/military    Login/military_flag pairs
    PUT  /increase-points    +1 point, creating unknown logins
    PUT  /change-password    Replace password given the old one
    POST /add-player         Register a new login
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from speciesboard.database import get_db_session
from speciesboard.schemas.common import ErrorResponse
from speciesboard.schemas.player import (
    AddPlayerRequest,
    AddPlayerResponse,
    ChangePasswordRequest,
    IncreasePointsRequest,
    IncreasePointsResponse,
    MessageResponse,
    PlayerCredentials,
    PlayerMilitary,
    PlayerScore,
)
from speciesboard.services.player_service import player_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Players"])

_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.get(
    "/top3",
    response_model=List[PlayerScore],
    responses=_SERVER_ERROR,
    summary="Three highest-scoring players",
)
async def top3(db: AsyncSession = Depends(get_db_session)) -> List[PlayerScore]:
    return await player_service.top_players(db)


@router.get(
    "/all/alphabetical",
    response_model=List[PlayerScore],
    responses=_SERVER_ERROR,
    summary="All players sorted by login",
)
async def all_alphabetical(db: AsyncSession = Depends(get_db_session)) -> List[PlayerScore]:
    return await player_service.list_alphabetical(db)


@router.get(
    "/all/points",
    response_model=List[PlayerScore],
    responses=_SERVER_ERROR,
    summary="All players sorted by points, highest first",
)
async def all_points(db: AsyncSession = Depends(get_db_session)) -> List[PlayerScore]:
    return await player_service.list_by_points(db)


@router.get(
    "/all/logins",
    response_model=List[PlayerCredentials],
    responses=_SERVER_ERROR,
    summary="All logins with their passwords",
    description=(
        "Returns every login together with its stored plaintext password. "
        "Unauthenticated; kept for compatibility with the game client."
    ),
)
async def all_logins(db: AsyncSession = Depends(get_db_session)) -> List[PlayerCredentials]:
    return await player_service.list_credentials(db)


@router.get(
    "/logins/military",
    response_model=List[PlayerMilitary],
    responses=_SERVER_ERROR,
    summary="All logins with their military flag",
)
async def logins_military(db: AsyncSession = Depends(get_db_session)) -> List[PlayerMilitary]:
    return await player_service.list_military(db)


@router.put(
    "/increase-points",
    response_model=IncreasePointsResponse,
    responses={
        400: {"description": "Login missing", "model": ErrorResponse},
        **_SERVER_ERROR,
    },
    summary="Add one point to a player",
    description="Adds one point to the player. Unknown logins are created with 1 point.",
)
async def increase_points(
    payload: Optional[IncreasePointsRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> IncreasePointsResponse:
    payload = payload or IncreasePointsRequest()
    return await player_service.increase_points(db, payload.login)


@router.put(
    "/change-password",
    response_model=MessageResponse,
    responses={
        400: {"description": "Field missing", "model": ErrorResponse},
        401: {"description": "Old password incorrect", "model": ErrorResponse},
        404: {"description": "Player not found", "model": ErrorResponse},
        **_SERVER_ERROR,
    },
    summary="Change a player's password",
)
async def change_password(
    payload: Optional[ChangePasswordRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    payload = payload or ChangePasswordRequest()
    return await player_service.change_password(
        db,
        login=payload.login,
        old_password=payload.old_password,
        new_password=payload.new_password,
    )


@router.post(
    "/add-player",
    response_model=AddPlayerResponse,
    responses={
        400: {"description": "Login or password missing", "model": ErrorResponse},
        409: {"description": "Login already exists", "model": ErrorResponse},
        **_SERVER_ERROR,
    },
    summary="Register a new player",
)
async def add_player(
    payload: Optional[AddPlayerRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> AddPlayerResponse:
    payload = payload or AddPlayerRequest()
    return await player_service.add_player(db, payload.login, payload.password)
