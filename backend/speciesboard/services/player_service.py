"""
SpeciesBoard Backend — Player Service (Leaderboard Queries)
===========================================================

What:  Every read and write against the `players` table.
How:   Each method checks the required fields, issues one parameterized
       statement (two for the fallbacks noted below), and maps rows to
       Pydantic response models.
Who:   Called by the leaderboard route handlers with a per-request session.

Write Semantics:
    increase_points  UPDATE ... RETURNING; if no row matched,
                     INSERT ... ON CONFLICT (login) DO NOTHING ... RETURNING.
                     An unknown login is created with 1 point. When a
                     concurrent request created the row first, the insert
                     returns nothing and the UPDATE runs again, so the
                     response reports an increment.
    change_password  One conditional UPDATE guarded by the old password.
                     Only when it matches nothing does a SELECT decide
                     between 404 (no such login) and 401 (wrong password).
    add_player       Plain INSERT; the primary-key violation becomes 409.

Every write commits before returning, inside the same error mapping, so a
failed commit is reported as a 500 rather than after the response is sent.

SECURITY: passwords are stored and compared as plaintext, and
list_credentials() returns them to any caller.
"""

import logging
from typing import List, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from speciesboard.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
)
from speciesboard.models.player import Player
from speciesboard.schemas.player import (
    AddPlayerResponse,
    IncreasePointsResponse,
    MessageResponse,
    PlayerCreated,
    PlayerCredentials,
    PlayerMilitary,
    PlayerScore,
)
from speciesboard.services.validation import require

logger = logging.getLogger(__name__)

TOP_PLAYERS_LIMIT = 3

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PlayerService:
    """
    Business logic layer for player operations.

    Error Handling Strategy:
        Validation happens before any SQL. SQLAlchemy errors are logged with
        their class name and re-raised as DatabaseError, which the global
        handler turns into a generic 500.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def top_players(self, db: AsyncSession) -> List[PlayerScore]:
        """The TOP_PLAYERS_LIMIT highest scores, ties broken by login."""
        query = (
            select(Player.login, Player.points)
            .order_by(Player.points.desc(), Player.login.asc())
            .limit(TOP_PLAYERS_LIMIT)
        )
        rows = await self._fetch_all(db, query, "top players")
        return [PlayerScore.model_validate(row) for row in rows]

    async def list_alphabetical(self, db: AsyncSession) -> List[PlayerScore]:
        query = select(Player.login, Player.points).order_by(Player.login.asc())
        rows = await self._fetch_all(db, query, "players by login")
        return [PlayerScore.model_validate(row) for row in rows]

    async def list_by_points(self, db: AsyncSession) -> List[PlayerScore]:
        query = (
            select(Player.login, Player.points)
            .order_by(Player.points.desc(), Player.login.asc())
        )
        rows = await self._fetch_all(db, query, "players by points")
        return [PlayerScore.model_validate(row) for row in rows]

    async def list_credentials(self, db: AsyncSession) -> List[PlayerCredentials]:
        """
        Every login with its stored password.

        SECURITY: kept for compatibility with the existing game client.
        Anyone who can reach the API can read every password.
        """
        query = select(Player.login, Player.password).order_by(Player.login.asc())
        rows = await self._fetch_all(db, query, "player credentials")
        return [PlayerCredentials.model_validate(row) for row in rows]

    async def list_military(self, db: AsyncSession) -> List[PlayerMilitary]:
        query = select(Player.login, Player.military_flag).order_by(Player.login.asc())
        rows = await self._fetch_all(db, query, "military flags")
        return [PlayerMilitary.model_validate(row) for row in rows]

    # ── Writes ────────────────────────────────────────────────────────────

    async def increase_points(
        self, db: AsyncSession, login: Optional[str]
    ) -> IncreasePointsResponse:
        """
        Add one point to `login`, creating the player with 1 point if needed.

        Args:
            db: Async database session
            login: Player login (required)

        Returns:
            IncreasePointsResponse with the updated {login, points}

        Raises:
            ValidationError: login missing (→ 400)
            DatabaseError: statement failed (→ 500)
        """
        login = require(login, "login", "Login")
        increment = (
            update(Player)
            .where(Player.login == login)
            .values(points=Player.points + 1)
            .returning(Player.login, Player.points)
            .execution_options(synchronize_session=False)
        )

        created = False
        try:
            row = (await db.execute(increment)).one_or_none()

            if row is None:
                create = (
                    self._insert_for(db)(Player)
                    .values(login=login, points=1)
                    .on_conflict_do_nothing(index_elements=[Player.login])
                    .returning(Player.login, Player.points)
                )
                row = (await db.execute(create)).one_or_none()
                created = row is not None

            if row is None:
                # Lost the race to a concurrent creator; the row exists now.
                row = (await db.execute(increment)).one()

            await db.commit()

        except SQLAlchemyError as e:
            logger.error("Database error increasing points for %s: %s", login, type(e).__name__)
            raise DatabaseError(
                message="Could not update the player's points. Please try again.",
                context={"login": login, "error_type": type(e).__name__},
            )

        if created:
            logger.info("Player created by increase-points: login=%s", login)
            message = f"Player {login} was added with 1 point"
        else:
            logger.info("Points increased: login=%s points=%d", row.login, row.points)
            message = f"Points for player {login} increased by 1"

        return IncreasePointsResponse(message=message, player=PlayerScore.model_validate(row))

    async def change_password(
        self,
        db: AsyncSession,
        login: Optional[str],
        old_password: Optional[str],
        new_password: Optional[str],
    ) -> MessageResponse:
        """
        Replace the stored password when `old_password` matches it exactly.

        Raises:
            ValidationError: any field missing (→ 400)
            NotFoundError: login does not exist (→ 404)
            UnauthorizedError: old password mismatch; row untouched (→ 401)
            DatabaseError: statement failed (→ 500)
        """
        login = require(login, "login", "Login")
        old_password = require(old_password, "oldPassword", "Old password")
        new_password = require(new_password, "newPassword", "New password")

        try:
            result = await db.execute(
                update(Player)
                .where(Player.login == login, Player.password == old_password)
                .values(password=new_password)
                .returning(Player.login)
                .execution_options(synchronize_session=False)
            )
            changed = result.one_or_none() is not None

            exists = True
            if changed:
                await db.commit()
            else:
                exists = await db.scalar(
                    select(Player.login).where(Player.login == login)
                ) is not None

        except SQLAlchemyError as e:
            logger.error("Database error changing password for %s: %s", login, type(e).__name__)
            raise DatabaseError(
                message="Could not change the password. Please try again.",
                context={"login": login, "error_type": type(e).__name__},
            )

        if not exists:
            raise NotFoundError(resource="player", resource_id=login)
        if not changed:
            logger.warning("Password change rejected for %s: old password mismatch", login)
            raise UnauthorizedError(message="The old password is incorrect")

        logger.info("Password changed: login=%s", login)
        return MessageResponse(message=f"Password for player {login} has been changed")

    async def add_player(
        self,
        db: AsyncSession,
        login: Optional[str],
        password: Optional[str],
    ) -> AddPlayerResponse:
        """
        Create a player with 0 points and military_flag 0.

        Raises:
            ValidationError: login or password missing (→ 400)
            ConflictError: login already taken; existing row untouched (→ 409)
            DatabaseError: statement failed (→ 500)
        """
        login = require(login, "login", "Login")
        password = require(password, "password", "Password")

        try:
            result = await db.execute(
                insert(Player)
                .values(login=login, points=0, military_flag=0, password=password)
                .returning(Player.login, Player.points, Player.military_flag)
            )
            row = result.one()
            await db.commit()
        except IntegrityError:
            logger.warning("Add player rejected: login %s already exists", login)
            raise ConflictError(
                message=f"Player '{login}' already exists",
                context={"login": login},
            )
        except SQLAlchemyError as e:
            logger.error("Database error adding player %s: %s", login, type(e).__name__)
            raise DatabaseError(
                message="Could not add the player. Please try again.",
                context={"login": login, "error_type": type(e).__name__},
            )

        logger.info("Player added: login=%s", login)
        return AddPlayerResponse(
            message=f"Player {login} has been added",
            player=PlayerCreated.model_validate(row),
        )

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _insert_for(db: AsyncSession):
        """The dialect-specific insert() that supports ON CONFLICT."""
        dialect = db.get_bind().dialect.name
        try:
            return _UPSERT_DIALECTS[dialect]
        except KeyError:
            raise DatabaseError(
                message="Increase-points is not supported on this database.",
                context={"dialect": dialect},
            )

    @staticmethod
    async def _fetch_all(db: AsyncSession, query, what: str):
        try:
            result = await db.execute(query)
            return result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing %s: %s", what, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve players. Please try again.",
                context={"query": what, "error_type": type(e).__name__},
            )


player_service = PlayerService()
