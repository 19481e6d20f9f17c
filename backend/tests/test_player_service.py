"""
SpeciesBoard Backend — Player Service Unit Tests
================================================

What:  Tests for PlayerService validation, error mapping and SQL behaviour.
How:   Mock sessions for the error paths; an in-memory SQLite database for
       the statements themselves.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from speciesboard.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from speciesboard.models.player import Player
from speciesboard.services.player_service import PlayerService
from speciesboard.services.validation import require


class TestPlayerServiceValidation:
    """Missing fields are rejected before any SQL runs."""

    def setup_method(self):
        self.service = PlayerService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("login", [None, ""])
    async def test_increase_points_requires_login(self, mock_db_session, login):
        with pytest.raises(ValidationError, match="Login is required"):
            await self.service.increase_points(mock_db_session, login)
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_add_player_requires_password(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.add_player(mock_db_session, "alice", None)
        assert exc_info.value.field == "password"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_change_password_requires_new_password(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.change_password(mock_db_session, "alice", "old", "")
        assert exc_info.value.field == "newPassword"

    def test_require_reports_field_and_label(self):
        assert require("alice", "login", "Login") == "alice"
        with pytest.raises(ValidationError, match="Species is required") as exc_info:
            require("", "species", "Species")
        assert exc_info.value.context == {"field": "species"}


class TestPlayerServiceErrorMapping:
    """Store failures are translated into the application exceptions."""

    def setup_method(self):
        self.service = PlayerService()

    @pytest.mark.asyncio
    async def test_add_player_duplicate_raises_conflict(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=IntegrityError("INSERT INTO players", {}, Exception("duplicate key"))
        )
        with pytest.raises(ConflictError, match="alice"):
            await self.service.add_player(mock_db_session, "alice", "pw")

    @pytest.mark.asyncio
    async def test_add_player_other_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("INSERT INTO players", {}, Exception("connection lost"))
        )
        with pytest.raises(DatabaseError) as exc_info:
            await self.service.add_player(mock_db_session, "alice", "pw")
        assert exc_info.value.context["error_type"] == "OperationalError"
        assert "connection lost" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_add_player_commit_failure_raises_database_error(self, mock_db_session):
        mock_db_session.commit = AsyncMock(
            side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))
        )
        with pytest.raises(DatabaseError):
            await self.service.add_player(mock_db_session, "alice", "pw")
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_increase_points_commits_before_returning(self, mock_db_session):
        hit = MagicMock()
        hit.one_or_none.return_value = MagicMock(login="alice", points=3)
        mock_db_session.execute.return_value = hit

        await self.service.increase_points(mock_db_session, "alice")

        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_increase_points_lost_creation_race_reports_increase(self, mock_db_session):
        mock_db_session.get_bind = MagicMock()
        mock_db_session.get_bind.return_value.dialect.name = "sqlite"
        missed = MagicMock()
        missed.one_or_none.return_value = None
        retried = MagicMock()
        retried.one.return_value = MagicMock(login="alice", points=2)
        mock_db_session.execute = AsyncMock(side_effect=[missed, missed, retried])

        result = await self.service.increase_points(mock_db_session, "alice")

        assert mock_db_session.execute.await_count == 3
        assert result.player.points == 2
        assert result.message == "Points for player alice increased by 1"

    @pytest.mark.asyncio
    async def test_change_password_unknown_login(self, mock_db_session):
        update_result = MagicMock()
        update_result.one_or_none.return_value = None
        mock_db_session.execute.return_value = update_result
        mock_db_session.scalar = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await self.service.change_password(mock_db_session, "ghost", "a", "b")

    @pytest.mark.asyncio
    async def test_change_password_wrong_old_password(self, mock_db_session):
        update_result = MagicMock()
        update_result.one_or_none.return_value = None
        mock_db_session.execute.return_value = update_result
        mock_db_session.scalar = AsyncMock(return_value="alice")

        with pytest.raises(UnauthorizedError):
            await self.service.change_password(mock_db_session, "alice", "wrong", "new")

    @pytest.mark.asyncio
    async def test_listing_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("timeout"))
        )
        with pytest.raises(DatabaseError):
            await self.service.top_players(mock_db_session)


class TestPlayerServiceQueries:
    """Statements run against an in-memory SQLite database."""

    def setup_method(self):
        self.service = PlayerService()

    async def _seed(self, session, scores):
        for login, points in scores.items():
            session.add(Player(login=login, points=points, military_flag=0, password="pw"))
        await session.commit()

    @pytest.mark.asyncio
    async def test_top_players_limited_and_sorted(self, db_session):
        await self._seed(db_session, {"ann": 5, "bob": 9, "cid": 1, "dan": 7, "eve": 9})

        top = await self.service.top_players(db_session)

        assert [(p.login, p.points) for p in top] == [("bob", 9), ("eve", 9), ("dan", 7)]

    @pytest.mark.asyncio
    async def test_alphabetical_is_permutation_of_points_order(self, db_session):
        await self._seed(db_session, {"zoe": 3, "adam": 8, "mia": 5})

        alphabetical = await self.service.list_alphabetical(db_session)
        by_points = await self.service.list_by_points(db_session)

        assert [p.login for p in alphabetical] == ["adam", "mia", "zoe"]
        assert [p.points for p in by_points] == [8, 5, 3]
        assert sorted(alphabetical, key=lambda p: p.login) == sorted(by_points, key=lambda p: p.login)

    @pytest.mark.asyncio
    async def test_increase_points_existing_player(self, db_session):
        await self._seed(db_session, {"alice": 4})

        result = await self.service.increase_points(db_session, "alice")

        assert result.player.points == 5
        assert "increased" in result.message
        stored = await db_session.get(Player, "alice", populate_existing=True)
        assert stored.points == 5
        assert stored.password == "pw"
        assert stored.military_flag == 0

    @pytest.mark.asyncio
    async def test_increase_points_creates_unknown_player(self, db_session):
        result = await self.service.increase_points(db_session, "newbie")

        assert result.player.login == "newbie"
        assert result.player.points == 1
        assert "added with 1 point" in result.message
        stored = await db_session.get(Player, "newbie")
        assert stored.password is None

    @pytest.mark.asyncio
    async def test_increase_points_existing_zero_point_player_via_insert_path(self, db_session):
        await self._seed(db_session, {"alice": 0})
        real_execute = db_session.execute
        calls = []

        async def first_update_misses(statement, *args, **kwargs):
            calls.append(statement)
            if len(calls) == 1:
                missed = MagicMock()
                missed.one_or_none.return_value = None
                return missed
            return await real_execute(statement, *args, **kwargs)

        with patch.object(db_session, "execute", new=first_update_misses):
            result = await self.service.increase_points(db_session, "alice")

        assert result.message == "Points for player alice increased by 1"
        assert result.player.points == 1
        stored = await db_session.get(Player, "alice", populate_existing=True)
        assert stored.points == 1
        assert stored.password == "pw"

    @pytest.mark.asyncio
    async def test_change_password_mismatch_leaves_row_untouched(self, db_session):
        await self._seed(db_session, {"alice": 0})

        with pytest.raises(UnauthorizedError):
            await self.service.change_password(db_session, "alice", "nope", "hacked")

        password = await db_session.scalar(select(Player.password).where(Player.login == "alice"))
        assert password == "pw"

    @pytest.mark.asyncio
    async def test_change_password_success(self, db_session):
        await self._seed(db_session, {"alice": 0})

        result = await self.service.change_password(db_session, "alice", "pw", "s3cret")

        assert "alice" in result.message
        password = await db_session.scalar(select(Player.password).where(Player.login == "alice"))
        assert password == "s3cret"
