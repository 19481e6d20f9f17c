"""
SpeciesBoard Backend — Player SQLAlchemy Model
==============================================

What:  ORM model for the `players` table (one row per login).
Who:   Used by PlayerService for every leaderboard query and mutation.

Table Notes:
    - login is the primary key; add-player relies on its uniqueness
      constraint to report duplicates as 409 Conflict.
    - password is stored as plaintext and is nullable: players created
      implicitly by increase-points have no password.
    - points only ever grows, one per increase-points call.
"""

from typing import Optional

from sqlalchemy import Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from speciesboard.database import Base


class Player(Base):
    """A leaderboard entry keyed by login."""

    __tablename__ = "players"

    login: Mapped[str] = mapped_column(String(255), primary_key=True)

    points: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    # Opaque flag, set once at creation and only ever read back.
    military_flag: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    # SECURITY: plaintext, compared with SQL equality.
    password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Player(login='{self.login}', points={self.points})>"
