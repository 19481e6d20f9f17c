"""
SpeciesBoard Backend — Photo SQLAlchemy Model
=============================================

What:  ORM model for the append-only `photos` table.
Who:   Used by PhotoService for uploads and every catalog query.

Table Notes:
    - id is a surrogate key; it also breaks ties between photos that share
      an upload_date so ascending and descending listings mirror each other.
    - login references players.login by value only; no foreign key.
    - image holds the raw uploaded bytes (bytea on Postgres).
    - upload_date is timezone-aware and defaults to the time the server
      received the upload.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from speciesboard.database import Base


class Photo(Base):
    """A species-tagged photo uploaded by a player."""

    __tablename__ = "photos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    login: Mapped[str] = mapped_column(String(255), nullable=False)

    location: Mapped[str] = mapped_column(Text, nullable=False)

    species: Mapped[str] = mapped_column(String(255), nullable=False)

    image: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Every per-player listing filters on login and sorts by upload_date.
    __table_args__ = (
        Index("idx_photos_login_upload_date", "login", "upload_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Photo(id={self.id}, login='{self.login}', species='{self.species}', "
            f"upload_date='{self.upload_date}')>"
        )
