"""
SpeciesBoard Backend — Photo Service (Catalog Queries & Uploads)
================================================================

What:  Uploads into, and every listing of, the append-only `photos` table.
How:   Validates required fields, issues one SELECT or INSERT, and turns the
       stored bytes into `data:image/jpeg;base64,...` strings.
Who:   Called by the photo route handlers with a per-request session.

Image Encoding:
    Images are always labelled image/jpeg, whatever format was uploaded.
    Browsers sniff the payload, so PNG uploads still render.

Upload Flow:
    ┌───────────┐    ┌────────────────┐    ┌──────────────┐    ┌──────────┐
    │  Route    │───▶│ Required       │───▶│ Size & date  │───▶│ INSERT   │
    │ (form)    │    │ fields present │    │ validation   │    │ RETURNING│
    └───────────┘    └────────────────┘    └──────────────┘    └──────────┘
                                                                    │
                                                               COMMIT before
                                                               the response
"""

import base64
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from speciesboard.config import settings
from speciesboard.exceptions import DatabaseError, ValidationError
from speciesboard.models.photo import Photo
from speciesboard.schemas.photo import (
    PhotoDetail,
    PhotoItem,
    PhotoRecord,
    SpeciesCountPhoto,
    UploadResponse,
)
from speciesboard.services.validation import require

logger = logging.getLogger(__name__)

IMAGE_MEDIA_TYPE = "image/jpeg"
SORT_ORDERS = ("asc", "desc")


def to_data_uri(data: bytes, media_type: str = IMAGE_MEDIA_TYPE) -> str:
    """Encode raw bytes as a base64 data-URI."""
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def parse_upload_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse the optional `date` form field.

    Returns:
        None when the field is absent or blank (the server time is used),
        otherwise a timezone-aware datetime. Naive values are taken as UTC.

    Raises:
        ValidationError: value is not an ISO 8601 date or datetime
    """
    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(
            message=f"Invalid date '{value}'. Use ISO 8601, e.g. 2024-05-01T12:30:00Z",
            field="date",
        )
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class PhotoService:
    """Business logic layer for photo operations."""

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_by_species(self, db: AsyncSession) -> List[PhotoItem]:
        """Every photo, species A→Z."""
        query = select(Photo).order_by(Photo.species.asc(), Photo.id.asc())
        photos = await self._fetch_photos(db, query, "photos by species")
        return [
            PhotoItem(
                login=photo.login,
                location=photo.location,
                species=photo.species,
                image=to_data_uri(photo.image),
            )
            for photo in photos
        ]

    async def list_for_login(
        self, db: AsyncSession, login: Optional[str], order: str = "asc"
    ) -> List[PhotoDetail]:
        """
        A login's photos in upload order (`asc`) or newest first (`desc`).

        Ties on upload_date fall back to id in the same direction, so the two
        orders are exact reverses of each other.
        """
        login = require(login, "login", "Login")
        if order not in SORT_ORDERS:
            raise ValidationError(
                message=f"Invalid sort order '{order}'. Must be one of: {', '.join(SORT_ORDERS)}",
                field="order",
            )

        if order == "asc":
            ordering = (Photo.upload_date.asc(), Photo.id.asc())
        else:
            ordering = (Photo.upload_date.desc(), Photo.id.desc())

        query = select(Photo).where(Photo.login == login).order_by(*ordering)
        photos = await self._fetch_photos(db, query, f"photos for login ({order})")
        return [self._detail(photo) for photo in photos]

    async def list_for_login_and_species(
        self, db: AsyncSession, login: Optional[str], species: Optional[str]
    ) -> List[PhotoDetail]:
        """A login's photos of one species, newest first."""
        login = require(login, "login", "Login")
        species = require(species, "species", "Species")

        query = (
            select(Photo)
            .where(Photo.login == login, Photo.species == species)
            .order_by(Photo.upload_date.desc(), Photo.id.desc())
        )
        photos = await self._fetch_photos(db, query, "photos for login and species")
        return [self._detail(photo) for photo in photos]

    async def list_by_species_count(
        self, db: AsyncSession, login: Optional[str]
    ) -> List[SpeciesCountPhoto]:
        """
        A login's photos grouped by how often each species appears.

        Query plan:
            WITH counts AS (
                SELECT species, COUNT(*) AS species_count
                FROM photos WHERE login = :login GROUP BY species
            )
            SELECT photos.*, counts.species_count
            FROM photos JOIN counts USING (species)
            WHERE photos.login = :login
            ORDER BY species_count DESC, species ASC, upload_date DESC
        """
        login = require(login, "login", "Login")

        counts = (
            select(Photo.species, func.count(Photo.id).label("species_count"))
            .where(Photo.login == login)
            .group_by(Photo.species)
            .subquery()
        )
        query = (
            select(Photo, counts.c.species_count)
            .join(counts, Photo.species == counts.c.species)
            .where(Photo.login == login)
            .order_by(
                counts.c.species_count.desc(),
                Photo.species.asc(),
                Photo.upload_date.desc(),
                Photo.id.desc(),
            )
        )

        try:
            result = await db.execute(query)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error grouping photos for %s: %s", login, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve photos. Please try again.",
                context={"query": "species by count", "error_type": type(e).__name__},
            )

        return [
            SpeciesCountPhoto(
                **self._detail(photo).model_dump(),
                species_count=species_count,
            )
            for photo, species_count in rows
        ]

    # ── Writes ────────────────────────────────────────────────────────────

    async def upload(
        self,
        db: AsyncSession,
        login: Optional[str],
        location: Optional[str],
        species: Optional[str],
        content: Optional[bytes],
        date: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> UploadResponse:
        """
        Store an uploaded photo.

        Args:
            db: Async database session
            login, location, species: Form fields (required)
            content: Raw image bytes (required, non-empty, ≤ MAX_UPLOAD_SIZE)
            date: Optional ISO 8601 upload date; server time when absent
            content_length: Size reported by the multipart parser, if any

        Returns:
            UploadResponse with the stored record, minus the image bytes

        Raises:
            ValidationError: missing field, bad date, empty or oversized image (→ 400)
            DatabaseError: INSERT failed (→ 500)
        """
        login = require(login, "login", "Login")
        location = require(location, "location", "Location")
        species = require(species, "species", "Species")
        if not content:
            raise ValidationError(message="Image is required", field="image")
        self.validate_size(content_length, len(content))
        upload_date = parse_upload_date(date) or datetime.now(timezone.utc)

        try:
            result = await db.execute(
                insert(Photo)
                .values(
                    login=login,
                    location=location,
                    species=species,
                    image=content,
                    upload_date=upload_date,
                )
                .returning(Photo.login, Photo.location, Photo.species, Photo.upload_date)
            )
            row = result.one()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error storing photo for %s: %s", login, type(e).__name__)
            raise DatabaseError(
                message="Could not save the photo. Please try again.",
                context={"login": login, "error_type": type(e).__name__},
            )

        logger.info(
            "Photo stored: login=%s species=%s size=%d bytes",
            login,
            species,
            len(content),
        )
        return UploadResponse(
            message=f"Photo from player {login} has been added",
            image=PhotoRecord(
                login=row.login,
                location=row.location,
                species=row.species,
                date=row.upload_date,
            ),
        )

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject uploads above settings.max_upload_size.

        Checks the size reported by the multipart parser first, then the
        actual byte count.
        """
        max_mb = settings.max_upload_size / (1024 * 1024)

        if content_length and content_length > settings.max_upload_size:
            raise ValidationError(
                message=f"Image size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="image",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_upload_size:
            raise ValidationError(
                message=f"Image size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _detail(photo: Photo) -> PhotoDetail:
        return PhotoDetail(
            login=photo.login,
            location=photo.location,
            species=photo.species,
            date=photo.upload_date,
            image=to_data_uri(photo.image),
        )

    @staticmethod
    async def _fetch_photos(db: AsyncSession, query, what: str) -> List[Photo]:
        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing %s: %s", what, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve photos. Please try again.",
                context={"query": what, "error_type": type(e).__name__},
            )


photo_service = PhotoService()
