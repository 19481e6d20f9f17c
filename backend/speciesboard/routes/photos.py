"""
SpeciesBoard Backend — Photo Catalog Route Handlers
===================================================

What:  HTTP endpoints for uploading and browsing species-tagged photos.
How:   Extracts query/form fields, delegates to PhotoService, returns JSON.
       All fields are declared optional here so a missing one surfaces as a
       400 validation_error from the service.

Routes:
    GET  /images-by-species      Every photo, species A→Z
    POST /upload-image           multipart: login, location, species, image, date?
    GET  /images/by-login/asc    A login's photos, oldest first
    GET  /images/by-login/desc   A login's photos, newest first
    GET  /images/by-species      A login's photos of one species
    GET  /species/by-count       A login's photos, most photographed species first
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from speciesboard.database import get_db_session
from speciesboard.schemas.common import ErrorResponse
from speciesboard.schemas.photo import (
    PhotoDetail,
    PhotoItem,
    SpeciesCountPhoto,
    UploadResponse,
)
from speciesboard.services.photo_service import photo_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Photos"])

_ERRORS = {
    400: {"description": "Required field missing or invalid", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "/images-by-species",
    response_model=List[PhotoItem],
    responses={500: _ERRORS[500]},
    summary="All photos sorted by species",
)
async def images_by_species(db: AsyncSession = Depends(get_db_session)) -> List[PhotoItem]:
    return await photo_service.list_by_species(db)


@router.post(
    "/upload-image",
    response_model=UploadResponse,
    responses=_ERRORS,
    summary="Upload a species photo",
    description=(
        "Multipart upload with login, location, species and an image file. "
        "An optional ISO 8601 `date` overrides the upload time."
    ),
)
async def upload_image(
    login: Optional[str] = Form(default=None),
    location: Optional[str] = Form(default=None),
    species: Optional[str] = Form(default=None),
    date: Optional[str] = Form(default=None),
    image: Optional[UploadFile] = File(default=None, description="Photo file"),
    db: AsyncSession = Depends(get_db_session),
) -> UploadResponse:
    content: Optional[bytes] = None
    content_length: Optional[int] = None

    try:
        if image is not None:
            # Reject on the parser's byte count before pulling the file into memory.
            content_length = image.size
            photo_service.validate_size(content_length, 0)
            content = await image.read()
            logger.info(
                "Received upload: filename=%s, size=%d bytes",
                image.filename or "unknown",
                len(content),
            )

        return await photo_service.upload(
            db,
            login=login,
            location=location,
            species=species,
            content=content,
            date=date,
            content_length=content_length,
        )
    finally:
        if image is not None:
            await image.close()


@router.get(
    "/images/by-login/asc",
    response_model=List[PhotoDetail],
    responses=_ERRORS,
    summary="A player's photos, oldest first",
)
async def images_by_login_asc(
    login: Optional[str] = Query(default=None, description="Player login"),
    db: AsyncSession = Depends(get_db_session),
) -> List[PhotoDetail]:
    return await photo_service.list_for_login(db, login, order="asc")


@router.get(
    "/images/by-login/desc",
    response_model=List[PhotoDetail],
    responses=_ERRORS,
    summary="A player's photos, newest first",
)
async def images_by_login_desc(
    login: Optional[str] = Query(default=None, description="Player login"),
    db: AsyncSession = Depends(get_db_session),
) -> List[PhotoDetail]:
    return await photo_service.list_for_login(db, login, order="desc")


@router.get(
    "/images/by-species",
    response_model=List[PhotoDetail],
    responses=_ERRORS,
    summary="A player's photos of one species, newest first",
)
async def images_by_login_and_species(
    species: Optional[str] = Query(default=None),
    login: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> List[PhotoDetail]:
    return await photo_service.list_for_login_and_species(db, login, species)


@router.get(
    "/species/by-count",
    response_model=List[SpeciesCountPhoto],
    responses=_ERRORS,
    summary="A player's photos grouped by species popularity",
)
async def species_by_count(
    login: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> List[SpeciesCountPhoto]:
    return await photo_service.list_by_species_count(db, login)
