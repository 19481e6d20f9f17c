"""
SpeciesBoard Backend — Photo Response Schemas
=============================================

What:  Pydantic models describing how photo rows are returned to clients.
How:   PhotoService encodes the raw image bytes into a data-URI string before
       building these models; the binary column itself never reaches JSON.

Shapes:
    PhotoItem          {login, location, species, image}          /images-by-species
    PhotoDetail        PhotoItem + date                           /images/by-login/*, /images/by-species
    SpeciesCountPhoto  PhotoDetail + species_count                /species/by-count
    PhotoRecord        {login, location, species, date}           /upload-image (no binary)
"""

from datetime import datetime

from pydantic import BaseModel, Field


class PhotoItem(BaseModel):
    login: str
    location: str
    species: str
    image: str = Field(description="data:image/jpeg;base64,<payload>")


class PhotoDetail(PhotoItem):
    date: datetime = Field(description="Upload timestamp (ISO 8601)")


class SpeciesCountPhoto(PhotoDetail):
    species_count: int = Field(description="How many photos of this species the login has")


class PhotoRecord(BaseModel):
    login: str
    location: str
    species: str
    date: datetime


class UploadResponse(BaseModel):
    message: str = Field(description="Human-readable confirmation embedding the login")
    image: PhotoRecord
