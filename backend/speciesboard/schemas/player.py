"""
SpeciesBoard Backend — Player Request/Response Schemas
======================================================

What:  Pydantic models for the leaderboard endpoints.
How:   Request models declare every field Optional so that a missing field
       reaches PlayerService, which reports it as a 400 validation_error
       rather than FastAPI's generic 422.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class IncreasePointsRequest(BaseModel):
    login: Optional[str] = Field(default=None, description="Player login")


class AddPlayerRequest(BaseModel):
    login: Optional[str] = Field(default=None, description="New player login")
    password: Optional[str] = Field(default=None, description="New player password")


class ChangePasswordRequest(BaseModel):
    """Body of PUT /change-password. Clients send camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    login: Optional[str] = Field(default=None)
    old_password: Optional[str] = Field(default=None, alias="oldPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PlayerScore(BaseModel):
    """One leaderboard row: returned by /top3, /all/alphabetical, /all/points."""

    login: str
    points: int

    model_config = ConfigDict(from_attributes=True)


class PlayerCredentials(BaseModel):
    """
    Login/password pair returned by GET /all/logins.

    SECURITY: this exposes stored plaintext passwords to any caller.
    """

    login: str
    password: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PlayerMilitary(BaseModel):
    login: str
    military_flag: int

    model_config = ConfigDict(from_attributes=True)


class PlayerCreated(BaseModel):
    """Row returned after add-player. The password is never echoed."""

    login: str
    points: int
    military_flag: int

    model_config = ConfigDict(from_attributes=True)


class IncreasePointsResponse(BaseModel):
    message: str = Field(description="Human-readable confirmation")
    player: PlayerScore


class AddPlayerResponse(BaseModel):
    message: str = Field(description="Human-readable confirmation")
    player: PlayerCreated


class MessageResponse(BaseModel):
    message: str
