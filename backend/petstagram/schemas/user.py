"""
Petstagram Backend — User Authentication Schemas
==================================================

The password hash never appears in a response model.
"""

import uuid

from pydantic import Field

from petstagram.schemas.common import CamelModel, UTCDateTime


class CredentialsCreate(CamelModel):
    """Body of POST /api/users."""
    user_id: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8, max_length=1024)


class CredentialsVerify(CamelModel):
    """Body of POST /api/users/verify."""
    user_id: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024)


class UserAuthResponse(CamelModel):
    id: uuid.UUID
    user_id: str
    created_at: UTCDateTime


class VerifyResponse(CamelModel):
    user_id: str
    valid: bool
