"""
Petstagram Backend — User Credential Route Handlers
=====================================================

What:  Register credentials for a user ID and check a password.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from petstagram.database import get_db_session
from petstagram.schemas.common import ErrorResponse
from petstagram.schemas.user import (
    CredentialsCreate,
    CredentialsVerify,
    UserAuthResponse,
    VerifyResponse,
)
from petstagram.services.user_auth_service import user_auth_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post(
    "",
    status_code=201,
    response_model=UserAuthResponse,
    responses={409: {"description": "User already registered", "model": ErrorResponse}},
    summary="Register credentials",
)
async def create_credentials(
    body: CredentialsCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserAuthResponse:
    return await user_auth_service.create_credentials(
        db=db, user_id=body.user_id, password=body.password
    )


@router.post(
    "/verify",
    response_model=VerifyResponse,
    summary="Check a user's password",
)
async def verify_credentials(
    body: CredentialsVerify,
    db: AsyncSession = Depends(get_db_session),
) -> VerifyResponse:
    valid = await user_auth_service.verify_credentials(
        db=db, user_id=body.user_id, password=body.password
    )
    return VerifyResponse(user_id=body.user_id, valid=valid)
