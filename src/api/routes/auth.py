"""
src/api/routes/auth.py
=======================
POST /api/auth/login            username + password → bearer token
POST /api/auth/change-password  rotate the caller's password (Bearer)

bcrypt is deliberately slow, so both handlers run the vault in a worker
thread via asyncio.to_thread().
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Request

from src.api.auth    import Identity, require_user
from src.api.schemas import ChangePasswordRequest, ErrorResponse, LoginRequest, OkResponse, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/auth/login",
    response_model=TokenResponse,
    summary="Exchange credentials for a bearer token",
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def login(request: Request, body: LoginRequest) -> TokenResponse:
    vault  = request.app.state.vault
    tokens = request.app.state.tokens

    user  = await asyncio.to_thread(vault.authenticate, body.username, body.password)
    token = tokens.issue(user["username"])
    logger.info("login: user=%s", user["username"])
    return TokenResponse(token=token)


@router.post(
    "/auth/change-password",
    response_model=OkResponse,
    summary="Change the authenticated user's password",
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def change_password(
    request: Request,
    body:    ChangePasswordRequest,
    user:    Identity = Depends(require_user),
) -> OkResponse:
    vault = request.app.state.vault
    await asyncio.to_thread(vault.rotate_password, user.username, body.oldPassword, body.newPassword)
    return OkResponse()
