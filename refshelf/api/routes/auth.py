"""Authentication routes: log in, log out, auth check and registration."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from ...auth.errors import RegistrationDisabledError
from ...auth.lifecycle import SessionLifecycle
from ...dependencies import get_bearer_token, get_current_user_id, get_session_lifecycle

router = APIRouter(tags=["auth"])


def envelope(data: Any, code: int = 200, message: str = "ok") -> dict:
    return {"status": {"code": code, "message": message}, "data": data}


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    username: str = Field(min_length=1)


@router.get("/check")
async def check(user_id: int = Depends(get_current_user_id)):
    """200 when the bearer token is valid and stored, 401 otherwise."""
    return envelope("Authenticated")


@router.get("/register")
async def registration_status(lifecycle: SessionLifecycle = Depends(get_session_lifecycle)):
    if not lifecycle.registration_enabled:
        raise RegistrationDisabledError()
    return envelope("Available")


@router.post("/register")
async def register(
    body: RegisterRequest,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
):
    result = await lifecycle.register(body.email, body.password, body.username)
    return envelope(result)


@router.post("/log-in")
async def log_in(
    body: LoginRequest,
    request: Request,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
):
    """Exchange email/password for a bearer token."""
    token = await lifecycle.login(
        body.email,
        body.password,
        user_agent=request.headers.get("User-Agent"),
    )
    return envelope({"token": token})


@router.api_route("/log-out", methods=["GET", "POST"])
async def log_out(
    token: Optional[str] = Depends(get_bearer_token),
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
):
    """Invalidate the presented token by deleting its record."""
    await lifecycle.logout(token)
    return envelope("Logged out")
