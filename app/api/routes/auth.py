"""인증 라우터 — 로그인, 로그아웃, 현재 프로필 조회.

Auth Router — Login, logout and current profile endpoints.
Login returns the token in the body and also sets it as an HttpOnly session
cookie so browser clients need no Authorization header.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.config import settings
from app.database import get_db
from app.models.user import Profile
from app.schemas.auth import LoginRequest, ProfileResponse, TokenResponse
from app.schemas.common import MessageResponse
from app.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """로그인 — 토큰 발급 및 세션 쿠키 설정.

    Login endpoint. Issues an access token and sets the session cookie.
    """
    result: TokenResponse = await auth_service.login(db, data)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=result.access_token,
        max_age=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return result


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """로그아웃 — 세션 쿠키 삭제.

    Logout endpoint. Clears the session cookie; bearer tokens simply expire.
    """
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    current_user: Annotated[Profile, Depends(get_current_user)],
) -> ProfileResponse:
    """현재 사용자 프로필 조회.

    Get the profile of the currently authenticated caller.
    """
    return auth_service.to_profile_response(current_user)
