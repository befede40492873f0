"""FastAPI 의존성 주입 모듈 — 인증 및 역할 검사.

FastAPI dependency injection module — Authentication and authorization.
Provides reusable dependencies for extracting the current profile from the
session JWT and enforcing role-based access on API endpoints.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더 또는 세션 쿠키를 전송
       (Client sends a Bearer header, or the session cookie set at login)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    3. 페이로드의 "sub" 필드로 DB에서 프로필을 조회
       (Profile is fetched from DB using payload "sub" field)
    4. 프로필 활성 상태를 확인 (Profile active status is verified)

Authorization Flow (require_role):
    요청자 역할이 허용 목록에 없으면 403 Forbidden
    (Returns 403 when the caller's role is not in the allowed set)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models.user import ROLE_SUPERVISOR, ROLE_TENANT, ROLE_WORKER, Profile
from app.repositories.user_repository import profile_repository
from app.utils.exceptions import ForbiddenError, UnauthorizedError
from app.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — 헤더가 없으면 쿠키로 대체하므로 auto_error 끔
# (Bearer extractor; missing header falls back to the session cookie)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Profile:
    """JWT 토큰에서 현재 인증된 프로필을 추출합니다.

    Decode the JWT from the Authorization header (or the session cookie)
    and return the authenticated profile.

    Args:
        request: 요청 객체 — 쿠키 조회용 (Request, for the session cookie)
        credentials: HTTP Bearer 토큰 자격 증명 (Bearer credentials, optional)
        db: 비동기 DB 세션 (Async database session)

    Returns:
        Profile: 인증된 프로필 (Authenticated profile)

    Raises:
        UnauthorizedError: 토큰 없음, 유효하지 않음, 만료, 프로필 없음/비활성
                           (Missing, invalid or expired token; unknown or inactive profile)
    """
    token: str | None = credentials.credentials if credentials else request.cookies.get(
        settings.SESSION_COOKIE_NAME
    )
    if not token:
        raise UnauthorizedError()

    try:
        payload: dict = decode_token(token)
        if payload.get("type") != "access":
            raise UnauthorizedError("Invalid token type")
        profile_id: UUID = UUID(payload["sub"])
    except UnauthorizedError:
        raise
    except (jwt.ExpiredSignatureError, jwt.InvalidTokenError, KeyError, ValueError, TypeError):
        raise UnauthorizedError("Invalid or expired token")

    profile: Profile | None = await profile_repository.get_by_id(db, profile_id)
    if profile is None or not profile.is_active:
        raise UnauthorizedError("User not found or inactive")

    # 로깅 미들웨어에서 역할 기록 — Exposed to the request logging middleware
    request.state.user_role = profile.role
    return profile


def require_role(*roles: str) -> Callable[..., Awaitable[Profile]]:
    """역할 기반 권한 검사 의존성 팩토리.

    Dependency factory that only lets the given roles through.

    Args:
        roles: 허용 역할 목록 (Allowed role names)

    Returns:
        FastAPI 의존성 함수 — 인증된 프로필 반환 또는 403 발생
        (FastAPI dependency returning the Profile or raising 403)
    """
    async def _check(
        current_user: Annotated[Profile, Depends(get_current_user)],
    ) -> Profile:
        if current_user.role not in roles:
            raise ForbiddenError("Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Pre-configured role dependencies
require_supervisor = require_role(ROLE_SUPERVISOR)
require_worker = require_role(ROLE_WORKER)
require_tenant = require_role(ROLE_TENANT)
require_staff = require_role(ROLE_WORKER, ROLE_SUPERVISOR)
