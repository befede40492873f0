"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers login, token issuance and current profile info.
"""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Login request schema shared by tenants, workers and supervisors.

    Attributes:
        email: 로그인 이메일 (Login email, matched case-insensitively)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: str  # 로그인 이메일 (Login email)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class ProfileResponse(BaseModel):
    """프로필 응답 스키마 (GET /auth/me).

    Profile response schema for the authenticated caller.

    Attributes:
        id: 프로필 UUID 문자열 (Profile UUID as string)
        email: 이메일 (Email address)
        name: 이름 (Display name, nullable)
        role: 역할 (tenant | worker | supervisor)
        mobile: 휴대폰 번호 (Mobile number, nullable)
        building_name: 건물명 — 입주자 (Building, tenants only)
        room_number: 호실 — 입주자 (Flat number, tenants only)
    """

    id: str
    email: str
    name: str | None = None
    role: str
    mobile: str | None = None
    building_name: str | None = None
    room_number: str | None = None


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema returned by /auth/login.
    The same token is also set as the session cookie.

    Attributes:
        access_token: JWT 액세스 토큰 (Access token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
        user: 로그인한 프로필 (Logged-in profile)
    """

    access_token: str  # JWT 액세스 토큰 — 만료: 12시간 기본 (Access token, default TTL: 12h)
    token_type: str = "bearer"  # 토큰 유형 — 항상 "bearer" (Token type for Authorization header)
    user: ProfileResponse
