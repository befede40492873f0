"""인증 서비스 — 로그인 및 현재 프로필 조회 비즈니스 로직.

Auth Service — Business logic for login and current-profile lookup.
Sign-up and password reset belong to the identity provider and are not
handled here.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Profile
from app.repositories.user_repository import profile_repository
from app.schemas.auth import LoginRequest, ProfileResponse, TokenResponse
from app.utils.exceptions import UnauthorizedError
from app.utils.jwt import create_access_token
from app.utils.password import verify_password


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    def to_profile_response(self, profile: Profile) -> ProfileResponse:
        """프로필 모델을 응답 스키마로 변환합니다 — Profile to response schema."""
        return ProfileResponse(
            id=str(profile.id),
            email=profile.email,
            name=profile.name,
            role=profile.role,
            mobile=profile.mobile,
            building_name=profile.building_name,
            room_number=profile.room_number,
        )

    async def login(self, db: AsyncSession, data: LoginRequest) -> TokenResponse:
        """이메일/비밀번호로 로그인하여 액세스 토큰을 발급합니다.

        Authenticate by email and password and issue an access token.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 로그인 요청 (Login credentials)

        Returns:
            TokenResponse: 액세스 토큰과 프로필 (Access token and profile)

        Raises:
            UnauthorizedError: 이메일/비밀번호 불일치 또는 비활성 계정
                               (Wrong credentials or inactive account)
        """
        profile: Profile | None = await profile_repository.get_by_email(db, data.email)
        if profile is None or not verify_password(data.password, profile.password_hash):
            raise UnauthorizedError("이메일 또는 비밀번호가 올바르지 않습니다 (Invalid email or password)")
        if not profile.is_active:
            raise UnauthorizedError("비활성화된 계정입니다 (Account is inactive)")

        token: str = create_access_token({"sub": str(profile.id), "role": profile.role})
        return TokenResponse(access_token=token, user=self.to_profile_response(profile))


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
