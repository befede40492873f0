"""인증 API 테스트.

Auth API tests — login, session cookie, current profile, logout and
token failures.
"""

from httpx import AsyncClient

from app.utils.jwt import create_access_token
from tests.conftest import auth_header

LOGIN_URL = "/api/auth/login"
ME_URL = "/api/auth/me"


class TestLogin:
    """로그인 테스트."""

    async def test_login_success(self, client: AsyncClient, worker_a):
        """로그인 성공 — 토큰, 프로필, 세션 쿠키."""
        res = await client.post(LOGIN_URL, json={"email": "Alice@Test.com", "password": "secret123!"})
        assert res.status_code == 200
        data = res.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["role"] == "worker"
        assert data["user"]["email"] == "alice@test.com"
        assert "ct_session" in res.cookies

    async def test_wrong_password(self, client: AsyncClient, worker_a):
        res = await client.post(LOGIN_URL, json={"email": "alice@test.com", "password": "nope"})
        assert res.status_code == 401

    async def test_unknown_email(self, client: AsyncClient):
        res = await client.post(LOGIN_URL, json={"email": "ghost@test.com", "password": "secret123!"})
        assert res.status_code == 401

    async def test_inactive_account(self, client: AsyncClient, db, worker_a):
        worker_a.is_active = False
        await db.flush()
        res = await client.post(LOGIN_URL, json={"email": "alice@test.com", "password": "secret123!"})
        assert res.status_code == 401


class TestCurrentUser:
    """현재 사용자 조회 테스트."""

    async def test_me_with_bearer(self, client: AsyncClient, tenant_token):
        res = await client.get(ME_URL, headers=auth_header(tenant_token))
        assert res.status_code == 200
        assert res.json()["building_name"] == "Marina Tower"

    async def test_me_with_cookie(self, client: AsyncClient, worker_a):
        """로그인 쿠키만으로 인증."""
        await client.post(LOGIN_URL, json={"email": "alice@test.com", "password": "secret123!"})
        res = await client.get(ME_URL)
        assert res.status_code == 200
        assert res.json()["name"] == "Alice Worker"

    async def test_logout_clears_cookie(self, client: AsyncClient, worker_a):
        await client.post(LOGIN_URL, json={"email": "alice@test.com", "password": "secret123!"})
        res = await client.post("/api/auth/logout")
        assert res.json() == {"message": "Logged out"}
        res = await client.get(ME_URL)
        assert res.status_code == 401

    async def test_no_token(self, client: AsyncClient):
        res = await client.get(ME_URL)
        assert res.status_code == 401

    async def test_garbage_token(self, client: AsyncClient):
        res = await client.get(ME_URL, headers=auth_header("not-a-jwt"))
        assert res.status_code == 401

    async def test_token_for_missing_profile(self, client: AsyncClient):
        token = create_access_token({"sub": "00000000-0000-0000-0000-000000000000", "role": "worker"})
        res = await client.get(ME_URL, headers=auth_header(token))
        assert res.status_code == 401
