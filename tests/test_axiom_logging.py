"""요청 로깅 미들웨어 테스트.

Request logging tests — event shape, sensitive-field masking, truncation and
pass-through when Axiom is not configured.
"""

from httpx import AsyncClient

from app.middleware.axiom_logging import _mask_dict, _truncate, build_log_event


class TestLogEvent:
    """로그 이벤트 구성 테스트."""

    def test_masks_sensitive_keys(self):
        masked = _mask_dict({"email": "a@b.c", "password": "x", "nested": {"access_token": "t"}})
        assert masked == {"email": "a@b.c", "password": "***", "nested": {"access_token": "***"}}

    def test_truncate(self):
        assert _truncate("short") == "short"
        assert _truncate("x" * 3000).endswith("...(truncated)")

    def test_event_fields(self):
        event = build_log_event(
            method="PATCH",
            path="/api/assignments/7/status",
            status_code=400,
            duration_ms=1.5,
            query_params={"token": "abc", "day": "2026-03-01"},
            path_params={"assignment_id": "7"},
            error="Invalid action",
            user_role="worker",
        )
        assert event["query_params"] == {"token": "***", "day": "2026-03-01"}
        assert event["path_params"] == {"assignment_id": "7"}
        assert event["error"] == "Invalid action"
        assert event["user_role"] == "worker"
        assert "request_body" not in event


class TestPassThrough:
    """Axiom 미설정 시 요청 통과."""

    async def test_health(self, client: AsyncClient):
        res = await client.get("/health")
        assert res.json() == {"status": "ok"}
