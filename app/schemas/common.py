"""공통 응답 스키마 — Shared response bodies (page wrapper, plain message)."""

from typing import Any

from pydantic import BaseModel


class PaginatedResponse(BaseModel):
    """한 페이지 분량의 결과.

    One page of a supervisor listing plus the numbers a client needs to
    render pager controls.
    """

    items: list[Any]
    total: int  # 필터 적용 후 전체 개수 (Matches across all pages)
    page: int  # 1부터 시작 (1-based)
    per_page: int


class MessageResponse(BaseModel):
    """단순 확인 메시지 — Plain confirmation such as logout."""

    message: str
