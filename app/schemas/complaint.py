"""민원 관련 Pydantic 요청/응답 스키마 정의.

Complaint-related Pydantic request/response schema definitions.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

# 우선순위 값 — Allowed priority values
Priority = Literal["low", "medium", "high"]


class ComplaintTypeResponse(BaseModel):
    """민원 유형 응답 스키마 — Complaint category."""

    id: int
    name: str


class ComplaintCreate(BaseModel):
    """민원 접수 요청 스키마 (입주자).

    Complaint creation request schema, filed by a tenant.
    The image itself is uploaded elsewhere; only its stored path is kept.

    Attributes:
        type_id: 민원 유형 ID (Complaint category id)
        description: 민원 내용 (What is wrong)
        image_path: 첨부 이미지 경로 (Stored image path, optional)
    """

    type_id: int
    description: str = Field(min_length=1)
    image_path: str | None = None


class ComplaintUpdate(BaseModel):
    """민원 수정 요청 스키마 (감독자, 부분 업데이트).

    Complaint update request schema. Only priority is writable; status is
    derived from assignments and a status key is refused by the service.

    Attributes:
        priority: 우선순위 (low | medium | high)
        status: 거부됨 — 배정에서 파생 (Rejected, derived from assignments)
    """

    priority: Priority | None = None
    status: str | None = None


class ComplaintResponse(BaseModel):
    """민원 응답 스키마.

    Complaint response schema with category and tenant summary.
    """

    id: int
    tenant_id: str
    tenant_name: str | None = None
    tenant_email: str | None = None
    building_name: str | None = None
    room_number: str | None = None
    type_id: int
    type_name: str | None = None
    description: str
    status: str
    priority: str
    image_path: str | None = None
    created_at: datetime
    updated_at: datetime
