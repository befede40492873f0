"""민원 서비스 — 민원 접수, 조회, 우선순위 변경 및 상태 도출.

Complaint Service — Business logic for filing, listing and updating
complaints. Complaint status is never written by clients: it is recomputed
from the assignments by refresh_status() after every workflow change.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assignment import ComplaintAssignment
from app.models.complaint import Complaint, ComplaintType
from app.models.user import Profile
from app.repositories.complaint_repository import (
    complaint_repository,
    complaint_type_repository,
)
from app.repositories.user_repository import profile_repository
from app.schemas.complaint import ComplaintCreate, ComplaintResponse, ComplaintTypeResponse, ComplaintUpdate
from app.services.assignment_workflow import derive_complaint_status
from app.utils.datetime_utils import ensure_utc
from app.utils.exceptions import BadRequestError, NotFoundError


class ComplaintService:
    """민원 관련 비즈니스 로직을 처리하는 서비스.

    Service handling complaint business logic.
    """

    async def get_complaint(self, db: AsyncSession, complaint_id: int) -> Complaint:
        """민원을 조회합니다.

        Raises:
            NotFoundError: 민원이 없을 때 (When complaint not found)
        """
        complaint: Complaint | None = await complaint_repository.get_by_id(db, complaint_id)
        if complaint is None:
            raise NotFoundError("민원을 찾을 수 없습니다 (Complaint not found)")
        return complaint

    async def list_types(self, db: AsyncSession) -> list[ComplaintTypeResponse]:
        """민원 유형 목록 — Complaint categories ordered by name."""
        types: Sequence[ComplaintType] = await complaint_type_repository.get_all_ordered(db)
        return [ComplaintTypeResponse(id=t.id, name=t.name) for t in types]

    async def create_complaint(
        self,
        db: AsyncSession,
        tenant: Profile,
        data: ComplaintCreate,
    ) -> Complaint:
        """입주자의 민원을 접수합니다.

        File a new complaint for the calling tenant.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            tenant: 접수하는 입주자 (Filing tenant)
            data: 민원 내용 (Complaint data)

        Returns:
            Complaint: 생성된 민원 (Created complaint, status pending)

        Raises:
            BadRequestError: 알 수 없는 민원 유형 (Unknown complaint type)
        """
        complaint_type: ComplaintType | None = await complaint_type_repository.get_by_id(db, data.type_id)
        if complaint_type is None:
            raise BadRequestError("알 수 없는 민원 유형입니다 (Unknown complaint type)")

        return await complaint_repository.create(
            db,
            {
                "tenant_id": tenant.id,
                "type_id": data.type_id,
                "description": data.description.strip(),
                "image_path": data.image_path,
                "status": "pending",
                "priority": "medium",
            },
        )

    async def list_mine(self, db: AsyncSession, tenant_id: UUID) -> Sequence[Complaint]:
        """입주자 본인 민원 목록 — The calling tenant's complaints."""
        return await complaint_repository.get_by_tenant(db, tenant_id)

    async def list_complaints(
        self,
        db: AsyncSession,
        status: str | None = None,
        type_id: int | None = None,
        tenant_email: str | None = None,
        building_name: str | None = None,
        room_number: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Complaint], int]:
        """민원 목록을 필터링하여 페이지네이션 조회합니다 (감독자).

        List complaints with filters and pagination for supervisors.
        """
        return await complaint_repository.get_by_filters(
            db,
            status=status,
            type_id=type_id,
            tenant_email=tenant_email,
            building_name=building_name,
            room_number=room_number,
            page=page,
            per_page=per_page,
        )

    async def update_complaint(
        self,
        db: AsyncSession,
        complaint_id: int,
        data: ComplaintUpdate,
    ) -> Complaint:
        """민원 우선순위를 변경합니다.

        Update a complaint. Only priority is writable.

        Raises:
            NotFoundError: 민원이 없을 때 (When complaint not found)
            BadRequestError: status 변경 시도 (Status is derived from assignments)
        """
        complaint: Complaint = await self.get_complaint(db, complaint_id)

        if "status" in data.model_fields_set:
            raise BadRequestError(
                "민원 상태는 배정에서 자동으로 결정됩니다 (Complaint status is derived from its assignments)"
            )

        update_data: dict = data.model_dump(exclude_unset=True, exclude={"status"})
        if update_data.get("priority") is None:
            update_data.pop("priority", None)
        if not update_data:
            return complaint
        return await complaint_repository.update(db, complaint, update_data)

    async def refresh_status(self, db: AsyncSession, complaint_id: int) -> str:
        """배정 상태로부터 민원 상태를 다시 계산하여 저장합니다.

        Recompute and store the complaint status from its assignments.

        Returns:
            str: 새 민원 상태 (New complaint status)
        """
        complaint: Complaint = await self.get_complaint(db, complaint_id)
        result = await db.execute(
            select(ComplaintAssignment.status).where(ComplaintAssignment.complaint_id == complaint_id)
        )
        status: str = derive_complaint_status(list(result.scalars().all()))
        if complaint.status != status:
            complaint.status = status
            await db.flush()
        return status

    async def build_response(self, db: AsyncSession, complaint: Complaint) -> ComplaintResponse:
        """민원 응답을 구성합니다 (입주자/유형 이름 포함).

        Build the complaint response with tenant and category names.
        """
        tenant: Profile | None = await profile_repository.get_by_id(db, complaint.tenant_id)
        type_name: str | None = (
            await db.execute(select(ComplaintType.name).where(ComplaintType.id == complaint.type_id))
        ).scalar()

        return ComplaintResponse(
            id=complaint.id,
            tenant_id=str(complaint.tenant_id),
            tenant_name=tenant.name if tenant else None,
            tenant_email=tenant.email if tenant else None,
            building_name=tenant.building_name if tenant else None,
            room_number=tenant.room_number if tenant else None,
            type_id=complaint.type_id,
            type_name=type_name,
            description=complaint.description,
            status=complaint.status,
            priority=complaint.priority,
            image_path=complaint.image_path,
            created_at=ensure_utc(complaint.created_at),
            updated_at=ensure_utc(complaint.updated_at),
        )


# 싱글턴 인스턴스 — Singleton instance
complaint_service: ComplaintService = ComplaintService()
