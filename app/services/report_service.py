"""보고서 서비스 — 작업자 작업시간 및 민원 처리 보고서.

Report Service — Worker time report (one row per work session) and
complaint report (one row per complaint with staff and visit details).
Rows are returned as JSON or exported as CSV / Excel (openpyxl).
"""

import csv
from datetime import datetime
from io import BytesIO, StringIO
from typing import Sequence
from uuid import UUID
from zoneinfo import ZoneInfo

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.assignment import ComplaintAssignment
from app.models.catalog import Store
from app.models.complaint import Complaint
from app.models.user import Profile
from app.models.visit import AssignmentVisit, AssignmentWorkSession
from app.repositories.complaint_repository import complaint_repository
from app.repositories.user_repository import profile_repository
from app.repositories.visit_repository import visit_repository
from app.schemas.report import ComplaintReportRow, WorkDetail, WorkerReportRow
from app.utils.datetime_utils import ensure_utc, minutes_between
from app.utils.exceptions import BadRequestError

REPORT_FORMATS: tuple[str, ...] = ("json", "csv", "xlsx")

XLSX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

WORKER_REPORT_COLUMNS: list[str] = [
    "worker_id", "worker_name", "worker_email", "assignment_id", "complaint_id",
    "is_leader", "status", "session_start", "session_end", "session_minutes",
    "store_id", "store_name", "complaint_desc",
]


def normalize_format(value: str | None) -> str:
    """보고서 형식 정규화 — Lowercase and validate the requested format.

    Raises:
        BadRequestError: 지원하지 않는 형식 (Unsupported format)
    """
    fmt: str = (value or "json").strip().lower()
    if fmt not in REPORT_FORMATS:
        raise BadRequestError(f"지원하지 않는 형식입니다 (Unsupported format '{fmt}')")
    return fmt


class ReportService:
    """보고서 서비스 — Report queries and exports."""

    def _local(self, value: datetime | None) -> str:
        """보고서 타임존 기준 표시 문자열 — Display string in REPORT_TIMEZONE."""
        if value is None:
            return ""
        return ensure_utc(value).astimezone(ZoneInfo(settings.REPORT_TIMEZONE)).strftime("%Y-%m-%d %H:%M")

    async def worker_report(
        self,
        db: AsyncSession,
        start: datetime | None = None,
        end: datetime | None = None,
        worker_ids: list[UUID] | None = None,
    ) -> list[WorkerReportRow]:
        """작업자 작업시간 보고서를 조회합니다.

        One row per work session starting in [start, end), ordered by worker
        then start time.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            start: 시작 시각, 포함 (Inclusive lower bound, optional)
            end: 종료 시각, 미포함 (Exclusive upper bound, optional)
            worker_ids: 작업자 필터 — None이면 전체 (Worker filter, None = everyone)

        Returns:
            list[WorkerReportRow]: 보고서 행 목록 (Report rows)
        """
        query = (
            select(
                AssignmentWorkSession,
                ComplaintAssignment,
                Profile,
                Complaint.description,
                Store.id.label("store_id"),
                Store.name.label("store_name"),
            )
            .join(ComplaintAssignment, ComplaintAssignment.id == AssignmentWorkSession.assignment_id)
            .join(Profile, Profile.id == AssignmentWorkSession.worker_id)
            .join(Complaint, Complaint.id == ComplaintAssignment.complaint_id)
            .outerjoin(AssignmentVisit, AssignmentVisit.id == AssignmentWorkSession.visit_id)
            .outerjoin(Store, Store.id == AssignmentVisit.store_id)
        )
        if start is not None:
            query = query.where(AssignmentWorkSession.start_at >= ensure_utc(start))
        if end is not None:
            query = query.where(AssignmentWorkSession.start_at < ensure_utc(end))
        if worker_ids is not None:
            query = query.where(AssignmentWorkSession.worker_id.in_(worker_ids))
        query = query.order_by(Profile.name, Profile.email, AssignmentWorkSession.start_at)

        result = await db.execute(query)
        return [
            WorkerReportRow(
                worker_id=str(session.worker_id),
                worker_name=worker.name,
                worker_email=worker.email,
                assignment_id=assignment.id,
                complaint_id=assignment.complaint_id,
                is_leader=assignment.is_leader,
                status=assignment.status,
                session_start=ensure_utc(session.start_at),
                session_end=ensure_utc(session.end_at),
                session_minutes=minutes_between(session.start_at, session.end_at),
                store_id=store_id,
                store_name=store_name,
                complaint_desc=description,
            )
            for session, assignment, worker, description, store_id, store_name in result.all()
        ]

    async def complaint_report(
        self,
        db: AsyncSession,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ComplaintReportRow]:
        """민원 처리 보고서를 조회합니다.

        One row per complaint filed in [start, end): tenant, assigned staff
        (leader first) and per-visit work details.

        Returns:
            list[ComplaintReportRow]: 보고서 행 목록 (Report rows)
        """
        complaints: Sequence[Complaint] = await complaint_repository.get_created_between(
            db, ensure_utc(start), ensure_utc(end)
        )
        if not complaints:
            return []
        complaint_ids: list[int] = [c.id for c in complaints]

        result = await db.execute(
            select(ComplaintAssignment)
            .where(
                ComplaintAssignment.complaint_id.in_(complaint_ids),
                ComplaintAssignment.status != "rejected",
            )
            .order_by(ComplaintAssignment.is_leader.desc(), ComplaintAssignment.id)
        )
        assignments: Sequence[ComplaintAssignment] = result.scalars().all()
        by_id: dict[int, ComplaintAssignment] = {a.id: a for a in assignments}

        profiles: dict[UUID, Profile] = await profile_repository.get_many(
            db,
            list({c.tenant_id for c in complaints} | {a.worker_id for a in assignments}),
        )

        visits: Sequence[AssignmentVisit] = await visit_repository.get_history(db, list(by_id))
        materials: dict[int, list[dict]] = await visit_repository.get_material_map(db, [v.id for v in visits])
        store_ids: set[int] = {v.store_id for v in visits if v.store_id is not None}
        store_names: dict[int, str] = {}
        if store_ids:
            rows = await db.execute(select(Store.id, Store.name).where(Store.id.in_(store_ids)))
            store_names = {row.id: row.name for row in rows.all()}

        # 오래된 방문부터 — Work details read oldest first
        details: dict[int, list[WorkDetail]] = {}
        for visit in reversed(visits):
            assignment: ComplaintAssignment = by_id[visit.assignment_id]
            worker: Profile | None = profiles.get(assignment.worker_id)
            details.setdefault(assignment.complaint_id, []).append(
                WorkDetail(
                    worker_id=str(assignment.worker_id),
                    worker_name=worker.name if worker else None,
                    worker_email=worker.email if worker else None,
                    store_name=store_names.get(visit.store_id) if visit.store_id is not None else None,
                    time_in=ensure_utc(visit.time_in),
                    time_out=ensure_utc(visit.time_out),
                    materials=[m["name"] for m in materials.get(visit.id, [])],
                    needs_revisit=visit.needs_revisit,
                )
            )

        staff: dict[int, list[str]] = {}
        for a in assignments:
            worker = profiles.get(a.worker_id)
            label: str = worker.display_name if worker else str(a.worker_id)
            staff.setdefault(a.complaint_id, []).append(f"{label} (leader)" if a.is_leader else label)

        report: list[ComplaintReportRow] = []
        for c in complaints:
            tenant: Profile | None = profiles.get(c.tenant_id)
            report.append(
                ComplaintReportRow(
                    complaint_id=c.id,
                    created_at=ensure_utc(c.created_at),
                    tenant_id=str(c.tenant_id),
                    tenant_name=tenant.name if tenant else None,
                    tenant_email=tenant.email if tenant else None,
                    building=tenant.building_name if tenant else None,
                    flat=tenant.room_number if tenant else None,
                    description=c.description,
                    status=c.status,
                    priority=c.priority,
                    staff=", ".join(staff.get(c.id, [])) or None,
                    work_details=details.get(c.id, []),
                )
            )
        return report

    # --- 내보내기 (Exports) ---

    def worker_report_csv(self, rows: list[WorkerReportRow]) -> str:
        """작업자 보고서 CSV — Worker report as CSV text."""
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(WORKER_REPORT_COLUMNS)
        for r in rows:
            writer.writerow([
                r.worker_id,
                r.worker_name or "",
                r.worker_email or "",
                r.assignment_id,
                r.complaint_id,
                1 if r.is_leader else 0,
                r.status or "",
                r.session_start.isoformat(),
                r.session_end.isoformat(),
                r.session_minutes,
                r.store_id if r.store_id is not None else "",
                r.store_name or "",
                r.complaint_desc or "",
            ])
        return output.getvalue()

    def _work_summary(self, detail: WorkDetail) -> str:
        who: str = detail.worker_name or detail.worker_email or detail.worker_id
        time_range: str = f"{self._local(detail.time_in) or '-'} → {self._local(detail.time_out) or '-'}"
        materials: str = ", ".join(detail.materials) or "-"
        outcome: str = "Revisit" if detail.needs_revisit else "Completed"
        return f"({who}) Store: {detail.store_name or '-'}; Time: {time_range}; Materials: {materials}; {outcome}"

    def complaint_report_csv(self, rows: list[ComplaintReportRow]) -> str:
        """민원 보고서 CSV — Complaint report as CSV text."""
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow([
            "complaint_id", "created_at", "tenant_id", "tenant_name", "tenant_email",
            "building", "flat", "description", "status", "priority", "staff", "work_details",
        ])
        for r in rows:
            writer.writerow([
                r.complaint_id,
                r.created_at.isoformat(),
                r.tenant_id,
                r.tenant_name or "",
                r.tenant_email or "",
                r.building or "",
                r.flat or "",
                r.description or "",
                r.status,
                r.priority,
                r.staff or "",
                "\n".join(self._work_summary(d) for d in r.work_details),
            ])
        return output.getvalue()

    def _new_sheet(self, title: str, headers: list[str], widths: list[int]) -> tuple[Workbook, object]:
        """헤더 스타일이 적용된 시트 생성 — Workbook with a styled header row."""
        wb = Workbook()
        ws = wb.active
        ws.title = title
        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="2D3436", end_color="2D3436", fill_type="solid")
        for col_idx, h in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col_idx, value=h)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")
        for i, w in enumerate(widths, 1):
            ws.column_dimensions[ws.cell(row=1, column=i).column_letter].width = w
        ws.freeze_panes = "A2"
        return wb, ws

    def _to_bytes(self, wb: Workbook) -> bytes:
        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    def worker_report_xlsx(self, rows: list[WorkerReportRow]) -> bytes:
        """작업자 보고서 Excel — Worker report workbook."""
        wb, ws = self._new_sheet(
            "Worker Sessions",
            ["Worker", "Email", "Complaint ID", "Assignment ID", "Leader", "Status",
             "Start", "End", "Minutes", "Store", "Complaint"],
            [22, 26, 13, 14, 8, 16, 18, 18, 10, 20, 40],
        )
        for r in rows:
            ws.append([
                r.worker_name or "",
                r.worker_email or "",
                r.complaint_id,
                r.assignment_id,
                "Yes" if r.is_leader else "",
                r.status or "",
                self._local(r.session_start),
                self._local(r.session_end),
                r.session_minutes,
                r.store_name or "",
                r.complaint_desc or "",
            ])
        for cell in ws["K"][1:]:
            cell.alignment = Alignment(wrap_text=True, vertical="top")
        return self._to_bytes(wb)

    def complaint_report_xlsx(self, rows: list[ComplaintReportRow]) -> bytes:
        """민원 보고서 Excel — Complaint report workbook."""
        wb, ws = self._new_sheet(
            "Complaints",
            ["Date", "Complaint ID", "Tenant Name", "Tenant Email", "Tenant ID", "Building",
             "Room", "Description", "Status", "Priority", "Staff Assigned", "Work Details"],
            [18, 14, 20, 24, 36, 18, 10, 40, 16, 10, 30, 60],
        )
        for r in rows:
            ws.append([
                self._local(r.created_at),
                r.complaint_id,
                r.tenant_name or "",
                r.tenant_email or "",
                r.tenant_id,
                r.building or "",
                r.flat or "",
                r.description or "",
                r.status,
                r.priority,
                r.staff or "",
                "\n".join(self._work_summary(d) for d in r.work_details),
            ])
        for column in ("H", "L"):
            for cell in ws[column][1:]:
                cell.alignment = Alignment(wrap_text=True, vertical="top")
        return self._to_bytes(wb)


# 싱글턴 인스턴스 — Singleton instance
report_service: ReportService = ReportService()
