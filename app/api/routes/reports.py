"""보고서 라우터 — 작업자/민원 보고서 (JSON, CSV, Excel).

Report Router — Worker and complaint reports in json, csv or xlsx.
"""

from datetime import datetime
from io import BytesIO
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_staff, require_supervisor
from app.database import get_db
from app.models.user import ROLE_SUPERVISOR, Profile
from app.services.report_service import XLSX_MEDIA_TYPE, normalize_format, report_service
from app.utils.exceptions import ForbiddenError

router: APIRouter = APIRouter()


@router.get("/reports/workers")
async def worker_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_staff)],
    start: Annotated[datetime | None, Query()] = None,
    end: Annotated[datetime | None, Query()] = None,
    worker: Annotated[UUID | None, Query()] = None,
    format: Annotated[str, Query()] = "json",
):
    """작업자 작업시간 보고서.

    Worker time report. Supervisors see everyone (or one worker with
    ?worker=); workers only ever see their own sessions.
    """
    fmt: str = normalize_format(format)

    if current_user.role == ROLE_SUPERVISOR:
        worker_ids: list[UUID] | None = [worker] if worker else None
    else:
        if worker is not None and worker != current_user.id:
            raise ForbiddenError("본인 보고서만 조회할 수 있습니다 (Workers can only view their own report)")
        worker_ids = [current_user.id]

    rows = await report_service.worker_report(db, start, end, worker_ids)

    if fmt == "csv":
        return Response(
            content=report_service.worker_report_csv(rows),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": 'attachment; filename="worker-report.csv"'},
        )
    if fmt == "xlsx":
        return StreamingResponse(
            BytesIO(report_service.worker_report_xlsx(rows)),
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": 'attachment; filename="worker-report.xlsx"'},
        )
    return rows


@router.get("/reports/complaints")
async def complaint_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_supervisor)],
    start: Annotated[datetime | None, Query()] = None,
    end: Annotated[datetime | None, Query()] = None,
    format: Annotated[str, Query()] = "json",
):
    """민원 처리 보고서 (감독자).

    Complaint report: tenant, staff and per-visit work details.
    """
    fmt: str = normalize_format(format)
    rows = await report_service.complaint_report(db, start, end)

    if fmt == "csv":
        return Response(
            content=report_service.complaint_report_csv(rows),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": 'attachment; filename="complaint-report.csv"'},
        )
    if fmt == "xlsx":
        return StreamingResponse(
            BytesIO(report_service.complaint_report_xlsx(rows)),
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": 'attachment; filename="complaint-report.xlsx"'},
        )
    return rows
