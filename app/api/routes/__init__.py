"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every endpoint into a single router that
main.py mounts under /api.

Included routers:
    - auth: 로그인/로그아웃/내 프로필 (Login, logout, current profile)
    - complaints: 민원 및 팀 배정 (Complaints and team assignment)
    - assignments: 배정 상태, 방문 상세 (Assignment workflow and visit detail)
    - lookups: 매장/자재/건물/호실/작업자/가용성 (Stores, materials, buildings, rooms, workers, availability)
    - reports: 작업자/민원 보고서 (Worker and complaint reports)
"""

from fastapi import APIRouter

from app.api.routes.assignments import router as assignments_router
from app.api.routes.auth import router as auth_router
from app.api.routes.complaints import router as complaints_router
from app.api.routes.lookups import router as lookups_router
from app.api.routes.reports import router as reports_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(complaints_router, tags=["Complaints"])
api_router.include_router(assignments_router, tags=["Assignments"])
api_router.include_router(lookups_router, tags=["Lookups"])
api_router.include_router(reports_router, tags=["Reports"])
