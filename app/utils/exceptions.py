"""API 오류 유형 — HTTPException subclasses raised by services.

FastAPI renders each as {"detail": "..."} with its status code. Raising one
aborts the request before commit, so the request session discards any
flushed writes.

    raise BadRequestError("시간을 먼저 입력하세요 (Add times first)")
"""

from fastapi import HTTPException, status


class BadRequestError(HTTPException):
    """400 — 업무 규칙 위반.

    Invalid action or transition, inverted or incomplete time windows,
    missing leader, unknown store/material/worker ids.
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(HTTPException):
    """401 — 토큰 없음/만료/무효 (Missing, expired or invalid session token)."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ForbiddenError(HTTPException):
    """403 — 역할 또는 소유권 불일치 (Wrong role, or not the bound worker)."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    """404 — 배정/민원/프로필 없음 (Missing assignment, complaint or profile)."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 — 같은 작업자를 같은 민원에 중복 배정 (Worker already on the team)."""

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
