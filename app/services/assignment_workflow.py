"""배정 상태 머신 — 순수 전이 규칙 (DB 접근 없음).

Assignment status state machine — pure transition rules, no database access.

Lifecycle:
    assigned → accepted → in_progress → pending_review → completed
    reopen:   pending_review | completed → in_progress
    rejected: assigned | accepted 에서만 도달, 이후 변경 불가 (absorbing)

Actions and actors:
    start      — 배정된 작업자 본인 (bound worker), 종료 상태 제외
    mark_done  — 배정된 작업자 본인 (bound worker), 종료 상태 제외
    approve    — 감독자 (supervisor), pending_review → completed
    reopen     — 감독자 (supervisor), pending_review | completed → in_progress
"""

from app.models.user import ROLE_SUPERVISOR
from app.utils.exceptions import BadRequestError, ForbiddenError

# 상태 상수 — Status constants
ASSIGNED = "assigned"
ACCEPTED = "accepted"
IN_PROGRESS = "in_progress"
PENDING_REVIEW = "pending_review"
COMPLETED = "completed"
REJECTED = "rejected"

# 더 이상 작업자가 진행할 수 없는 상태 — Worker actions are refused here
TERMINAL_STATUSES: frozenset[str] = frozenset({COMPLETED, REJECTED})

# 리더 완료 시 함께 검토 대기로 이동하는 팀원 상태
# Teammates in these states follow the leader into pending_review
ACTIVE_STATUSES: frozenset[str] = frozenset({ASSIGNED, ACCEPTED, IN_PROGRESS})

# 작업 시작 전 — 팀에서 제외 가능한 상태 (Removable from a team)
REMOVABLE_STATUSES: frozenset[str] = frozenset({ASSIGNED, ACCEPTED, REJECTED})

ACTIONS: tuple[str, ...] = ("start", "mark_done", "approve", "reopen")


def next_status(action: str, current: str, actor_role: str, is_bound_worker: bool) -> str:
    """동작에 따른 다음 상태를 계산합니다.

    Compute the status an action leads to, enforcing who may trigger it.

    Args:
        action: 동작 이름, 소문자 (start | mark_done | approve | reopen)
        current: 현재 배정 상태 (Current assignment status)
        actor_role: 요청자 역할 (Caller role)
        is_bound_worker: 요청자가 배정된 작업자인지 (Caller is the assignment's worker)

    Returns:
        str: 전이 후 상태 (Resulting status)

    Raises:
        ForbiddenError: 요청자가 해당 동작 권한이 없을 때 (Wrong actor)
        BadRequestError: 현재 상태에서 허용되지 않는 전이 또는 알 수 없는 동작
                         (Transition not allowed from current status, or unknown action)
    """
    if action in ("start", "mark_done"):
        if not is_bound_worker:
            raise ForbiddenError("본인에게 배정된 작업만 처리할 수 있습니다 (Forbidden)")
        if current in TERMINAL_STATUSES:
            raise BadRequestError(
                f"'{current}' 상태에서는 진행할 수 없습니다 (Cannot {action} a {current} assignment)"
            )
        return IN_PROGRESS if action == "start" else PENDING_REVIEW

    if action in ("approve", "reopen"):
        if actor_role != ROLE_SUPERVISOR:
            raise ForbiddenError("감독자만 처리할 수 있습니다 (Forbidden)")
        if action == "approve":
            if current not in (PENDING_REVIEW, COMPLETED):
                raise BadRequestError(
                    f"검토 대기 상태만 승인할 수 있습니다 (Cannot approve a {current} assignment)"
                )
            return COMPLETED
        if current not in (PENDING_REVIEW, COMPLETED):
            raise BadRequestError(
                f"검토 대기 또는 완료 상태만 재작업 처리할 수 있습니다 (Cannot reopen a {current} assignment)"
            )
        return IN_PROGRESS

    raise BadRequestError("Invalid action")


def respond_status(response: str, current: str) -> str:
    """작업자의 수락/거절 응답에 따른 상태를 계산합니다.

    Compute the status after a worker accepts or rejects an assignment.
    Repeating the same answer is a no-op.

    Raises:
        BadRequestError: 작업이 이미 시작된 경우 (Work already started)
    """
    allowed: tuple[str, ...] = (ASSIGNED, ACCEPTED) if response == ACCEPTED else (ASSIGNED, ACCEPTED, REJECTED)
    if current not in allowed:
        raise BadRequestError(
            f"'{current}' 상태에서는 응답할 수 없습니다 (Cannot mark a {current} assignment as {response})"
        )
    return response


def derive_complaint_status(statuses: list[str]) -> str:
    """배정 상태들로부터 민원 상태를 도출합니다.

    Derive the complaint status from its assignments. Rejected rows are
    ignored; a complaint with no live assignment is pending.

    Args:
        statuses: 민원의 모든 배정 상태 (Statuses of every assignment)

    Returns:
        str: pending | assigned | in_progress | pending_review | completed
    """
    live: list[str] = [s for s in statuses if s != REJECTED]
    if not live:
        return "pending"
    if all(s == COMPLETED for s in live):
        return COMPLETED
    if all(s in (PENDING_REVIEW, COMPLETED) for s in live):
        return PENDING_REVIEW
    if any(s in (IN_PROGRESS, PENDING_REVIEW, COMPLETED) for s in live):
        return IN_PROGRESS
    return ASSIGNED
