"""
Allowed service request status changes.

``transition`` is a pure function over the edge table below.  It never
raises; a refused change comes back as a ``Rejected`` value so the caller
decides how to surface it.
"""

from dataclasses import dataclass
from typing import Union

from models import RequestStatus, Role, TERMINAL_STATUSES

INVALID_TRANSITION = "InvalidTransition"
TERMINAL_STATE_VIOLATION = "TerminalStateViolation"

# (from, to) -> roles allowed to make the change
EDGES = {
    (RequestStatus.PENDING, RequestStatus.ACCEPTED): {Role.TECHNICIAN},
    (RequestStatus.PENDING, RequestStatus.CANCELLED): {Role.CLIENT, Role.ADMIN},
    (RequestStatus.ACCEPTED, RequestStatus.IN_PROGRESS): {Role.TECHNICIAN},
    (RequestStatus.ACCEPTED, RequestStatus.COMPLETED): {Role.TECHNICIAN},
    (RequestStatus.ACCEPTED, RequestStatus.CANCELLED): {Role.ADMIN},
    (RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED): {Role.TECHNICIAN},
    (RequestStatus.IN_PROGRESS, RequestStatus.CANCELLED): {Role.ADMIN},
}


@dataclass(frozen=True)
class Rejected:
    reason: str
    message: str


def transition(current: RequestStatus, requested_by: Role, target: RequestStatus) -> Union[RequestStatus, Rejected]:
    try:
        current = RequestStatus(current)
        target = RequestStatus(target)
        requested_by = Role(requested_by)
    except ValueError as e:
        return Rejected(INVALID_TRANSITION, str(e))
    if current in TERMINAL_STATUSES:
        return Rejected(
            TERMINAL_STATE_VIOLATION,
            f"Request is already {current.value} and cannot change",
        )
    if requested_by not in EDGES.get((current, target), ()):
        return Rejected(
            INVALID_TRANSITION,
            f"A {requested_by.value} cannot move a request from {current.value} to {target.value}",
        )
    return target


def allowed_targets(current: RequestStatus, role: Role) -> list:
    return [
        to for (frm, to), roles in EDGES.items()
        if frm == RequestStatus(current) and Role(role) in roles
    ]


def reachable_by(role: Role, target: RequestStatus) -> bool:
    """True if ``role`` can move some request into ``target``."""
    return any(to == target and Role(role) in roles for (_, to), roles in EDGES.items())
