import itertools

import pytest

from models import RequestStatus, Role
from services.status_machine import (
    INVALID_TRANSITION,
    TERMINAL_STATE_VIOLATION,
    Rejected,
    allowed_targets,
    transition,
)

PENDING = RequestStatus.PENDING
ACCEPTED = RequestStatus.ACCEPTED
IN_PROGRESS = RequestStatus.IN_PROGRESS
COMPLETED = RequestStatus.COMPLETED
CANCELLED = RequestStatus.CANCELLED

ALLOWED = {
    (PENDING, Role.TECHNICIAN, ACCEPTED),
    (PENDING, Role.CLIENT, CANCELLED),
    (ACCEPTED, Role.TECHNICIAN, IN_PROGRESS),
    (ACCEPTED, Role.TECHNICIAN, COMPLETED),
    (IN_PROGRESS, Role.TECHNICIAN, COMPLETED),
    (PENDING, Role.ADMIN, CANCELLED),
    (ACCEPTED, Role.ADMIN, CANCELLED),
    (IN_PROGRESS, Role.ADMIN, CANCELLED),
}

ALL_TRIPLES = list(itertools.product(RequestStatus, Role, RequestStatus))


@pytest.mark.parametrize("current,role,target", ALL_TRIPLES)
def test_full_matrix(current, role, target):
    result = transition(current, role, target)
    if (current, role, target) in ALLOWED:
        assert result == target
    elif current in (COMPLETED, CANCELLED):
        assert result == Rejected(TERMINAL_STATE_VIOLATION, result.message)
    else:
        assert isinstance(result, Rejected)
        assert result.reason == INVALID_TRANSITION


@pytest.mark.parametrize("terminal", [COMPLETED, CANCELLED])
@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("target", list(RequestStatus))
def test_terminal_states_always_reject(terminal, role, target):
    result = transition(terminal, role, target)
    assert isinstance(result, Rejected)
    assert result.reason == TERMINAL_STATE_VIOLATION


def test_accepts_plain_strings():
    assert transition("pending", "technician", "accepted") == ACCEPTED


def test_same_status_is_not_an_edge():
    result = transition(ACCEPTED, Role.TECHNICIAN, ACCEPTED)
    assert isinstance(result, Rejected)
    assert result.reason == INVALID_TRANSITION


def test_allowed_targets():
    assert set(allowed_targets(ACCEPTED, Role.TECHNICIAN)) == {IN_PROGRESS, COMPLETED}
    assert allowed_targets(PENDING, Role.CLIENT) == [CANCELLED]
    assert allowed_targets(COMPLETED, Role.ADMIN) == []


@pytest.mark.parametrize("current,role,target", [
    ("done", Role.TECHNICIAN, ACCEPTED),
    (PENDING, "plumber", ACCEPTED),
    (PENDING, Role.TECHNICIAN, "done"),
])
def test_unknown_values_are_rejected(current, role, target):
    result = transition(current, role, target)
    assert isinstance(result, Rejected)
    assert result.reason == INVALID_TRANSITION
