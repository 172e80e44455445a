"""
Service request operations.

Each function takes the database handle and the acting ``Actor`` explicitly,
checks the access policy, runs status changes through the status machine
and persists through ``MongoStore``.  Nothing else writes service requests.
"""

import logging
from datetime import datetime
from typing import List, Optional

from pymongo.database import Database

from config import settings
from database import service_requests, users
from errors import (
    ConcurrentModification,
    Forbidden,
    InvalidTransition,
    NotFound,
    TerminalStateViolation,
    ValidationError,
)
from models import Actor, RequestStatus, Role, ServiceRequest
from services import access_policy, status_machine

logger = logging.getLogger(__name__)


def _check(actor: Optional[Actor], resource: Optional[ServiceRequest], action: str) -> None:
    decision = access_policy.authorize(actor, resource, action)
    if not decision:
        logger.warning(
            "Denied %s on request %s for %s: %s",
            action,
            resource.id if resource else None,
            actor.id if actor else "anonymous",
            decision.reason,
        )
        raise Forbidden(decision.reason)


def create_request(
    db: Database,
    actor: Optional[Actor],
    service_type: str,
    description: str,
    location: str,
    technician_id: Optional[str] = None,
    scheduled_date: Optional[datetime] = None,
) -> ServiceRequest:
    _check(actor, None, access_policy.CREATE)

    fields = {"service_type": service_type, "description": description, "location": location}
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        raise ValidationError(f"Required fields are empty: {', '.join(missing)}")

    if technician_id:
        try:
            technician = users(db).get(technician_id)
        except NotFound:
            technician = None
        if technician is None or technician.get("role") != Role.TECHNICIAN.value:
            raise ValidationError(f"Unknown technician {technician_id!r}")

    record = service_requests(db).create({
        "client_id": actor.id,
        "technician_id": technician_id or None,
        "service_type": service_type.strip(),
        "description": description.strip(),
        "location": location.strip(),
        "scheduled_date": scheduled_date,
        "status": RequestStatus.PENDING.value,
    })
    logger.info("Request %s created by client %s", record["id"], actor.id)
    return ServiceRequest(**record)


def list_for_actor(db: Database, actor: Optional[Actor]) -> List[ServiceRequest]:
    if actor is None:
        raise Forbidden(access_policy.UNAUTHENTICATED)
    records = service_requests(db).query(access_policy.visible_filter(actor))
    return [ServiceRequest(**record) for record in records]


def _require_role(actor: Optional[Actor], role: Role) -> None:
    decision = access_policy.authorize_role(actor, role)
    if not decision:
        logger.warning("%s listing denied for %s: %s", role.value, actor.id if actor else "anonymous", decision.reason)
        raise Forbidden(decision.reason)


def list_all(db: Database, actor: Optional[Actor]) -> List[ServiceRequest]:
    _require_role(actor, Role.ADMIN)
    return list_for_actor(db, actor)


def list_assigned(db: Database, actor: Optional[Actor]) -> List[ServiceRequest]:
    _require_role(actor, Role.TECHNICIAN)
    return list_for_actor(db, actor)


def get_request(db: Database, actor: Optional[Actor], request_id: str) -> ServiceRequest:
    if actor is None:
        raise Forbidden(access_policy.UNAUTHENTICATED)
    request = ServiceRequest(**service_requests(db).get(request_id))
    _check(actor, request, access_policy.READ)
    return request


def transition_status(
    db: Database,
    actor: Optional[Actor],
    request_id: str,
    target: RequestStatus,
) -> ServiceRequest:
    """Move a request to ``target``.

    The write is a compare-and-set on the status that was read, so two
    actors racing on the same request cannot both win.  The loser re-reads
    and is validated again against the new status.
    """
    if actor is None:
        raise Forbidden(access_policy.UNAUTHENTICATED)
    try:
        target = RequestStatus(target)
    except ValueError:
        raise ValidationError(f"Unknown status {target!r}")
    store = service_requests(db)

    for attempt in range(settings.transition_retries):
        request = ServiceRequest(**store.get(request_id))

        if target == RequestStatus.CANCELLED and actor.role == Role.CLIENT:
            action = access_policy.CANCEL
        else:
            action = access_policy.TRANSITION
        _check(actor, request, action)

        if request.status == target and status_machine.reachable_by(actor.role, target):
            # retry of a change that already happened
            return request

        result = status_machine.transition(request.status, actor.role, target)
        if isinstance(result, status_machine.Rejected):
            logger.warning(
                "Rejected %s -> %s on request %s by %s: %s",
                request.status.value, target.value, request_id, actor.role.value, result.reason,
            )
            if result.reason == status_machine.TERMINAL_STATE_VIOLATION:
                raise TerminalStateViolation(result.message)
            raise InvalidTransition(result.message, result.reason)

        if request.technician_id is None and result != RequestStatus.CANCELLED:
            raise InvalidTransition("Request has no assigned technician", "NoTechnicianAssigned")

        try:
            record = store.update(
                request_id,
                {"status": result.value},
                expected={"status": request.status.value},
            )
        except ConcurrentModification:
            logger.info("Request %s changed under us, retrying (%d)", request_id, attempt + 1)
            continue

        logger.info(
            "Request %s moved %s -> %s by %s %s",
            request_id, request.status.value, result.value, actor.role.value, actor.id,
        )
        return ServiceRequest(**record)

    raise ConcurrentModification(f"Request {request_id} kept changing, try again")
