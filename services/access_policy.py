"""
Who may do what to a service request.

Every decision is returned as ``Allowed`` or ``Denied(reason)``; a denial
always carries one of the reason codes below so the API can tell the
caller exactly why.
"""

from dataclasses import dataclass
from typing import Optional, Union

from models import Actor, Role, ServiceRequest

NOT_OWNER = "NotOwner"
NOT_ASSIGNED_TECHNICIAN = "NotAssignedTechnician"
INSUFFICIENT_ROLE = "InsufficientRole"
UNAUTHENTICATED = "Unauthenticated"

CREATE = "create"
READ = "read"
CANCEL = "cancel"
TRANSITION = "transition"
DELETE = "delete"

CLIENT_ACTIONS = {READ, CANCEL}
TECHNICIAN_ACTIONS = {READ, TRANSITION}


@dataclass(frozen=True)
class Allowed:
    def __bool__(self):
        return True


@dataclass(frozen=True)
class Denied:
    reason: str

    def __bool__(self):
        return False


ALLOWED = Allowed()


def authorize(actor: Optional[Actor], resource: Optional[ServiceRequest], action: str) -> Union[Allowed, Denied]:
    if actor is None:
        return Denied(UNAUTHENTICATED)

    if actor.role == Role.ADMIN:
        # requests are always raised on behalf of the client who owns them
        return Denied(INSUFFICIENT_ROLE) if action == CREATE else ALLOWED

    if actor.role == Role.CLIENT:
        if action == CREATE:
            return ALLOWED
        if action not in CLIENT_ACTIONS:
            return Denied(INSUFFICIENT_ROLE)
        if resource is None or resource.client_id != actor.id:
            return Denied(NOT_OWNER)
        return ALLOWED

    if actor.role == Role.TECHNICIAN:
        if action not in TECHNICIAN_ACTIONS:
            return Denied(INSUFFICIENT_ROLE)
        if resource is None or resource.technician_id != actor.id:
            return Denied(NOT_ASSIGNED_TECHNICIAN)
        return ALLOWED

    return Denied(INSUFFICIENT_ROLE)


def authorize_role(actor: Optional[Actor], role: Role) -> Union[Allowed, Denied]:
    if actor is None:
        return Denied(UNAUTHENTICATED)
    if actor.role != role:
        return Denied(INSUFFICIENT_ROLE)
    return ALLOWED


def authorize_admin(actor: Optional[Actor]) -> Union[Allowed, Denied]:
    # listing all requests, listing and deleting users or technician profiles
    return authorize_role(actor, Role.ADMIN)


def visible_filter(actor: Actor) -> dict:
    """Store filter selecting exactly the requests ``actor`` may read."""
    if actor.role == Role.ADMIN:
        return {}
    if actor.role == Role.TECHNICIAN:
        return {"technician_id": actor.id}
    return {"client_id": actor.id}
