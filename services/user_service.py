"""
Accounts, technician profiles and the admin dashboard.
"""

import logging
from typing import List, Optional, Tuple

from pymongo.database import Database

from auth import hash_password, token_for, verify_password
from database import service_requests, technicians, users
from errors import Conflict, Forbidden, NotFound, ValidationError
from models import (
    Actor,
    DashboardStats,
    ProfileOut,
    RequestStatus,
    Role,
    TechnicianProfile,
    TechnicianProfileUpdate,
    UserCreate,
    UserOut,
)
from services import access_policy

logger = logging.getLogger(__name__)

TECHNICIAN_FIELDS = ("service_type", "location", "hourly_rate", "availability")


def _require_admin(actor: Optional[Actor]) -> None:
    decision = access_policy.authorize_admin(actor)
    if not decision:
        logger.warning("Admin action denied for %s: %s", actor.id if actor else "anonymous", decision.reason)
        raise Forbidden(decision.reason)


def _user_out(record: dict) -> UserOut:
    return UserOut(id=record["id"], name=record["name"], email=record["email"], role=record["role"])


def create_user(db: Database, data: UserCreate) -> dict:
    if users(db).find_one({"email": data.email}):
        raise Conflict("User already exists")

    user = users(db).create({
        "name": data.name,
        "email": data.email,
        "password": hash_password(data.password),
        "role": data.role.value,
    })
    if data.role == Role.TECHNICIAN:
        profile = TechnicianProfile(
            user_id=user["id"],
            name=data.name,
            service_type=data.service_type or "",
            location=data.location or "",
            hourly_rate=data.hourly_rate or 0,
        )
        technicians(db).create(profile.model_dump(exclude={"id"}))
    logger.info("Registered %s %s", data.role.value, user["id"])
    return user


def register(db: Database, data: UserCreate) -> Tuple[UserOut, str]:
    if data.role == Role.ADMIN:
        raise ValidationError("Admin accounts cannot be self-registered")
    user = create_user(db, data)
    return _user_out(user), token_for(user)


def authenticate(db: Database, email: str, password: str) -> Tuple[UserOut, str]:
    found = users(db).find_one({"email": email})
    if not found or not verify_password(password, found["password"]):
        raise Forbidden(access_policy.UNAUTHENTICATED, "Invalid credentials")
    return _user_out(found), token_for(found)


def _technician_profile(db: Database, user_id: str) -> Optional[dict]:
    return technicians(db).find_one({"user_id": user_id})


def get_profile(db: Database, actor: Actor) -> ProfileOut:
    user = users(db).get(actor.id)
    profile = None
    if actor.role == Role.TECHNICIAN:
        record = _technician_profile(db, actor.id)
        if record:
            profile = TechnicianProfile(**record)
    return ProfileOut(user=_user_out(user), technician=profile)


def update_profile(db: Database, actor: Actor, patch: TechnicianProfileUpdate) -> ProfileOut:
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    technician_changes = {k: v for k, v in changes.items() if k in TECHNICIAN_FIELDS}
    if technician_changes and actor.role != Role.TECHNICIAN:
        raise Forbidden(access_policy.INSUFFICIENT_ROLE, "Only technicians have a service profile")

    if "name" in changes:
        if not changes["name"].strip():
            raise ValidationError("Name cannot be empty")
        users(db).update(actor.id, {"name": changes["name"]})

    if actor.role == Role.TECHNICIAN:
        profile_changes = dict(technician_changes)
        if "name" in changes:
            profile_changes["name"] = changes["name"]
        record = _technician_profile(db, actor.id)
        if record is None:
            raise NotFound("Technician profile not found")
        if profile_changes:
            technicians(db).update(record["id"], profile_changes)
            logger.info("Technician %s updated profile: %s", actor.id, sorted(profile_changes))

    return get_profile(db, actor)


def list_technicians(db: Database) -> List[TechnicianProfile]:
    return [TechnicianProfile(**record) for record in technicians(db).query()]


def delete_technician(db: Database, actor: Actor, technician_id: str) -> None:
    _require_admin(actor)
    profile = technicians(db).get(technician_id)
    technicians(db).delete(technician_id)
    try:
        users(db).delete(profile["user_id"])
    except NotFound:
        logger.warning("Technician %s had no user account %s", technician_id, profile["user_id"])
    logger.info("Admin %s removed technician %s", actor.id, technician_id)


def list_users(db: Database, actor: Actor) -> List[UserOut]:
    _require_admin(actor)
    return [_user_out(record) for record in users(db).query()]


def delete_user(db: Database, actor: Actor, user_id: str) -> None:
    _require_admin(actor)
    if user_id == actor.id:
        raise ValidationError("Admins cannot delete their own account")
    user = users(db).get(user_id)
    if user["role"] == Role.TECHNICIAN.value:
        profile = _technician_profile(db, user_id)
        if profile:
            technicians(db).delete(profile["id"])
    users(db).delete(user_id)
    logger.info("Admin %s deleted user %s", actor.id, user_id)


def dashboard_stats(db: Database, actor: Actor) -> DashboardStats:
    _require_admin(actor)
    requests = service_requests(db)
    return DashboardStats(
        total_users=users(db).count({"role": Role.CLIENT.value}),
        total_technicians=technicians(db).count(),
        total_requests=requests.count(),
        pending_requests=requests.count({"status": RequestStatus.PENDING.value}),
        completed_requests=requests.count({"status": RequestStatus.COMPLETED.value}),
    )
