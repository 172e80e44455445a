from typing import List

from fastapi import APIRouter, Depends, status
from pymongo.database import Database

from auth import get_current_actor
from database import get_db
from models import Actor, ServiceRequest, ServiceRequestCreate, StatusUpdate
from services import request_service

router = APIRouter(prefix="/requests", tags=["Service Requests"])


# Clients book a technician
@router.post("", response_model=ServiceRequest, status_code=status.HTTP_201_CREATED)
def create_request(
    request: ServiceRequestCreate,
    actor: Actor = Depends(get_current_actor),
    db: Database = Depends(get_db),
):
    return request_service.create_request(
        db,
        actor,
        service_type=request.service_type,
        description=request.description,
        location=request.location,
        technician_id=request.technician_id,
        scheduled_date=request.scheduled_date,
    )


@router.get("/me", response_model=List[ServiceRequest])
def my_requests(actor: Actor = Depends(get_current_actor), db: Database = Depends(get_db)):
    return request_service.list_for_actor(db, actor)


@router.get("/{request_id}", response_model=ServiceRequest)
def get_request(request_id: str, actor: Actor = Depends(get_current_actor), db: Database = Depends(get_db)):
    return request_service.get_request(db, actor, request_id)


# Accept / start / complete for technicians, cancel for clients and admins
@router.patch("/{request_id}", response_model=ServiceRequest)
def update_status(
    request_id: str,
    update: StatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Database = Depends(get_db),
):
    return request_service.transition_status(db, actor, request_id, update.status)
