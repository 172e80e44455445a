from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database

from auth import get_current_actor
from config import settings
from database import get_db
from models import Actor, RecommendedTechnician, ServiceRequest, TechnicianProfile
from services import recommendations, request_service, user_service

router = APIRouter(tags=["Technicians"])


@router.get("/technicians", response_model=List[TechnicianProfile])
def list_technicians(
    service_type: Optional[str] = None,
    location: Optional[str] = None,
    actor: Actor = Depends(get_current_actor),
    db: Database = Depends(get_db),
):
    return recommendations.filter_technicians(user_service.list_technicians(db), service_type, location)


@router.get("/technicians/recommended", response_model=List[RecommendedTechnician])
def recommended_technicians(
    service_type: Optional[str] = None,
    location: Optional[str] = None,
    limit: int = Query(default=settings.recommendation_limit, ge=1, le=50),
    actor: Actor = Depends(get_current_actor),
    db: Database = Depends(get_db),
):
    candidates = recommendations.filter_technicians(user_service.list_technicians(db), service_type, location)
    return [
        RecommendedTechnician(**tech.model_dump(), score=recommendations.score(tech))
        for tech in recommendations.rank(candidates, limit)
    ]


@router.delete("/technicians/{technician_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_technician(technician_id: str, actor: Actor = Depends(get_current_actor), db: Database = Depends(get_db)):
    user_service.delete_technician(db, actor, technician_id)


# Requests assigned to the logged in technician
@router.get("/technician/requests", response_model=List[ServiceRequest])
def assigned_requests(actor: Actor = Depends(get_current_actor), db: Database = Depends(get_db)):
    return request_service.list_assigned(db, actor)
