from typing import List

from fastapi import APIRouter, Depends, status
from pymongo.database import Database

from auth import get_current_actor
from database import get_db
from models import Actor, DashboardStats, ServiceRequest, UserOut
from services import request_service, user_service

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/requests", response_model=List[ServiceRequest])
def all_requests(actor: Actor = Depends(get_current_actor), db: Database = Depends(get_db)):
    return request_service.list_all(db, actor)


@router.get("/users", response_model=List[UserOut])
def all_users(actor: Actor = Depends(get_current_actor), db: Database = Depends(get_db)):
    return user_service.list_users(db, actor)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, actor: Actor = Depends(get_current_actor), db: Database = Depends(get_db)):
    user_service.delete_user(db, actor, user_id)


@router.get("/stats", response_model=DashboardStats)
def stats(actor: Actor = Depends(get_current_actor), db: Database = Depends(get_db)):
    return user_service.dashboard_stats(db, actor)
