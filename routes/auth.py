from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from pymongo.database import Database

from auth import get_current_actor
from database import get_db
from models import Actor, ProfileOut, TechnicianProfileUpdate, Token, UserCreate, UserLogin
from services import user_service

router = APIRouter(tags=["Auth"])


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, db: Database = Depends(get_db)):
    created, token = user_service.register(db, user)
    return Token(access_token=token, role=created.role)


@router.post("/login", response_model=Token)
def login(user: UserLogin, db: Database = Depends(get_db)):
    found, token = user_service.authenticate(db, user.email, user.password)
    return Token(access_token=token, role=found.role)


# OAuth2 password form, used by the OpenAPI "Authorize" dialog
@router.post("/token", response_model=Token)
def issue_token(form: OAuth2PasswordRequestForm = Depends(), db: Database = Depends(get_db)):
    found, token = user_service.authenticate(db, form.username, form.password)
    return Token(access_token=token, role=found.role)


@router.get("/profile", response_model=ProfileOut)
def get_profile(actor: Actor = Depends(get_current_actor), db: Database = Depends(get_db)):
    return user_service.get_profile(db, actor)


# Technicians edit their service details here; everyone can change their name
@router.put("/profile", response_model=ProfileOut)
def update_profile(
    patch: TechnicianProfileUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Database = Depends(get_db),
):
    return user_service.update_profile(db, actor, patch)
