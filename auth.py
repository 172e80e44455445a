import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pymongo.database import Database

from config import settings
from database import get_db, users
from errors import NotFound
from models import Actor, Role

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def hash_password(password):
    return pwd_context.hash(password)


def verify_password(plain, hashed):
    return pwd_context.verify(plain, hashed)


def create_access_token(data: dict):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def token_for(user: dict) -> str:
    return create_access_token({"sub": user["id"], "role": user["role"]})


def get_current_actor(token: str = Depends(oauth2_scheme), db: Database = Depends(get_db)) -> Actor:
    credentials_exception = HTTPException(
        status_code=401,
        detail="Invalid token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.info("Rejected token: %s", e)
        raise credentials_exception
    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    # The role always comes from the stored user, never from the token alone
    try:
        user = users(db).get(user_id)
    except NotFound:
        raise HTTPException(status_code=401, detail="User not found")
    return Actor(id=user["id"], role=Role(user["role"]))
