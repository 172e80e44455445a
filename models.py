from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    CLIENT = "client"
    TECHNICIAN = "technician"
    ADMIN = "admin"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED})


class Actor(BaseModel):
    """Identity and role of whoever is performing an operation."""

    id: str
    role: Role


# --- Users ---

class UserBase(BaseModel):
    email: EmailStr
    name: str
    role: Role = Role.CLIENT


class UserCreate(UserBase):
    password: str = Field(min_length=6)
    # Technician only, ignored for other roles
    service_type: Optional[str] = None
    location: Optional[str] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserOut(UserBase):
    id: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role


# --- Technicians ---

class TechnicianProfile(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    name: str = ""
    service_type: str = ""
    location: str = ""
    hourly_rate: float = Field(default=0, ge=0)
    rating: float = Field(default=4.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    availability: bool = True
    completion_rate: Optional[float] = None


class TechnicianProfileUpdate(BaseModel):
    name: Optional[str] = None
    service_type: Optional[str] = None
    location: Optional[str] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    availability: Optional[bool] = None


class ProfileOut(BaseModel):
    user: UserOut
    technician: Optional[TechnicianProfile] = None


class RecommendedTechnician(TechnicianProfile):
    score: float


# --- Service requests ---

class ServiceRequestCreate(BaseModel):
    technician_id: Optional[str] = None
    service_type: str
    description: str
    location: str
    scheduled_date: Optional[datetime] = None


class ServiceRequest(BaseModel):
    id: str
    client_id: str
    technician_id: Optional[str] = None
    service_type: str
    description: str
    status: RequestStatus = RequestStatus.PENDING
    scheduled_date: Optional[datetime] = None
    location: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StatusUpdate(BaseModel):
    status: RequestStatus


class DashboardStats(BaseModel):
    total_users: int
    total_technicians: int
    total_requests: int
    pending_requests: int
    completed_requests: int
