from typing import Optional
from pydantic import AliasChoices, BaseModel, Field

# --- Incoming Request Models ---

class BookingRequest(BaseModel):
    # Everything is optional here so that missing fields surface as a 400
    # from BookingService rather than a 422 from FastAPI.
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = Field(default=None, validation_alias=AliasChoices("service", "serviceType"))
    date: Optional[str] = Field(default=None, validation_alias=AliasChoices("date", "bookingDate"))
    car_model: Optional[str] = Field(default=None, validation_alias=AliasChoices("carModel", "car_model"))
    message: Optional[str] = None

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# --- Outgoing Response Models ---

class MessageResponse(BaseModel):
    message: str

class TokenResponse(BaseModel):
    token: str

class DashboardStats(BaseModel):
    total: int
    pending: int
    completed: int
