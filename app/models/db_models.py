from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

STATUS_PENDING = "Pending"
STATUS_COMPLETED = "Completed"
DEFAULT_CAR_MODEL = "Not specified"

class Booking(BaseModel):
    """A row of the `bookings` table. Columns are snake_case, JSON is camelCase."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    phone: str
    service: str
    date: str
    car_model: Optional[str] = Field(default=DEFAULT_CAR_MODEL, alias="carModel")
    message: Optional[str] = ""
    status: str = STATUS_PENDING
    archived: bool = False
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
