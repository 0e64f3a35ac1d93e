from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from app.core.context import AppContext, get_context
from app.core.security import require_admin
from app.models.api_models import BookingRequest, DashboardStats, MessageResponse
from app.models.db_models import Booking
from app.services.booking_service import BookingService

router = APIRouter()
admin = [Depends(require_admin)]


def get_booking_service(ctx: AppContext = Depends(get_context)) -> BookingService:
    return BookingService(ctx.store, ctx.notifier)


@router.post("/bookings", status_code=201, response_model=MessageResponse)
async def create_booking(
    req: BookingRequest,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
):
    await service.create_booking(req, background_tasks)
    return {"message": "Booking successful"}

@router.get("/bookings", response_model=List[Booking], dependencies=admin)
async def list_bookings(service: BookingService = Depends(get_booking_service)):
    return await service.list_active()

@router.get("/dashboard/stats", response_model=DashboardStats, dependencies=admin)
async def dashboard_stats(service: BookingService = Depends(get_booking_service)):
    return await service.dashboard_stats()

@router.get("/bookings/search/{term}", response_model=List[Booking], dependencies=admin)
async def search_bookings(term: str, service: BookingService = Depends(get_booking_service)):
    return await service.search(term)

@router.get("/bookings/{booking_id}", response_model=Optional[Booking], dependencies=admin)
async def get_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    # null when not found, no 404
    return await service.get_by_id(booking_id)

@router.put("/bookings/{booking_id}/complete", response_model=MessageResponse, dependencies=admin)
async def complete_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    await service.mark_completed(booking_id)
    return {"message": "Marked as completed"}

@router.put("/bookings/{booking_id}/archive", response_model=MessageResponse, dependencies=admin)
async def archive_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    await service.archive(booking_id)
    return {"message": "Archived successfully"}

@router.delete("/bookings/{booking_id}", response_model=MessageResponse, dependencies=admin)
async def delete_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    await service.delete_booking(booking_id)
    return {"message": "Deleted successfully"}
