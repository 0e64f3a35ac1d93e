import uuid
from typing import List, Optional

from fastapi import BackgroundTasks
from starlette.concurrency import run_in_threadpool

from app.core.errors import ValidationError
from app.core.logger import logger
from app.models.api_models import BookingRequest
from app.models.db_models import Booking, DEFAULT_CAR_MODEL, STATUS_COMPLETED, STATUS_PENDING
from app.services.db_service import BookingStore
from app.services.notification_service import BookingNotifier

REQUIRED_FIELDS = ("name", "email", "phone", "service", "date")
SEARCH_FIELDS = ("name", "phone", "service")
ACTIVE = {"archived": False}


def _is_valid_id(booking_id: str) -> bool:
    # Only the canonical hyphenated form, which is what Postgres accepts
    value = str(booking_id)
    try:
        return str(uuid.UUID(value)) == value.lower()
    except ValueError:
        return False


class BookingService:
    def __init__(self, store: BookingStore, notifier: BookingNotifier):
        self.store = store
        self.notifier = notifier

    async def create_booking(self, data: BookingRequest, background_tasks: Optional[BackgroundTasks] = None) -> Booking:
        """
        Validates and stores a new booking, then queues the notification emails.
        Email failures are logged by the notifier and never fail the create.
        """
        values = {}
        for field in REQUIRED_FIELDS:
            value = (getattr(data, field) or "").strip()
            if not value:
                logger.info(f"📥 Rejected booking, missing '{field}'")
                raise ValidationError("All required fields are required")
            values[field] = value

        row = {
            **values,
            "car_model": (data.car_model or "").strip() or DEFAULT_CAR_MODEL,
            "message": data.message or "",
            "status": STATUS_PENDING,
            "archived": False,
        }
        booking = Booking.model_validate(await self.store.insert(row))
        logger.info(f"✅ Booking {booking.id} created for {booking.name} ({booking.service}, {booking.date})")

        if background_tasks is not None:
            background_tasks.add_task(self.notifier.notify_booking_created, booking)
        else:
            await run_in_threadpool(self.notifier.notify_booking_created, booking)
        return booking

    async def list_active(self) -> List[Booking]:
        rows = await self.store.find(ACTIVE, newest_first=True)
        return [Booking.model_validate(row) for row in rows]

    async def get_by_id(self, booking_id: str) -> Optional[Booking]:
        if not _is_valid_id(booking_id):
            return None
        row = await self.store.find_by_id(booking_id)
        return Booking.model_validate(row) if row else None

    async def search(self, term: str) -> List[Booking]:
        rows = await self.store.search(term, SEARCH_FIELDS, ACTIVE)
        return [Booking.model_validate(row) for row in rows]

    async def mark_completed(self, booking_id: str) -> None:
        if _is_valid_id(booking_id):
            await self.store.update_by_id(booking_id, {"status": STATUS_COMPLETED})
            logger.info(f"✔️ Booking {booking_id} marked as completed")

    async def archive(self, booking_id: str) -> None:
        if _is_valid_id(booking_id):
            await self.store.update_by_id(booking_id, {"archived": True})
            logger.info(f"📦 Booking {booking_id} archived")

    async def delete_booking(self, booking_id: str) -> None:
        if _is_valid_id(booking_id):
            await self.store.delete_by_id(booking_id)
            logger.info(f"🗑️ Booking {booking_id} deleted")

    async def dashboard_stats(self) -> dict:
        total = await self.store.count(ACTIVE)
        pending = await self.store.count({**ACTIVE, "status": STATUS_PENDING})
        completed = await self.store.count({**ACTIVE, "status": STATUS_COMPLETED})
        return {"total": total, "pending": pending, "completed": completed}
