from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from fastapi import Request

from app.core.config import Settings

if TYPE_CHECKING:
    from app.core.security import TokenService
    from app.services.db_service import BookingStore
    from app.services.notification_service import BookingNotifier


@dataclass
class AppContext:
    """Handles shared by every request, built once at startup."""

    settings: Settings
    tokens: "TokenService"
    notifier: "BookingNotifier"
    store: Optional["BookingStore"] = None


def get_context(request: Request) -> AppContext:
    return request.app.state.context
