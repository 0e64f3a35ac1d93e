from supabase import create_async_client, AsyncClient
from app.core.config import Settings
from app.core.errors import StoreUnavailable
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger("app")


def _like_pattern(term: str) -> str:
    """
    Builds a quoted `*term*` ilike value for a PostgREST `or` filter.
    LIKE wildcards in the term are matched literally.
    """
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    quoted = f"*{escaped}*".replace("\\", "\\\\").replace('"', '\\"')
    return f'"{quoted}"'


def _filter_value(value: Any) -> Any:
    # PostgREST expects lowercase booleans in query strings
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class BookingStore:
    """Async access to the Supabase `bookings` table."""

    def __init__(self, client: AsyncClient, table: str = "bookings"):
        self._client = client
        self.table = table

    @classmethod
    async def connect(cls, settings: Settings) -> "BookingStore":
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise StoreUnavailable("SUPABASE_URL/SUPABASE_KEY are not configured")
        try:
            client = await create_async_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        except Exception as e:
            raise StoreUnavailable(f"Failed to initialize Supabase: {e}") from e
        logger.info("✅ Supabase Async client initialized")
        return cls(client, settings.BOOKINGS_TABLE)

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        for column, value in (filters or {}).items():
            query = query.eq(column, _filter_value(value))
        return query

    async def insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._client.table(self.table).insert(row).execute()
        if not response.data:
            raise RuntimeError("Insert returned no rows")
        return response.data[0]

    async def find(self, filters: Optional[Dict[str, Any]] = None, newest_first: bool = False) -> List[Dict[str, Any]]:
        query = self._apply_filters(self._client.table(self.table).select("*"), filters)
        if newest_first:
            query = query.order("created_at", desc=True)
        response = await query.execute()
        return response.data or []

    async def find_by_id(self, booking_id: str) -> Optional[Dict[str, Any]]:
        response = await self._client.table(self.table)\
            .select("*")\
            .eq("id", booking_id)\
            .limit(1)\
            .execute()
        if response.data:
            return response.data[0]
        return None

    async def search(self, term: str, fields: Iterable[str], filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Rows where any of `fields` contains `term`, case-insensitive."""
        pattern = _like_pattern(term)
        condition = ",".join(f"{field}.ilike.{pattern}" for field in fields)
        query = self._apply_filters(self._client.table(self.table).select("*"), filters)
        response = await query.or_(condition).execute()
        return response.data or []

    async def update_by_id(self, booking_id: str, changes: Dict[str, Any]) -> None:
        payload = dict(changes)
        payload["updated_at"] = datetime.now(timezone.utc).isoformat()
        await self._client.table(self.table).update(payload).eq("id", booking_id).execute()

    async def delete_by_id(self, booking_id: str) -> None:
        await self._client.table(self.table).delete().eq("id", booking_id).execute()

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        query = self._apply_filters(self._client.table(self.table).select("id", count="exact"), filters)
        response = await query.execute()
        return response.count or 0
