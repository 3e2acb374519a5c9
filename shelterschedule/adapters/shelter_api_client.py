"""
HTTP client for the shelter backend REST API.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests
from pendulum import DateTime

from ..domain.exceptions import SlotSourceError
from ..domain.models import ActivityStatus, Animal, Shelter, Slot, SlotStatus
from .records import (
    parse_activity_slot,
    parse_animal,
    parse_shelter,
    parse_unavailability_slot,
)

logger = logging.getLogger(__name__)


class ShelterApiClient:
    """
    Client for the shelter backend's animal and slot endpoints.

    Requests are blocking (``requests``); the async repository methods push
    them to a worker thread so the service can await them.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout_seconds: int = 30,
        timezone: str = "UTC",
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. ``https://shelter.example.com/api``
            token: Bearer token; omitted from headers when empty
            timeout_seconds: Per-request timeout
            timezone: Default timezone for naive timestamps
            session: Optional pre-configured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.timezone = timezone
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    async def get_animal(self, animal_id: str) -> Optional[Animal]:
        return await asyncio.to_thread(self.fetch_animal, animal_id)

    async def get_reserved_slots(
        self,
        animal: Animal,
        week_start: DateTime,
        week_end: DateTime,
    ) -> List[Slot]:
        return await asyncio.to_thread(self.fetch_reserved_slots, animal, week_start, week_end)

    async def get_unavailable_slots(
        self,
        shelter: Shelter,
        week_start: DateTime,
        week_end: DateTime,
    ) -> List[Slot]:
        return await asyncio.to_thread(self.fetch_unavailable_slots, shelter, week_start, week_end)

    def fetch_animal(self, animal_id: str) -> Optional[Animal]:
        """
        Fetch an animal together with its shelter.

        Returns:
            The animal, or None when the API answers 404
        """
        data = self._get(f"/animals/{animal_id}", allow_not_found=True)
        if data is None:
            return None

        try:
            shelter_record = data.get("shelter")
            shelter = parse_shelter(shelter_record) if shelter_record else None
            return parse_animal(data, shelter=shelter)
        except (KeyError, ValueError) as exc:
            raise SlotSourceError(f"Malformed animal payload for {animal_id}: {exc}") from exc

    def fetch_reserved_slots(
        self,
        animal: Animal,
        week_start: DateTime,
        week_end: DateTime,
    ) -> List[Slot]:
        records = self._get(
            f"/animals/{animal.id}/activity-slots",
            params=self._window_params(week_start, week_end),
        )
        timezone = self._timezone_for(animal.shelter)

        slots: List[Slot] = []
        for record in self._as_list(records):
            try:
                slot = parse_activity_slot(record, timezone)
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping unparseable activity slot %r: %s", record.get("id"), exc)
                continue

            if slot.activity_status is ActivityStatus.ACTIVE and slot.overlaps_window(week_start, week_end):
                slots.append(slot)

        return slots

    def fetch_unavailable_slots(
        self,
        shelter: Shelter,
        week_start: DateTime,
        week_end: DateTime,
    ) -> List[Slot]:
        records = self._get(
            f"/shelters/{shelter.id}/unavailability-slots",
            params=self._window_params(week_start, week_end),
        )
        timezone = self._timezone_for(shelter)

        slots: List[Slot] = []
        for record in self._as_list(records):
            try:
                slot = parse_unavailability_slot(record, timezone)
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping unparseable unavailability slot %r: %s", record.get("id"), exc)
                continue

            if slot.status is SlotStatus.UNAVAILABLE and slot.overlaps_window(week_start, week_end):
                slots.append(slot)

        return slots

    def test_connection(self) -> Dict[str, Any]:
        """
        Test the connection by calling the API health endpoint.

        Raises:
            SlotSourceError: If the API cannot be reached
        """
        return self._get("/health") or {}

    def _get(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None,
        allow_not_found: bool = False,
    ) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout_seconds,
            )
            if allow_not_found and response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()

        # JSONDecodeError is also a RequestException, so it goes first
        except requests.exceptions.JSONDecodeError as exc:
            raise SlotSourceError(f"Invalid JSON from {url}: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            raise SlotSourceError(f"Failed to fetch {url}: {exc}") from exc

    @staticmethod
    def _window_params(week_start: DateTime, week_end: DateTime) -> Dict[str, str]:
        return {
            "from": week_start.to_iso8601_string(),
            "to": week_end.to_iso8601_string(),
        }

    @staticmethod
    def _as_list(payload: Any) -> List[Dict[str, Any]]:
        # Endpoints may wrap collections as {"value": [...]}
        if isinstance(payload, dict):
            payload = payload.get("value", [])
        if not isinstance(payload, list):
            raise SlotSourceError(f"Expected a list of slots, got {type(payload).__name__}")
        return payload

    def _timezone_for(self, shelter: Optional[Shelter]) -> str:
        if shelter is not None and shelter.timezone:
            return shelter.timezone
        return self.timezone
