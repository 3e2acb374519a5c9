"""
Adapters layer - Slot data sources (JSON file, shelter backend API).
"""

from .json_slot_repository import JsonSlotRepository
from .shelter_api_client import ShelterApiClient

__all__ = ["JsonSlotRepository", "ShelterApiClient"]
