"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .weekly_schedule import SlotRepositoryProtocol, WeeklyScheduleService

__all__ = ["SlotRepositoryProtocol", "WeeklyScheduleService"]
