"""Store contracts and their in-memory and SQL implementations."""

from tandem.stores.memory import (
    InMemoryGoalStore,
    InMemoryPartnerStore,
    InMemoryTaskStore,
    InMemoryWeekStore,
)
from tandem.stores.protocols import GoalStore, PartnerStore, TaskStore, WeekStore

__all__ = [
    "GoalStore",
    "InMemoryGoalStore",
    "InMemoryPartnerStore",
    "InMemoryTaskStore",
    "InMemoryWeekStore",
    "PartnerStore",
    "TaskStore",
    "WeekStore",
]
