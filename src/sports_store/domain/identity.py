"""Per-type identity rules.

Every managed record type maps to one IdentityStrategy that names its
collection, the field used to look a record up, and the field used to
delete it during rollback. The mapping is resolved by type, never by the
type's display name.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

from ..core.errors import Unsupported
from .models import (
    LocationData,
    MovementType,
    PersistentObject,
    RunningPlan,
    RunningPlanEntry,
    RunningUnit,
    Track,
    Training,
    TrainingType,
    User,
)


@dataclass(frozen=True)
class IdentityStrategy:
    """How records of one type are identified in the store."""

    collection: str
    key_field: str = "uuid"
    rollback_field: Optional[str] = None
    unique_fields: Tuple[str, ...] = ()

    @property
    def rollback_key_field(self) -> str:
        return self.rollback_field or self.key_field

    def key_of(self, record: PersistentObject) -> Any:
        """Identity value used for lookups."""
        return getattr(record, self.key_field)

    def rollback_key_of(self, record: PersistentObject) -> Any:
        """Identity value used for compensating deletes."""
        return getattr(record, self.rollback_key_field)


IDENTITY_STRATEGIES: Dict[Type[PersistentObject], IdentityStrategy] = {
    LocationData: IdentityStrategy("location_data"),
    # movement type has a unique business key
    MovementType: IdentityStrategy("movement_types", key_field="key"),
    RunningPlan: IdentityStrategy("running_plans"),
    RunningPlanEntry: IdentityStrategy("running_plan_entries"),
    RunningUnit: IdentityStrategy("running_units"),
    Track: IdentityStrategy("tracks"),
    Training: IdentityStrategy("trainings"),
    # training type has a unique name, used as delete key during rollback
    TrainingType: IdentityStrategy(
        "training_types", rollback_field="name", unique_fields=("name",)
    ),
    User: IdentityStrategy("users", unique_fields=("email_address",)),
}

# Every type handled by the store, in the order used for a full reset.
MANAGED_TYPES: List[Type[PersistentObject]] = list(IDENTITY_STRATEGIES)

# Reference data: inserted and updated, never deleted.
REFERENCE_DATA_TYPES: List[Type[PersistentObject]] = [MovementType, TrainingType]


def strategy_for(record_type: Type[PersistentObject]) -> IdentityStrategy:
    """Return the identity strategy of a record type.

    Raises:
        Unsupported: If the type is not managed by the store
    """
    for klass in record_type.__mro__:
        strategy = IDENTITY_STRATEGIES.get(klass)
        if strategy is not None:
            return strategy
    raise Unsupported(record_type.__name__)
