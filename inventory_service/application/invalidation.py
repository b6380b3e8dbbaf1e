"""
Cache invalidation policy for inventory writes.

Both keyspaces hold snapshots of the same rows but are keyed differently.
The product-id keyspace cannot be targeted from a record id without another
store read, so every write wipes it; the id keyspace drops only the written
key. Create leaves the id keyspace alone because misses are never cached, so
no entry can exist for an id the store has not handed out yet.

after_commit must only be called once the store mutation has committed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from inventory_service.core.logging_config import get_logger
from inventory_service.domain.exceptions import CacheDegradedError
from inventory_service.infrastructure.cache import CacheKeyspace, InventoryCaches

logger = get_logger(__name__)


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CLEAR = "clear"


class KeyAction(str, Enum):
    NONE = "none"
    KEY = "key"
    ALL = "all"


@dataclass(frozen=True)
class InvalidationPlan:
    by_id: KeyAction
    by_product_id: KeyAction


POLICY: Dict[MutationKind, InvalidationPlan] = {
    MutationKind.CREATE: InvalidationPlan(by_id=KeyAction.NONE, by_product_id=KeyAction.ALL),
    MutationKind.UPDATE: InvalidationPlan(by_id=KeyAction.KEY, by_product_id=KeyAction.ALL),
    MutationKind.DELETE: InvalidationPlan(by_id=KeyAction.KEY, by_product_id=KeyAction.ALL),
    MutationKind.CLEAR: InvalidationPlan(by_id=KeyAction.ALL, by_product_id=KeyAction.ALL),
}


class InvalidationCoordinator:
    def __init__(self, caches: InventoryCaches):
        self.caches = caches

    def plan(self, kind: MutationKind) -> InvalidationPlan:
        return POLICY[kind]

    def after_commit(self, kind: MutationKind, record_id: Optional[int] = None) -> bool:
        """Apply the plan for kind. Returns False if any keyspace failed.

        Failures are logged as degraded cache state and not raised: the
        write has already committed and the store stays authoritative.
        """
        plan = self.plan(kind)
        applied = True
        for keyspace, action in (
            (self.caches.by_id, plan.by_id),
            (self.caches.by_product_id, plan.by_product_id),
        ):
            try:
                self._apply(keyspace, action, record_id)
            except Exception as e:
                applied = False
                degraded = CacheDegradedError(
                    f"Invalidation of {keyspace.name} failed after {kind.value}"
                )
                logger.error(
                    str(degraded),
                    exc_info=e,
                    extra={
                        "extra_fields": {
                            "mutation": kind.value,
                            "keyspace": keyspace.name,
                            "record_id": record_id,
                        }
                    },
                )
        return applied

    @staticmethod
    def _apply(keyspace: CacheKeyspace, action: KeyAction, record_id: Optional[int]) -> None:
        if action is KeyAction.ALL:
            keyspace.invalidate_all()
        elif action is KeyAction.KEY:
            if record_id is None:
                raise ValueError(f"{keyspace.name}: single-key invalidation needs a record id")
            keyspace.invalidate(record_id)
