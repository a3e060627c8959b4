"""Field validation result cache.

Keyed by (field, value, context values). Invalidation rule: when a field's
context changes, every cached entry for that field is dropped, so the
cache never holds results computed under a stale toggle or salary.
"""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, Hashable, Optional, Tuple

from .rules import ValidationError

logger = logging.getLogger(__name__)

_MISS = object()


def freeze(value: Any) -> Hashable:
    """Hashable, type-aware key for a raw form value."""
    if isinstance(value, (list, tuple)):
        return ("seq", tuple(freeze(v) for v in value))
    if isinstance(value, dict):
        return ("map", tuple(sorted((str(k), freeze(v)) for k, v in value.items())))
    if isinstance(value, Decimal):
        return ("dec", str(value))
    try:
        hash(value)
    except TypeError:
        return ("repr", repr(value))
    # Keep 1, 1.0, True and "1" apart
    return (type(value).__name__, value)


class ValidationCache:
    """Bounded map of validation results per field."""

    def __init__(self, max_entries: int = 512):
        self.max_entries = max_entries
        self._entries: "OrderedDict[Tuple, Optional[ValidationError]]" = OrderedDict()
        self._contexts: Dict[str, Hashable] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def _sync_context(self, field: str, context: Hashable) -> None:
        previous = self._contexts.get(field, _MISS)
        if previous is _MISS or previous == context:
            self._contexts[field] = context
            return
        self.invalidate(field)
        self._contexts[field] = context

    def get(self, field: str, value: Any, context: Tuple) -> Any:
        """Cached result, or the module-level miss sentinel.

        Use `ValidationCache.is_miss(result)` to tell a miss from a cached None.
        """
        frozen_context = freeze(context)
        self._sync_context(field, frozen_context)
        key = (field, freeze(value), frozen_context)
        if key in self._entries:
            self.hits += 1
            self._entries.move_to_end(key)
            logger.debug(f"validation cache hit: {field}")
            return self._entries[key]
        self.misses += 1
        return _MISS

    def put(self, field: str, value: Any, context: Tuple, result: Optional[ValidationError]) -> None:
        frozen_context = freeze(context)
        self._sync_context(field, frozen_context)
        self._entries[(field, freeze(value), frozen_context)] = result
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, field: Optional[str] = None) -> None:
        """Drop entries for one field, or everything."""
        if field is None:
            self._entries.clear()
            self._contexts.clear()
            return
        for key in [k for k in self._entries if k[0] == field]:
            del self._entries[key]

    @staticmethod
    def is_miss(result: Any) -> bool:
        return result is _MISS
