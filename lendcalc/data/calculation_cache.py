"""In-process cache of computed loan state, keyed by loan and terms fingerprint.

Concurrent callers asking for the same (loan_id, fingerprint) share one
computation. A request with a new fingerprint for a loan drops whatever was
cached for it, so a schedule built from outdated terms is never served.
"""

import asyncio
import dataclasses
import hashlib
import itertools
import json
import logging
from collections import OrderedDict
from enum import Enum
from typing import Callable, Hashable, Protocol, runtime_checkable

from lendcalc.config import settings
from lendcalc.engine.loan_state import compute_loan_state
from lendcalc.engine.validators import validate_loan_terms
from lendcalc.models.cache import CacheStats
from lendcalc.models.loan import LoanTerms
from lendcalc.models.schedule import LoanState

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str]


def _canonical(value) -> object:
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value):
        return {f.name: _canonical(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if value is None:
        return None
    return str(value)


def loan_fingerprint(terms: LoanTerms) -> str:
    """Deterministic digest of every LoanTerms field."""
    raw = json.dumps(_canonical(terms), sort_keys=True)
    return hashlib.sha256(raw.encode()).hexdigest()[:16]


@runtime_checkable
class EvictionPolicy(Protocol):
    def record_insert(self, key: Hashable) -> None:
        """A new entry was stored."""
        ...

    def record_access(self, key: Hashable) -> None:
        """An entry was served from the cache."""
        ...

    def record_removal(self, key: Hashable) -> None:
        """An entry was removed for any reason other than eviction."""
        ...

    def select_victim(self) -> Hashable | None:
        """Pick and forget the entry to evict, or None when nothing is tracked."""
        ...


class LRUEvictionPolicy:
    """Evicts the least recently stored or served entry."""

    def __init__(self) -> None:
        self._order: OrderedDict[Hashable, None] = OrderedDict()

    def record_insert(self, key: Hashable) -> None:
        self._order[key] = None
        self._order.move_to_end(key)

    def record_access(self, key: Hashable) -> None:
        if key in self._order:
            self._order.move_to_end(key)

    def record_removal(self, key: Hashable) -> None:
        self._order.pop(key, None)

    def select_victim(self) -> Hashable | None:
        if not self._order:
            return None
        key, _ = self._order.popitem(last=False)
        return key


@dataclasses.dataclass(frozen=True)
class CacheEntry:
    loan_id: str
    fingerprint: str
    value: LoanState
    version: int  # Increases with every store, across all loans


class CalculationCache:
    """Memoizes compute_loan_state per loan with request coalescing.

    Usage:
        cache = CalculationCache()
        state = await cache.get_or_calculate("loan-42", terms)
    """

    def __init__(
        self,
        capacity: int | None = None,
        policy: EvictionPolicy | None = None,
        compute: Callable[[LoanTerms], LoanState] = compute_loan_state,
    ):
        self.capacity = capacity if capacity is not None else settings.cache_capacity
        if self.capacity <= 0:
            raise ValueError("capacity must be greater than zero")
        self._policy = policy if policy is not None else LRUEvictionPolicy()
        self._compute = compute

        self._entries: dict[CacheKey, CacheEntry] = {}
        self._current: dict[str, str] = {}  # loan_id -> most recently requested fingerprint
        self._in_flight: dict[CacheKey, asyncio.Task] = {}
        self._versions = itertools.count(1)

        self._hits = 0
        self._misses = 0
        self._computations = 0
        self._coalesced = 0
        self._evictions = 0
        self._invalidations = 0

    async def get_or_calculate(self, loan_id: str, terms: LoanTerms) -> LoanState:
        """Cached state for these terms, computing it at most once per key at a time.

        Invalid terms raise before anything is cached. A failed computation is
        raised to every caller waiting on it and leaves nothing behind.
        """
        terms = validate_loan_terms(terms)
        fingerprint = loan_fingerprint(terms)
        key = (loan_id, fingerprint)

        previous = self._current.get(loan_id)
        if previous != fingerprint:
            if previous is not None and self._drop_loan(loan_id):
                self._invalidations += 1
                logger.info("Terms changed for loan %s (%s -> %s), dropped cached state", loan_id, previous, fingerprint)
            self._current[loan_id] = fingerprint

        entry = self._entries.get(key)
        if entry is not None:
            self._hits += 1
            self._policy.record_access(key)
            logger.debug("Cache hit: %s:%s", loan_id, fingerprint)
            return entry.value

        self._misses += 1
        task = self._in_flight.get(key)
        if task is not None:
            self._coalesced += 1
            logger.debug("Awaiting in-flight computation for %s:%s", loan_id, fingerprint)
        else:
            self._computations += 1
            task = asyncio.ensure_future(self._calculate(key, terms))
            self._in_flight[key] = task

        # Shielded so one cancelled caller does not cancel the shared computation
        return await asyncio.shield(task)

    async def _calculate(self, key: CacheKey, terms: LoanTerms) -> LoanState:
        loan_id, fingerprint = key
        try:
            value = await asyncio.to_thread(self._compute, terms)
        except BaseException:
            self._in_flight.pop(key, None)
            self._forget_if_idle(loan_id)
            raise
        self._in_flight.pop(key, None)

        if self._current.get(loan_id) == fingerprint:
            self._store(key, value)
        else:
            logger.debug("Discarding superseded result for %s:%s", loan_id, fingerprint)
        return value

    def _store(self, key: CacheKey, value: LoanState) -> None:
        loan_id, fingerprint = key
        while len(self._entries) >= self.capacity:
            victim = self._policy.select_victim()
            if victim is None:
                break
            if self._entries.pop(victim, None) is not None:
                self._evictions += 1
                logger.info("Evicted cached state for %s:%s", *victim)
                if victim[0] != loan_id:
                    self._forget_if_idle(victim[0])

        self._entries[key] = CacheEntry(
            loan_id=loan_id,
            fingerprint=fingerprint,
            value=value,
            version=next(self._versions),
        )
        self._policy.record_insert(key)

    def _forget_if_idle(self, loan_id: str) -> None:
        """Stop tracking a loan that has no stored entry and nothing in flight."""
        if any(k[0] == loan_id for k in self._entries):
            return
        if any(k[0] == loan_id for k in self._in_flight):
            return
        self._current.pop(loan_id, None)

    def _drop_loan(self, loan_id: str) -> bool:
        keys = [k for k in self._entries if k[0] == loan_id]
        for key in keys:
            del self._entries[key]
            self._policy.record_removal(key)
        return bool(keys)

    def peek(self, loan_id: str) -> CacheEntry | None:
        """Current entry for a loan without computing or counting a hit."""
        fingerprint = self._current.get(loan_id)
        if fingerprint is None:
            return None
        return self._entries.get((loan_id, fingerprint))

    def invalidate(self, loan_id: str) -> bool:
        """Forget a loan. An in-flight computation for it will not be stored."""
        self._current.pop(loan_id, None)
        dropped = self._drop_loan(loan_id)
        if dropped:
            self._invalidations += 1
            logger.info("Invalidated cached state for loan %s", loan_id)
        return dropped

    def clear(self) -> None:
        for key in list(self._entries):
            self._policy.record_removal(key)
        self._entries.clear()
        self._current.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> CacheStats:
        lookups = self._hits + self._misses
        return CacheStats(
            entries=len(self._entries),
            capacity=self.capacity,
            hits=self._hits,
            misses=self._misses,
            computations=self._computations,
            coalesced=self._coalesced,
            evictions=self._evictions,
            invalidations=self._invalidations,
            tracked_loans=len(self._current),
            hit_rate=self._hits / lookups if lookups else 0.0,
        )
