"""Pydantic models for the calculation cache."""

from pydantic import BaseModel


class CacheStats(BaseModel):
    entries: int
    capacity: int
    hits: int
    misses: int
    computations: int
    coalesced: int  # Callers that awaited another caller's in-flight computation
    evictions: int
    invalidations: int
    tracked_loans: int  # Loans whose latest fingerprint is remembered
    hit_rate: float  # 0.0 to 1.0
