"""
Fleet-wide endpoints (ranking, batch ranking, pool benchmarks)
"""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from fleetscore.api.deps import get_record_store, missing_identifier, set_cache_headers
from fleetscore.api.v1.operatives import IdentityResponse
from fleetscore.application.fleet_ranking import FleetRankingService, RANKING_POLICIES
from fleetscore.application.pool_benchmarks import PoolBenchmarkService
from fleetscore.config import get_settings
from fleetscore.domain.identity import MissingIdentifierError
from fleetscore.infrastructure.records import RecordStore


router = APIRouter(prefix="/api/v1/fleet", tags=["fleet"])


# === Response models ===

class RankingEntryResponse(BaseModel):
    name: str
    position: int
    fleet_size: int
    percentile: int  # top-X%, lower is better
    tier: str  # gold, silver, bronze, standard
    fleet_score: float
    completions: int
    revenue: float
    punctuality: float


class RankingLookupResponse(BaseModel):
    basis: str
    available: bool
    entry: RankingEntryResponse | None
    identity: IdentityResponse


class RankingBatchResponse(BaseModel):
    basis: str
    fleet_size: int
    entries: dict[str, RankingEntryResponse]


class BenchmarkResponse(BaseModel):
    name: str
    available: bool
    qualifies: bool
    population_size: int
    window_start: str
    window_end: str

    avg_revenue: float
    avg_revenue_per_km: float
    avg_revenue_per_service: float
    avg_services: float

    operative: dict[str, Any] | None
    revenue_rank: int | None
    services_rank: int | None
    revenue_per_km_rank: int | None
    overall_percentile: int | None  # higher is better

    top_performer: dict[str, Any]
    identity: IdentityResponse | None


# === Helper function ===

def _ranking_service(store: RecordStore, basis: str | None) -> FleetRankingService:
    basis = basis or get_settings().RANKING_BASIS
    policy = RANKING_POLICIES.get(basis)
    if policy is None:
        raise HTTPException(status_code=422, detail=f"Unknown ranking basis: {basis}")
    return FleetRankingService(store, policy=policy)


# === Endpoints ===

@router.get("/ranking", response_model=RankingLookupResponse)
def get_ranking(
    response: Response,
    name: str | None = None,
    basis: str | None = None,
    store: RecordStore = Depends(get_record_store),
):
    """Position, percentile and tier of one operative in the 30-day fleet ranking"""
    service = _ranking_service(store, basis)
    try:
        lookup = service.lookup(name)
    except MissingIdentifierError as exc:
        raise missing_identifier(exc)

    set_cache_headers(response)
    return RankingLookupResponse(
        basis=service.policy.basis,
        available=lookup.available,
        entry=lookup.entry.as_dict() if lookup.entry else None,
        identity=lookup.resolution.as_dict(),
    )


@router.get("/ranking/batch", response_model=RankingBatchResponse)
def get_ranking_batch(
    response: Response,
    basis: str | None = None,
    store: RecordStore = Depends(get_record_store),
):
    """Full name -> ranking entry map for table views"""
    service = _ranking_service(store, basis)
    batch = service.get_fleet_ranking_batch()

    set_cache_headers(response)
    return RankingBatchResponse(
        basis=service.policy.basis,
        fleet_size=len(batch),
        entries={key: entry.as_dict() for key, entry in batch.items()},
    )


@router.get("/benchmarks", response_model=BenchmarkResponse)
def get_benchmarks(
    response: Response,
    name: str | None = None,
    store: RecordStore = Depends(get_record_store),
):
    """6-month unit-economics benchmarks against qualifying peers"""
    try:
        snapshot = PoolBenchmarkService(store).get_pool_benchmarks(name)
    except MissingIdentifierError as exc:
        raise missing_identifier(exc)

    set_cache_headers(response)
    return BenchmarkResponse(**snapshot.as_dict())
