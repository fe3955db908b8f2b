"""
Per-operative score endpoints (performance metrics, rating)
"""
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from fleetscore.api.deps import get_record_store, missing_identifier, set_cache_headers
from fleetscore.application.operative_rating import OperativeRatingService
from fleetscore.application.performance_metrics import PerformanceMetricsService
from fleetscore.domain.identity import MissingIdentifierError
from fleetscore.infrastructure.records import RecordStore


router = APIRouter(prefix="/api/v1/operatives", tags=["operatives"])


# === Response models ===

class IdentityResponse(BaseModel):
    query: str
    key: str | None
    confidence: str  # exact, partial, ambiguous, none
    alternatives: list[str]


class AlertResponse(BaseModel):
    code: str
    message: str


class PerformanceResponse(BaseModel):
    operative_id: str
    name: str
    phone: str | None

    punctuality: int
    reliability: int
    checklist: int
    documentation: int
    volume: int
    performance: int

    on_time: int
    minor_delay: int
    major_delay: int
    punctuality_classified: int

    total_assignments: int
    confirmed_assignments: int
    assignment_rate: int
    cancellations: int
    rejections: int

    total_executions: int
    completed_executions: int
    checklists_filed: int
    distance_total: float
    revenue_total: float

    documents_uploaded: int
    documents_verified: int
    documents_current: int

    identity: IdentityResponse
    merged_names: list[str]
    alerts: list[AlertResponse]
    failed_sources: list[str]


class DimensionResponse(BaseModel):
    key: str
    label: str
    weight: float
    available: bool
    score: int | None
    stars: int | None
    reason: str | None


class RatingResponse(BaseModel):
    operative_id: str
    name: str
    status: str  # ok, unavailable
    error: str | None

    general_score: int | None
    rating: float | None
    stars: int | None
    label: str | None
    dimensions: list[DimensionResponse]
    performance_breakdown: dict[str, int]

    revenue_90d: float
    revenue_p50: float
    revenue_p90: float
    fleet_revenue_available: bool
    local_services: int
    out_of_town_services: int

    identity: IdentityResponse | None
    failed_sources: list[str]


# === Endpoints ===

@router.get("/{operative_id}/performance", response_model=PerformanceResponse)
def get_performance(
    operative_id: str,
    response: Response,
    name: str | None = None,
    phone: str | None = None,
    lookback_days: int | None = None,
    store: RecordStore = Depends(get_record_store),
):
    """Sub-scores and composite performance for one operative"""
    try:
        snapshot = PerformanceMetricsService(store).get_performance_metrics(
            operative_id, name, phone, lookback_days=lookback_days,
        )
    except MissingIdentifierError as exc:
        raise missing_identifier(exc)

    set_cache_headers(response)
    return PerformanceResponse(**snapshot.as_dict())


@router.get("/{operative_id}/rating", response_model=RatingResponse)
def get_rating(
    operative_id: str,
    response: Response,
    name: str | None = None,
    phone: str | None = None,
    store: RecordStore = Depends(get_record_store),
):
    """General score, star rating and dimensions for one operative"""
    try:
        snapshot = OperativeRatingService(store).get_operative_rating(operative_id, name, phone)
    except MissingIdentifierError as exc:
        raise missing_identifier(exc)

    set_cache_headers(response)
    return RatingResponse(**snapshot.as_dict())
