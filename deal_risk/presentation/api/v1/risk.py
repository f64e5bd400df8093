"""Risk API endpoints."""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Path, Query

from deal_risk.application.dto import RiskConfigInput
from deal_risk.application.services import RiskConfigService, RiskService
from deal_risk.core.dependencies import get_risk_config_service, get_risk_service
from deal_risk.presentation.schemas import (
    ErrorResponseSchema,
    PresetSchema,
    RecalculateAllRequestSchema,
    RecalculateRequestSchema,
    RecalculationResponseSchema,
    RiskConfigResponseSchema,
    RiskDistributionSchema,
    RiskEventSchema,
    RiskEventsResponseSchema,
    RiskScoreSchema,
    SaveConfigRequestSchema,
    SaveConfigResponseSchema,
    ScoresQueryRequestSchema,
    ScoresQueryResponseSchema,
)

risk_router = APIRouter(
    prefix="/risk",
    responses={
        422: {"model": ErrorResponseSchema, "description": "Invalid request"},
        503: {"model": ErrorResponseSchema, "description": "Deal data unavailable"},
    },
)

TeamId = Annotated[str, Query(min_length=1, max_length=255, description="Owning team")]
DealId = Annotated[str, Path(min_length=1, max_length=255, description="Deal identifier")]


@risk_router.get(
    "/config",
    response_model=RiskConfigResponseSchema,
    summary="Get Risk Config",
    description="Returns the team's active risk configuration, creating the default on first access.",
)
async def get_config(
    team_id: TeamId,
    config_service: Annotated[RiskConfigService, Depends(get_risk_config_service)],
) -> RiskConfigResponseSchema:
    config = await config_service.get_config(team_id)
    return RiskConfigResponseSchema.model_validate(config.to_dict())


@risk_router.put(
    "/config",
    response_model=SaveConfigResponseSchema,
    summary="Save Risk Config",
    description="""
    Save a new config version for the team.

    Every deal of the team is recomputed against the saved version before
    the response is returned; deals that failed are listed in `failed`.
    """,
    responses={
        409: {"model": ErrorResponseSchema, "description": "Concurrent save won the version"},
    },
)
async def save_config(
    request: SaveConfigRequestSchema,
    config_service: Annotated[RiskConfigService, Depends(get_risk_config_service)],
) -> SaveConfigResponseSchema:
    config_input = RiskConfigInput(
        preset=request.preset,
        weights=request.weights,
        decay_half_life_days=request.decay_half_life_days,
        baseline_score=request.baseline_score,
        band_thresholds=request.band_thresholds,
    )
    result = await config_service.save_config(request.team_id, config_input)
    return SaveConfigResponseSchema.model_validate(result.to_dict())


@risk_router.get(
    "/presets",
    response_model=List[PresetSchema],
    summary="List Presets",
)
async def list_presets(
    config_service: Annotated[RiskConfigService, Depends(get_risk_config_service)],
) -> List[PresetSchema]:
    return [PresetSchema.model_validate(p) for p in config_service.list_presets()]


@risk_router.get(
    "/scores/{deal_id}",
    response_model=Optional[RiskScoreSchema],
    summary="Get Deal Score",
    description="Returns the deal's current score, or null if it has never been scored.",
)
async def get_score(
    deal_id: DealId,
    team_id: TeamId,
    risk_service: Annotated[RiskService, Depends(get_risk_service)],
) -> Optional[RiskScoreSchema]:
    score = await risk_service.get_score(deal_id, team_id)
    if score is None:
        return None
    return RiskScoreSchema.model_validate(score.to_dict())


@risk_router.post(
    "/scores/query",
    response_model=ScoresQueryResponseSchema,
    summary="Get Deal Scores",
    description="Returns current scores for several deals; unscored deals are omitted.",
)
async def get_scores(
    request: ScoresQueryRequestSchema,
    risk_service: Annotated[RiskService, Depends(get_risk_service)],
) -> ScoresQueryResponseSchema:
    scores = await risk_service.get_scores(request.team_id, request.deal_ids)
    return ScoresQueryResponseSchema(
        scores=[RiskScoreSchema.model_validate(s.to_dict()) for s in scores],
    )


@risk_router.get(
    "/distribution",
    response_model=RiskDistributionSchema,
    summary="Get Band Distribution",
)
async def get_distribution(
    team_id: TeamId,
    risk_service: Annotated[RiskService, Depends(get_risk_service)],
) -> RiskDistributionSchema:
    distribution = await risk_service.get_distribution(team_id)
    return RiskDistributionSchema.model_validate(distribution.to_dict())


@risk_router.get(
    "/scores/{deal_id}/events",
    response_model=RiskEventsResponseSchema,
    summary="Get Deal Risk Events",
    description="Returns the deal's audit events, newest first. Limits above the maximum are clamped.",
)
async def get_events(
    deal_id: DealId,
    team_id: TeamId,
    risk_service: Annotated[RiskService, Depends(get_risk_service)],
    limit: Annotated[
        Optional[int],
        Query(ge=1, description="Maximum number of events to return"),
    ] = None,
) -> RiskEventsResponseSchema:
    events = await risk_service.get_events(deal_id, team_id, limit=limit)
    return RiskEventsResponseSchema(
        deal_id=deal_id,
        events=[RiskEventSchema.model_validate(e.to_dict()) for e in events],
    )


@risk_router.post(
    "/scores/{deal_id}/recalculate",
    response_model=RiskScoreSchema,
    summary="Recalculate Deal Score",
    responses={
        404: {"model": ErrorResponseSchema, "description": "Deal not found"},
    },
)
async def recalculate(
    deal_id: DealId,
    request: RecalculateRequestSchema,
    risk_service: Annotated[RiskService, Depends(get_risk_service)],
) -> RiskScoreSchema:
    score = await risk_service.calculate_risk_score(
        deal_id,
        request.team_id,
        trigger=request.trigger,
    )
    return RiskScoreSchema.model_validate(score.to_dict())


@risk_router.post(
    "/recalculate",
    response_model=RecalculationResponseSchema,
    summary="Recalculate All Deals",
    description="Recomputes every deal of the team; per-deal failures are reported, not raised.",
)
async def recalculate_all(
    request: RecalculateAllRequestSchema,
    risk_service: Annotated[RiskService, Depends(get_risk_service)],
) -> RecalculationResponseSchema:
    result = await risk_service.recalculate_all(request.team_id, trigger=request.trigger)
    return RecalculationResponseSchema.model_validate(result.to_dict())
