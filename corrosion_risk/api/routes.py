"""
API Routes — Endpoint Definitions

Thin layer over the rating engine. Evaluation never fails because of a
bad formula or datapoint; a norm without outputs answers 200 with
status "not_configured" so the client can show a corrective notice.
"""

import logging
from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from corrosion_risk.config import settings
from corrosion_risk.rules import (
    check_parameter_consistency,
    evaluate_datapoints,
    match_rating,
    validate_raw_value,
)
from corrosion_risk.schemas import BatchEvaluation, Norm
from corrosion_risk.standards import calculate_zinc_loss_rate, format_zinc_loss_rate
from corrosion_risk.storage import NormNotFoundError, NormRegistry, build_registry

from .schemas import (
    EvaluateRequest,
    HealthResponse,
    InlineEvaluateRequest,
    MatchRatingRequest,
    MatchRatingResponse,
    NormSummary,
    ValidateValueRequest,
    ValidateValueResponse,
    ZincLossRequest,
    ZincLossResponse,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_registry() -> NormRegistry:
    """Dependency providing the process-wide norm registry."""
    return build_registry(settings.NORMS_FILE)


def _summary(norm: Norm) -> NormSummary:
    return NormSummary(
        id=norm.id,
        name=norm.name,
        description=norm.description,
        version=norm.version,
        parameter_codes=norm.parameter_codes,
        outputs=[o.name for o in norm.output_config],
        is_configured=norm.is_configured,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    tags=["Health"],
)
async def health_check(registry: NormRegistry = Depends(get_registry)) -> HealthResponse:
    count = len(registry)
    if count == 0:
        return HealthResponse(status="degraded", norms=0, message="No norms registered")
    return HealthResponse(status="healthy", norms=count, message="All systems operational")


@router.get(
    "/norms",
    response_model=List[NormSummary],
    summary="List registered norms",
    tags=["Norms"],
)
async def list_norms(registry: NormRegistry = Depends(get_registry)) -> List[NormSummary]:
    return [_summary(norm) for norm in registry.list()]


@router.get(
    "/norms/{norm_id}",
    response_model=Norm,
    responses={404: {"description": "Unknown norm"}},
    summary="Get a norm with its rating ranges and outputs",
    tags=["Norms"],
)
async def get_norm(norm_id: str, registry: NormRegistry = Depends(get_registry)) -> Norm:
    try:
        return registry.get(norm_id)
    except NormNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Norm '{norm_id}' not found",
        )


@router.post(
    "/norms/{norm_id}/evaluate",
    response_model=BatchEvaluation,
    responses={404: {"description": "Unknown norm"}, 422: {"description": "Invalid payload"}},
    summary="Evaluate datapoints against a registered norm",
    tags=["Evaluation"],
)
async def evaluate_with_norm(
    norm_id: str,
    request: EvaluateRequest,
    registry: NormRegistry = Depends(get_registry),
) -> BatchEvaluation:
    try:
        norm = registry.get(norm_id)
    except NormNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Norm '{norm_id}' not found",
        )

    logger.info(f"Evaluating {len(request.datapoints)} datapoint(s) against '{norm_id}'")
    return evaluate_datapoints(
        request.datapoints,
        norm,
        parameters=registry.parameters(),
        expected_codes=request.expected_codes,
        primary_output=settings.PRIMARY_OUTPUT,
    )


@router.post(
    "/evaluate",
    response_model=BatchEvaluation,
    responses={422: {"description": "Invalid payload"}},
    summary="Evaluate datapoints against an inline norm",
    tags=["Evaluation"],
)
async def evaluate_inline(request: InlineEvaluateRequest) -> BatchEvaluation:
    return evaluate_datapoints(
        request.datapoints,
        request.norm,
        parameters=request.parameters,
        expected_codes=request.expected_codes,
        primary_output=settings.PRIMARY_OUTPUT,
    )


@router.post(
    "/ratings/match",
    response_model=MatchRatingResponse,
    summary="Rate one raw value against one rule",
    tags=["Evaluation"],
)
async def match_single_rating(request: MatchRatingRequest) -> MatchRatingResponse:
    rating = match_rating(request.range_type, request.rating_ranges, request.value)
    return MatchRatingResponse(rating=rating)


@router.post(
    "/parameters/validate",
    response_model=ValidateValueResponse,
    summary="Validate a form value for a parameter",
    tags=["Parameters"],
)
async def validate_parameter_value(request: ValidateValueRequest) -> ValidateValueResponse:
    result = validate_raw_value(request.parameter, request.value, request.rating_ranges)
    return ValidateValueResponse(
        valid=result.valid,
        message=result.message,
        consistency_issue=check_parameter_consistency(request.parameter),
    )


@router.post(
    "/calculations/zinc-loss",
    response_model=ZincLossResponse,
    summary="AS/NZS 2041.1 zinc and steel loss rates",
    tags=["Calculations"],
)
async def zinc_loss(request: ZincLossRequest) -> ZincLossResponse:
    assessment = calculate_zinc_loss_rate(request.values, request.inputs)
    return ZincLossResponse(
        assessment=assessment,
        formatted_loss_rate=format_zinc_loss_rate(assessment),
    )
