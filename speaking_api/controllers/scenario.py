"""Scenario generation endpoint."""

import logging

from fastapi import APIRouter

from speaking_api.controllers.dependencies import ApiKeyDep, handler_failure
from speaking_api.pipelines.speaking import generate_scenario
from speaking_api.services.errors import CoachError
from speaking_api.views import ErrorResponse, Scenario

router = APIRouter(prefix="/api", tags=["scenario"])

logger = logging.getLogger(__name__)


@router.get(
    "/scenario",
    response_model=Scenario,
    responses={500: {"model": ErrorResponse}},
)
async def get_scenario(api_key: ApiKeyDep = None) -> Scenario:
    """Generate a fresh practice scenario."""

    try:
        return await generate_scenario(api_key=api_key)
    except CoachError as exc:
        logger.exception("Error generating scenario")
        raise handler_failure("Failed to generate scenario", exc) from exc
