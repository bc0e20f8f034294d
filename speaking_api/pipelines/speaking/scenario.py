"""Scenario generation stage."""

from __future__ import annotations

import logging

from speaking_api.services import openai_client
from speaking_api.services.credentials import resolve_api_key
from speaking_api.services.errors import CoachError
from speaking_api.services.prompt_builder import scenario_prompts
from speaking_api.services.response_contract import parse_contract, strict_json_schema
from speaking_api.views.speaking import Scenario

from .types import check_temperature

logger = logging.getLogger("speaking_api.pipeline")

SCENARIO_SCHEMA = strict_json_schema(Scenario)
DEFAULT_SCENARIO_TEMPERATURE = 0.9


async def generate_scenario(
    api_key: str | None = None,
    temperature: float = DEFAULT_SCENARIO_TEMPERATURE,
) -> Scenario:
    """Ask the model for one new practice scenario and validate it."""

    temperature = check_temperature(temperature)
    resolved_key = resolve_api_key(api_key)
    prompts = scenario_prompts()

    try:
        payload = await openai_client.complete_structured(
            resolved_key,
            prompts.system_prompt,
            prompts.user_prompt,
            SCENARIO_SCHEMA,
            temperature,
            schema_name="scenario",
        )
        scenario = parse_contract(Scenario, payload)
    except CoachError as exc:
        logger.error("Scenario generation failed: %s", exc)
        raise

    logger.info(
        "Scenario generated category=%s difficulty=%s",
        scenario.category,
        scenario.difficulty,
    )
    return scenario


__all__ = ["DEFAULT_SCENARIO_TEMPERATURE", "SCENARIO_SCHEMA", "generate_scenario"]
