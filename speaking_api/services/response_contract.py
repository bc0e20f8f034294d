"""Structured-output contract between the pydantic schemas and the LLM.

The same pydantic model is used twice:

* ``strict_json_schema`` turns it into the JSON Schema that OpenAI's strict
  structured-output mode accepts (no ``$ref``, every property required,
  ``additionalProperties: false``).
* ``parse_contract`` validates the decoded model output against it so that
  downstream code receives normalized, type-safe objects.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import ResponseContractError

ModelT = TypeVar("ModelT", bound=BaseModel)

_DROPPED_KEYWORDS = ("title", "default")
_MAX_REPORTED_ERRORS = 5


def inline_json_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """Return the model's JSON Schema (wire aliases) with every ``$ref`` inlined."""

    schema = model.model_json_schema(by_alias=True)
    definitions = schema.pop("$defs", {})
    return _inline_refs(schema, definitions)


def strict_json_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """Derive a self-contained strict-mode JSON Schema from a pydantic model."""

    return _make_strict(inline_json_schema(model))


def parse_contract(model: Type[ModelT], payload: Any) -> ModelT:
    """Validate a decoded JSON payload, raising ``ResponseContractError`` on mismatch."""

    if not isinstance(payload, Mapping):
        raise ResponseContractError(
            f"{model.__name__} response must be a JSON object",
            details=f"received {type(payload).__name__}",
        )
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        raise ResponseContractError(
            f"{model.__name__} response failed validation",
            details=describe_validation_error(exc),
        ) from exc


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten the first few pydantic errors into ``loc: msg`` fragments."""

    fragments = []
    for error in exc.errors()[:_MAX_REPORTED_ERRORS]:
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        fragments.append(f"{location}: {error.get('msg', 'invalid value')}")
    remaining = exc.error_count() - len(fragments)
    if remaining > 0:
        fragments.append(f"(+{remaining} more)")
    return "; ".join(fragments)


def _inline_refs(node: Any, definitions: Mapping[str, Any]) -> Any:
    if isinstance(node, list):
        return [_inline_refs(item, definitions) for item in node]
    if not isinstance(node, dict):
        return node

    # pydantic may wrap a described reference as allOf: [{"$ref": ...}]
    all_of = node.get("allOf")
    if isinstance(all_of, list) and len(all_of) == 1 and "$ref" in all_of[0]:
        node = {**{k: v for k, v in node.items() if k != "allOf"}, **all_of[0]}

    ref = node.get("$ref")
    if isinstance(ref, str):
        name = ref.rsplit("/", 1)[-1]
        if name not in definitions:
            raise KeyError(f"Unresolvable schema reference: {ref}")
        resolved = copy.deepcopy(definitions[name])
        siblings = {k: v for k, v in node.items() if k != "$ref"}
        resolved.update(siblings)
        return _inline_refs(resolved, definitions)

    return {key: _inline_refs(value, definitions) for key, value in node.items()}


def _make_strict(node: Any) -> Any:
    if isinstance(node, list):
        return [_make_strict(item) for item in node]
    if not isinstance(node, dict):
        return node

    strict: Dict[str, Any] = {}
    for key, value in node.items():
        if key in _DROPPED_KEYWORDS:
            continue
        if key == "properties" and isinstance(value, dict):
            # Keys here are field names, not schema keywords.
            strict[key] = {name: _make_strict(sub) for name, sub in value.items()}
        else:
            strict[key] = _make_strict(value)

    if strict.get("type") == "object" or "properties" in strict:
        strict.setdefault("properties", {})
        strict["required"] = list(strict["properties"])
        strict["additionalProperties"] = False
    return strict


__all__ = [
    "describe_validation_error",
    "inline_json_schema",
    "parse_contract",
    "strict_json_schema",
]
