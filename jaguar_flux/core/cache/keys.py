from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _normalize(params: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
    if isinstance(params, BaseModel):
        return params.model_dump(mode="json", exclude_none=True)
    return {str(k): v for k, v in params.items() if v is not None}


def create_key(params: Mapping[str, Any] | BaseModel) -> str:
    """Derive a cache key from request parameters.

    Keys are sorted and ``None`` values dropped, so two structurally equal
    parameter sets map to the same key whatever their insertion order.
    """
    return canonical_json(_normalize(params))
