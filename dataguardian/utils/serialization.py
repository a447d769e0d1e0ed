"""Shared serialization helpers for the camelCase wire format.

Models use snake_case attributes and a camelCase alias generator;
the HTTP layer and the JSON site store both emit the aliases.
"""

from __future__ import annotations

from typing import Any

import pydantic


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as
            ``"who_they_share_with"``.

    Returns:
        The camelCase equivalent, e.g. ``"whoTheyShareWith"``.
    """
    parts = name.split("_")
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


CAMEL_CONFIG = pydantic.ConfigDict(alias_generator=snake_to_camel, populate_by_name=True)


def to_wire(model: pydantic.BaseModel) -> dict[str, Any]:
    """Dump *model* as a JSON-compatible dict keyed by camelCase aliases."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
