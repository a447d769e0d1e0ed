"""Pydantic models for the site-to-tracker network graph."""

from __future__ import annotations

from typing import Literal

import pydantic

from dataguardian.utils import serialization


class GraphNode(pydantic.BaseModel):
    model_config = serialization.CAMEL_CONFIG

    id: str
    type: Literal["site", "tracker"]
    label: str
    category: str
    company: str | None = None
    score: int | None = None


class GraphLink(pydantic.BaseModel):
    model_config = serialization.CAMEL_CONFIG

    source: str
    target: str
    type: str


class NetworkGraph(pydantic.BaseModel):
    """Star graph: the site at the centre, one node per tracker."""

    model_config = serialization.CAMEL_CONFIG

    nodes: list[GraphNode] = pydantic.Field(default_factory=list)
    links: list[GraphLink] = pydantic.Field(default_factory=list)
    category_counts: dict[str, int] = pydantic.Field(default_factory=dict)
