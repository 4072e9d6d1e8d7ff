"""
Core Pydantic models for the chart service.

All domain types live here so every module shares the same vocabulary.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Chart kinds
# ---------------------------------------------------------------------------

class ChartType(str, Enum):
    area = "area"
    bar = "bar"
    boxplot = "boxplot"
    column = "column"
    district_map = "district-map"
    dual_axes = "dual-axes"
    fishbone_diagram = "fishbone-diagram"
    flow_diagram = "flow-diagram"
    funnel = "funnel"
    histogram = "histogram"
    line = "line"
    liquid = "liquid"
    mind_map = "mind-map"
    network_graph = "network-graph"
    organization_chart = "organization-chart"
    path_map = "path-map"
    pie = "pie"
    pin_map = "pin-map"
    radar = "radar"
    sankey = "sankey"
    scatter = "scatter"
    spreadsheet = "spreadsheet"
    treemap = "treemap"
    venn = "venn"
    violin = "violin"
    waterfall = "waterfall"
    word_cloud = "word-cloud"


# Geographic maps depend on an external mapping service.
MAP_CHART_TYPES = frozenset({"district-map", "path-map", "pin-map"})


def is_local_rendering_supported(chart_type: str) -> bool:
    return chart_type not in MAP_CHART_TYPES


# ---------------------------------------------------------------------------
# Requests & artifacts
# ---------------------------------------------------------------------------

class ChartRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    chart_type: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class RenderedArtifact(BaseModel):
    path: str
    filename: str


class ImageServerState(BaseModel):
    started: bool = False
    host: str = "localhost"
    port: int = 18900


# ---------------------------------------------------------------------------
# Remote service envelope
# ---------------------------------------------------------------------------

class RemoteEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = False
    errorMessage: Optional[str] = None
    resultObj: Any = None


# ---------------------------------------------------------------------------
# Tool results
# ---------------------------------------------------------------------------

SPEC_DESCRIPTION = (
    "This is the chart's spec and configuration, which can be renderred to "
    "corresponding chart by AntV GPT-Vis chart components."
)


class TextContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "text"
    text: str = ""


class ToolResultMeta(BaseModel):
    description: str = SPEC_DESCRIPTION
    spec: Dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: List[TextContent] = Field(default_factory=list)
    # ToolResultMeta for charts; remote map results carry their own shape
    metadata: Optional[Any] = None
    isError: bool = False


class ToolInfo(BaseModel):
    name: str
    description: str
    inputSchema: Dict[str, Any]
