"""
Tool registry: the 27 named chart operations offered to tool-calling clients.

Each tool pairs a chart type with a pydantic model describing its arguments.
The models only validate; the caller's original arguments (extra keys
included) are what reach the generator and the result metadata.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.errors import ChartError, RemoteServiceError, ToolArgumentError, ToolNotFoundError
from core.models import (
    MAP_CHART_TYPES,
    ChartRequest,
    ChartType,
    TextContent,
    ToolInfo,
    ToolResult,
    ToolResultMeta,
)
from server.generate import ChartGenerator

logger = logging.getLogger("uvicorn.error")


# ---------------------------------------------------------------------------
# Argument schemas
# ---------------------------------------------------------------------------

class _Open(BaseModel):
    model_config = ConfigDict(extra="allow")


class ChartStyle(_Open):
    backgroundColor: Optional[str] = Field(None, description="Background color, e.g. '#fff'.")
    palette: Optional[Union[List[str], Dict[str, str]]] = Field(None, description="Series colors.")
    texture: Optional[Literal["default", "rough"]] = None
    lineWidth: Optional[float] = None
    startAtZero: Optional[bool] = None


class ChartArgs(_Open):
    title: str = Field("", description="Chart title.")
    width: int = Field(600, description="Image width in pixels.")
    height: int = Field(400, description="Image height in pixels.")
    style: Optional[ChartStyle] = None


class AxisChartArgs(ChartArgs):
    axisXTitle: str = Field("", description="X axis title.")
    axisYTitle: str = Field("", description="Y axis title.")


class TimeValue(_Open):
    time: str
    value: float
    group: Optional[str] = None


class CategoryValue(_Open):
    category: str
    value: float
    group: Optional[str] = None


class NameValue(_Open):
    name: str
    value: float
    group: Optional[str] = None


class PointXY(_Open):
    x: float
    y: float
    group: Optional[str] = None


class WaterfallItem(_Open):
    category: str
    value: Optional[float] = None
    isTotal: bool = False
    isIntermediateTotal: bool = False


class Word(_Open):
    text: str
    value: float


class VennSet(_Open):
    sets: List[str]
    value: float
    label: Optional[str] = None


class SankeyLink(_Open):
    source: str
    target: str
    value: float


class TreemapNode(_Open):
    name: str
    value: float
    children: Optional[List["TreemapNode"]] = None


class TreeNode(_Open):
    name: str
    children: Optional[List["TreeNode"]] = None


class GraphNode(_Open):
    name: str


class GraphEdge(_Open):
    source: str
    target: str
    name: Optional[str] = None


class GraphData(_Open):
    nodes: List[GraphNode]
    edges: List[GraphEdge] = Field(default_factory=list)


class DualAxesSeries(_Open):
    type: Literal["column", "line"]
    data: List[Optional[float]]
    axisYTitle: str = ""


class LineArgs(AxisChartArgs):
    data: List[TimeValue]


class AreaArgs(AxisChartArgs):
    data: List[TimeValue]
    stack: bool = False


class BarArgs(AxisChartArgs):
    data: List[CategoryValue]
    group: bool = False
    stack: bool = True


class ColumnArgs(AxisChartArgs):
    data: List[CategoryValue]
    group: bool = True
    stack: bool = False


class ScatterArgs(AxisChartArgs):
    data: List[PointXY]


class HistogramArgs(AxisChartArgs):
    data: List[float]
    binNumber: Optional[int] = Field(None, ge=1)


class BoxArgs(AxisChartArgs):
    data: List[CategoryValue]


class WaterfallArgs(AxisChartArgs):
    data: List[WaterfallItem]


class PieArgs(ChartArgs):
    data: List[CategoryValue]
    innerRadius: float = Field(0, ge=0, le=1)


class FunnelArgs(ChartArgs):
    data: List[CategoryValue]


class RadarArgs(ChartArgs):
    data: List[NameValue]


class LiquidArgs(ChartArgs):
    percent: float = Field(..., ge=0, le=1)
    shape: Literal["circle", "rect", "pin", "triangle", "diamond"] = "circle"


class WordCloudArgs(ChartArgs):
    data: List[Word]


class VennArgs(ChartArgs):
    data: List[VennSet]


class TreemapArgs(ChartArgs):
    data: List[TreemapNode]


class SankeyArgs(ChartArgs):
    data: List[SankeyLink]
    nodeAlign: Literal["left", "right", "justify", "center"] = "center"


class DualAxesArgs(ChartArgs):
    categories: List[str]
    series: List[DualAxesSeries]
    axisXTitle: str = ""


class GraphArgs(ChartArgs):
    data: GraphData


class TreeArgs(ChartArgs):
    data: TreeNode


class SpreadsheetArgs(ChartArgs):
    data: List[Dict[str, Any]]
    columns: Optional[List[str]] = None


class DistrictMapArgs(_Open):
    title: str
    data: Dict[str, Any]
    width: int = 1600
    height: int = 1000


class PathSegment(_Open):
    data: List[str]


class PathMapArgs(_Open):
    title: str
    data: List[PathSegment]
    width: int = 1600
    height: int = 1000


class PinMapArgs(_Open):
    title: str
    data: List[str]
    markerPopup: Optional[Dict[str, Any]] = None
    width: int = 1600
    height: int = 1000


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Tool:
    name: str
    chart_type: str
    description: str
    args_model: Type[BaseModel]

    def __post_init__(self) -> None:
        ChartType(self.chart_type)

    @property
    def is_map(self) -> bool:
        return self.chart_type in MAP_CHART_TYPES

    def info(self) -> ToolInfo:
        return ToolInfo(
            name=self.name,
            description=self.description,
            inputSchema=self.args_model.model_json_schema(),
        )


TOOLS: List[Tool] = [
    Tool("generate_area_chart", "area",
         "Generate an area chart to show data trends under a continuous independent variable "
         "and the overall data trend, e.g. how a total changes over time.", AreaArgs),
    Tool("generate_bar_chart", "bar",
         "Generate a horizontal bar chart to compare values across categories, "
         "such as the most popular programming languages.", BarArgs),
    Tool("generate_boxplot_chart", "boxplot",
         "Generate a boxplot to show the distribution of values per category: "
         "median, quartiles and outliers.", BoxArgs),
    Tool("generate_column_chart", "column",
         "Generate a column chart to compare values across categories, "
         "such as sales of several products in different cities.", ColumnArgs),
    Tool("generate_district_map", "district-map",
         "Generate a district map of an administrative region in China, "
         "optionally colored by a data value.", DistrictMapArgs),
    Tool("generate_dual_axes_chart", "dual-axes",
         "Generate a dual axes chart combining columns and lines over shared categories, "
         "each series on its own y axis.", DualAxesArgs),
    Tool("generate_fishbone_diagram", "fishbone-diagram",
         "Generate a fishbone diagram to lay out the causes of a problem as a tree.", TreeArgs),
    Tool("generate_flow_diagram", "flow-diagram",
         "Generate a flow diagram showing the steps of a process and how they connect.", GraphArgs),
    Tool("generate_funnel_chart", "funnel",
         "Generate a funnel chart to show how a quantity narrows through stages, "
         "such as a sales conversion pipeline.", FunnelArgs),
    Tool("generate_histogram_chart", "histogram",
         "Generate a histogram to show the frequency distribution of numeric values.", HistogramArgs),
    Tool("generate_line_chart", "line",
         "Generate a line chart to show trends over time, such as yearly revenue.", LineArgs),
    Tool("generate_liquid_chart", "liquid",
         "Generate a liquid chart to show a single percentage as a filled shape.", LiquidArgs),
    Tool("generate_mind_map", "mind-map",
         "Generate a mind map branching out from a central topic.", TreeArgs),
    Tool("generate_network_graph", "network-graph",
         "Generate a network graph of entities and the relationships between them.", GraphArgs),
    Tool("generate_organization_chart", "organization-chart",
         "Generate an organization chart showing reporting lines in a team or company.", TreeArgs),
    Tool("generate_path_map", "path-map",
         "Generate a route map connecting points of interest in China.", PathMapArgs),
    Tool("generate_pie_chart", "pie",
         "Generate a pie chart to show each category's share of a whole; "
         "set innerRadius for a donut.", PieArgs),
    Tool("generate_pin_map", "pin-map",
         "Generate a map with pins marking points of interest in China.", PinMapArgs),
    Tool("generate_radar_chart", "radar",
         "Generate a radar chart to compare several dimensions at once.", RadarArgs),
    Tool("generate_sankey_chart", "sankey",
         "Generate a sankey chart to show flows between nodes, such as energy or budget transfers.",
         SankeyArgs),
    Tool("generate_scatter_chart", "scatter",
         "Generate a scatter chart to show the relationship between two numeric variables.",
         ScatterArgs),
    Tool("generate_spreadsheet", "spreadsheet",
         "Generate a spreadsheet or pivot table from tabular rows.", SpreadsheetArgs),
    Tool("generate_treemap_chart", "treemap",
         "Generate a treemap to show hierarchical data as nested rectangles sized by value.",
         TreemapArgs),
    Tool("generate_venn_chart", "venn",
         "Generate a venn diagram to show overlaps between sets.", VennArgs),
    Tool("generate_violin_chart", "violin",
         "Generate a violin chart to show the density of values per category.", BoxArgs),
    Tool("generate_waterfall_chart", "waterfall",
         "Generate a waterfall chart to show how sequential gains and losses build up to a total.",
         WaterfallArgs),
    Tool("generate_word_cloud_chart", "word-cloud",
         "Generate a word cloud sized by each word's weight.", WordCloudArgs),
]

TOOLS_BY_NAME: Dict[str, Tool] = {t.name: t for t in TOOLS}


def enabled_tools(disabled: Optional[Iterable[str]] = None) -> List[Tool]:
    """Every tool whose name is not listed in *disabled*."""
    excluded = set(disabled or [])
    return [t for t in TOOLS if t.name not in excluded]


def get_tool(name: str) -> Tool:
    tool = TOOLS_BY_NAME.get(name)
    if tool is None:
        raise ToolNotFoundError(name)
    return tool


def validate_arguments(tool: Tool, arguments: Dict[str, Any]) -> BaseModel:
    try:
        return tool.args_model.model_validate(arguments)
    except ValidationError as exc:
        raise ToolArgumentError(f"Invalid arguments for tool {tool.name}: {exc}") from exc


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def error_result(message: str) -> ToolResult:
    return ToolResult(content=[TextContent(text=message)], isError=True)


async def call_tool(generator: ChartGenerator, name: str, arguments: Optional[Dict[str, Any]]) -> ToolResult:
    """
    Run one tool.

    Unknown names and invalid arguments raise; failures while generating the
    chart come back as an ``isError`` result.
    """
    tool = get_tool(name)
    args = dict(arguments or {})
    validate_arguments(tool, args)
    request = ChartRequest(chart_type=tool.chart_type, arguments=args)
    logger.info("calling tool %s", name)

    try:
        if tool.is_map:
            result = await generator.generate_map(tool.name, args)
            if not isinstance(result, dict):
                raise RemoteServiceError("Remote map service returned an unexpected result")
            return ToolResult.model_validate(result)

        if generator.image_server.is_running:
            text = await generator.generate_url(request.chart_type, request.arguments)
        else:
            text = await generator.generate_data_uri(request.chart_type, request.arguments)
    except ChartError as exc:
        logger.warning("Tool %s failed: %s", name, exc)
        return error_result(str(exc))

    return ToolResult(
        content=[TextContent(text=str(text))],
        metadata=ToolResultMeta(spec=args),
    )
