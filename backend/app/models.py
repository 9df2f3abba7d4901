"""
Record types held by the in-memory store, plus the API response shapes.

Record fields use snake_case; these names double as the column names the
query engine sees. API shapes serialize with camelCase keys.
"""

from datetime import datetime
from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# A single cell of a query engine result row
RowValue = Union[int, float, str, bool, None]
Row = dict[str, RowValue]


# ── Ad Sales Metrics ──────────────────────────────────────────────────

class AdSalesMetricsCreate(BaseModel):
    product_name: str
    campaign_name: Optional[str] = None
    ad_spend: Optional[float] = 0
    impressions: Optional[int] = 0
    clicks: Optional[int] = 0
    cpc: Optional[float] = 0
    ctr: Optional[float] = 0
    conversions: Optional[int] = 0
    conversion_rate: Optional[float] = 0
    roas: Optional[float] = 0


class AdSalesMetrics(AdSalesMetricsCreate):
    model_config = ConfigDict(frozen=True)

    id: int


# ── Total Sales Metrics ───────────────────────────────────────────────

class TotalSalesMetricsCreate(BaseModel):
    product_name: str
    category: Optional[str] = None
    total_revenue: Optional[float] = 0
    units_sold: Optional[int] = 0
    avg_order_value: Optional[float] = 0
    profit_margin: Optional[float] = 0
    customer_acquisition_cost: Optional[float] = 0


class TotalSalesMetrics(TotalSalesMetricsCreate):
    model_config = ConfigDict(frozen=True)

    id: int


# ── Eligibility Table ─────────────────────────────────────────────────

class EligibilityEntryCreate(BaseModel):
    product_name: str
    eligible_for_ads: bool = False
    category_restrictions: Optional[str] = None
    min_order_quantity: Optional[int] = None
    max_order_quantity: Optional[int] = None
    geographic_restrictions: Optional[str] = None


class EligibilityEntry(EligibilityEntryCreate):
    model_config = ConfigDict(frozen=True)

    id: int


# ── Query History ─────────────────────────────────────────────────────

class QueryHistoryCreate(BaseModel):
    question: str
    sql: str
    result: str  # JSON-serialized row set


class QueryHistory(QueryHistoryCreate):
    model_config = ConfigDict(frozen=True)

    id: int
    timestamp: datetime


# ── API Shapes ────────────────────────────────────────────────────────

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueryRequest(BaseModel):
    """Body of POST /api/query. Kept loose so the route can answer 400 itself."""
    question: Any = None


class QueryResponse(CamelModel):
    question: str
    sql: str
    result: str
    answer: str
    execution_time: int  # milliseconds
    tables_queried: int
    success: bool
    timestamp: str  # ISO-8601


class ChartSeries(BaseModel):
    labels: list[str] = Field(default_factory=list)
    data: list[float] = Field(default_factory=list)


class ScatterPoint(BaseModel):
    x: float
    y: float


class ScatterChart(BaseModel):
    data: list[ScatterPoint] = Field(default_factory=list)


class AnalyticsData(CamelModel):
    bar_chart: ChartSeries = Field(default_factory=ChartSeries)
    line_chart: ChartSeries = Field(default_factory=ChartSeries)
    pie_chart: ChartSeries = Field(default_factory=ChartSeries)
    scatter_chart: ScatterChart = Field(default_factory=ScatterChart)


class SummaryData(CamelModel):
    total_revenue: float
    top_product: str
    average_roas: float
    growth_rate: float
    key_insights: list[str]


class DataStatus(CamelModel):
    ad_sales: int
    total_sales: int
    eligibility: int
