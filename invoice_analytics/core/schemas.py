from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =========================
# Enums
# =========================
class ChartKind(str, Enum):
    PIE = "pie_chart"
    WATERFALL = "waterfall_chart"


class ChatRole(str, Enum):
    USER = "user"
    SYSTEM = "system"


# =========================
# CHART SHAPES
# =========================
class PieChartData(BaseModel):
    labels: List[str]
    values: List[float]
    colors: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_shape(self):
        if len(self.labels) != len(self.values):
            raise ValueError("labels and values must have the same length")
        if self.colors is not None and len(self.colors) != len(self.labels):
            raise ValueError("colors must have one entry per label")
        if any(value < 0 for value in self.values):
            raise ValueError("pie chart values must be non-negative")
        return self


class WaterfallChartData(BaseModel):
    categories: List[str]
    values: List[float]
    increaseLabelText: Optional[str] = None
    decreaseLabelText: Optional[str] = None
    totalLabelText: Optional[str] = None

    @model_validator(mode="after")
    def check_shape(self):
        if len(self.categories) != len(self.values):
            raise ValueError("categories and values must have the same length")
        if len(self.values) < 2:
            raise ValueError("waterfall chart needs at least 2 data points")
        return self


class PieChartStatistics(BaseModel):
    type: Literal["pie_chart"] = "pie_chart"
    data: PieChartData


class WaterfallChartStatistics(BaseModel):
    type: Literal["waterfall_chart"] = "waterfall_chart"
    data: WaterfallChartData


Statistics = Annotated[
    Union[PieChartStatistics, WaterfallChartStatistics], Field(discriminator="type")
]


class AnalysisResult(BaseModel):
    """The only artifact the analytics pipeline hands back to its callers."""

    interpretation: str
    statistics: Statistics


# =========================
# ANALYZE / CHAT REQUESTS
# =========================
class AnalyzeRequest(BaseModel):
    question: str


class AnalyzeResponse(BaseModel):
    success: bool = True
    result: AnalysisResult


class ChatMessageResponse(AnalyzeResponse):
    sessionId: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


# =========================
# CHAT SESSIONS
# =========================
class ChatHistoryEntry(BaseModel):
    role: ChatRole
    content: str
    timestamp: datetime
    statistics: Optional[Statistics] = None


class ChatSession(BaseModel):
    id: str
    history: List[ChatHistoryEntry] = []
    createdAt: datetime
    updatedAt: datetime


class SessionCreated(BaseModel):
    id: str
    createdAt: datetime


class SessionCreatedResponse(BaseModel):
    success: bool = True
    session: SessionCreated


class SessionResponse(BaseModel):
    success: bool = True
    session: ChatSession


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# =========================
# INVOICE TOTALS
# =========================
# Allowed drift between the stated total and subtotal - discount + tax + shipping
TOTAL_TOLERANCE = Decimal("0.01")


def totals_match(
    subtotal: Decimal,
    discount: Decimal,
    tax: Decimal,
    shipping: Decimal,
    total: Decimal,
) -> bool:
    expected = subtotal - discount + tax + shipping
    return abs(expected - total) <= TOTAL_TOLERANCE


class InvoiceTotals(BaseModel):
    """
    Money block of a new invoice.

    Writes that break the total formula are rejected here, before they reach the database.
    """

    subtotal: Decimal
    discount: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    shipping: Decimal = Decimal("0")
    total: Decimal

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def check_total(self):
        if not totals_match(
            self.subtotal, self.discount, self.tax, self.shipping, self.total
        ):
            raise ValueError(
                f"Total {self.total} does not match subtotal - discount + tax + shipping"
            )
        return self
