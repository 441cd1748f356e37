"""
Structural checks for model-produced chart data.

One validator per chart kind. Each one takes the raw parsed JSON, drops
entries that can't be repaired (non-numeric values, negative pie slices) and
raises ShapeValidationFailed when what is left can't form a valid chart.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional, Tuple

from invoice_analytics.ai_feature.errors import ShapeValidationFailed
from invoice_analytics.core.schemas import (
    AnalysisResult,
    ChartKind,
    PieChartData,
    PieChartStatistics,
    WaterfallChartData,
    WaterfallChartStatistics,
)

DEFAULT_INTERPRETATION = "Analysis generated but no interpretation provided."

DEFAULT_COLORS = [
    "#4299E1",  # blue
    "#48BB78",  # green
    "#F56565",  # red
    "#ED8936",  # orange
    "#9F7AEA",  # purple
    "#38B2AC",  # teal
    "#F687B3",  # pink
    "#ECC94B",  # yellow
]

MIN_PIE_POINTS = 1
MIN_WATERFALL_POINTS = 2


def coerce_number(value: Any) -> Optional[float]:
    """Return value as a finite float, or None when it isn't a number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(Decimal(value.strip()))
        except (InvalidOperation, ValueError):
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _as_list(value: Any, field: str) -> List[Any]:
    if not isinstance(value, (list, tuple)):
        raise ShapeValidationFailed(f"'{field}' must be an array")
    return list(value)


def _paired_arrays(data: Dict[str, Any], label_field: str) -> Tuple[List[Any], List[Any]]:
    labels = _as_list(data.get(label_field), label_field)
    values = _as_list(data.get("values"), "values")
    if len(labels) != len(values):
        raise ShapeValidationFailed(
            f"'{label_field}' has {len(labels)} items but 'values' has {len(values)}"
        )
    return labels, values


def _label_text(label: Any, index: int) -> str:
    if label is None or (isinstance(label, str) and not label.strip()):
        return f"Item {index}"
    return str(label)


def _check_point_count(
    count: int, min_points: Optional[int], max_points: Optional[int]
) -> None:
    if min_points is not None and count < min_points:
        raise ShapeValidationFailed(
            f"expected at least {min_points} data points, got {count}"
        )
    if max_points is not None and count > max_points:
        raise ShapeValidationFailed(
            f"expected at most {max_points} data points, got {count}"
        )


def default_colors(count: int) -> List[str]:
    return [DEFAULT_COLORS[i % len(DEFAULT_COLORS)] for i in range(count)]


def validate_pie_data(
    data: Dict[str, Any],
    min_points: Optional[int] = None,
    max_points: Optional[int] = None,
) -> PieChartData:
    labels, values = _paired_arrays(data, "labels")

    kept: List[int] = []
    numbers: List[float] = []
    for index, raw in enumerate(values):
        number = coerce_number(raw)
        if number is not None and number >= 0:
            kept.append(index)
            numbers.append(number)

    if len(kept) < MIN_PIE_POINTS:
        raise ShapeValidationFailed("no valid non-negative numeric values")
    _check_point_count(len(kept), min_points, max_points)

    colors = data.get("colors")
    if (
        isinstance(colors, (list, tuple))
        and len(colors) == len(labels)
        and all(isinstance(color, str) and color for color in colors)
    ):
        kept_colors = [colors[i] for i in kept]
    else:
        kept_colors = default_colors(len(kept))

    return PieChartData(
        labels=[_label_text(labels[i], i) for i in kept],
        values=numbers,
        colors=kept_colors,
    )


def validate_waterfall_data(
    data: Dict[str, Any],
    min_points: Optional[int] = None,
    max_points: Optional[int] = None,
) -> WaterfallChartData:
    categories, values = _paired_arrays(data, "categories")

    kept: List[int] = []
    numbers: List[float] = []
    for index, raw in enumerate(values):
        number = coerce_number(raw)
        if number is not None:
            kept.append(index)
            numbers.append(number)

    if len(kept) < MIN_WATERFALL_POINTS:
        raise ShapeValidationFailed(
            f"need at least {MIN_WATERFALL_POINTS} valid numeric values, got {len(kept)}"
        )
    _check_point_count(len(kept), min_points, max_points)

    names = [_label_text(categories[i], i) for i in kept]

    # A leading zero is the baseline; the last bar is the running result
    if numbers[0] == 0 and "start" not in names[0].lower():
        names[0] = "Start"
    last = names[-1].lower()
    if "end" not in last and "total" not in last:
        names[-1] = "End"

    return WaterfallChartData(
        categories=names,
        values=numbers,
        increaseLabelText=_text_or_default(data.get("increaseLabelText"), "Increase"),
        decreaseLabelText=_text_or_default(data.get("decreaseLabelText"), "Decrease"),
        totalLabelText=_text_or_default(data.get("totalLabelText"), "Total"),
    )


def _text_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def _pie_result(interpretation: str, data: PieChartData) -> AnalysisResult:
    return AnalysisResult(
        interpretation=interpretation, statistics=PieChartStatistics(data=data)
    )


def _waterfall_result(interpretation: str, data: WaterfallChartData) -> AnalysisResult:
    return AnalysisResult(
        interpretation=interpretation, statistics=WaterfallChartStatistics(data=data)
    )


VALIDATORS: Dict[
    ChartKind, Callable[[Dict[str, Any], Optional[int], Optional[int]], Any]
] = {
    ChartKind.PIE: validate_pie_data,
    ChartKind.WATERFALL: validate_waterfall_data,
}

_BUILDERS = {
    ChartKind.PIE: _pie_result,
    ChartKind.WATERFALL: _waterfall_result,
}


def validate_response(
    payload: Any,
    chart_kind: ChartKind,
    min_points: Optional[int] = None,
    max_points: Optional[int] = None,
) -> AnalysisResult:
    """
    Check a parsed model answer and turn it into an AnalysisResult.

    Raises:
        ShapeValidationFailed: the answer can't be repaired into a valid chart of chart_kind.
    """
    if not isinstance(payload, dict):
        raise ShapeValidationFailed("response is not a JSON object")

    interpretation = payload.get("interpretation")
    if not isinstance(interpretation, str) or not interpretation.strip():
        interpretation = DEFAULT_INTERPRETATION

    statistics = payload.get("statistics")
    if not isinstance(statistics, dict) or not statistics.get("type"):
        raise ShapeValidationFailed("missing statistics or chart type")
    if statistics["type"] != chart_kind.value:
        raise ShapeValidationFailed(
            f"expected chart type {chart_kind.value}, got {statistics['type']!r}"
        )

    data = statistics.get("data")
    if not isinstance(data, dict):
        raise ShapeValidationFailed("missing chart data")

    shape = VALIDATORS[chart_kind](data, min_points, max_points)
    return _BUILDERS[chart_kind](interpretation, shape)
