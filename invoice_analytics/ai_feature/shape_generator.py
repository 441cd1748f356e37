import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence

from invoice_analytics.ai_feature.errors import ShapeValidationFailed
from invoice_analytics.ai_feature.llm import LanguageModel, strip_code_fences
from invoice_analytics.ai_feature.prompts import (
    PROMPT_STRATEGIES,
    PromptStrategy,
    response_schema_for,
)
from invoice_analytics.ai_feature.schema_contract import SYSTEM_PROMPT
from invoice_analytics.ai_feature.validation import validate_response
from invoice_analytics.core.schemas import (
    AnalysisResult,
    ChartKind,
    PieChartData,
    PieChartStatistics,
    WaterfallChartData,
    WaterfallChartStatistics,
)

logger = logging.getLogger(__name__)

# Fixed retry budget, one attempt per prompt strategy
MAX_ATTEMPTS = 3

FALLBACK_INTERPRETATION = (
    "Unable to generate a detailed analysis, but here's a simple overview of the data."
)


class ShapeState(Enum):
    """Where the chart generation loop ended up."""

    SUCCESS = "success"
    EXHAUSTED = "exhausted"


@dataclass
class AttemptRecord:
    attempt: int
    strategy: str
    error: Optional[str] = None


@dataclass
class ShapeOutcome:
    result: AnalysisResult
    state: ShapeState
    attempts: List[AttemptRecord]


def fallback_result(chart_kind: ChartKind, row_count: int) -> AnalysisResult:
    """Deterministic chart built only from the row count; always structurally valid."""
    if chart_kind == ChartKind.WATERFALL:
        statistics = WaterfallChartStatistics(
            data=WaterfallChartData(
                categories=["Start", "Change", "End"],
                values=[0, row_count, row_count],
            )
        )
    else:
        statistics = PieChartStatistics(
            data=PieChartData(labels=["Data Points"], values=[row_count])
        )
    return AnalysisResult(interpretation=FALLBACK_INTERPRETATION, statistics=statistics)


def parse_model_json(text: str) -> Any:
    try:
        return json.loads(strip_code_fences(text))
    except (TypeError, ValueError) as error:
        raise ShapeValidationFailed(f"response is not valid JSON: {error}") from error


async def generate_chart(
    question: str,
    chart_kind: ChartKind,
    serialized_rows: str,
    row_count: int,
    llm: LanguageModel,
    strategies: Sequence[PromptStrategy] = PROMPT_STRATEGIES,
) -> ShapeOutcome:
    """
    Ask the model for chart data, validating and retrying with narrower prompts.

    Never raises: every failed attempt (bad JSON, bad shape, model error) moves
    to the next strategy, and running out of attempts returns fallback_result.
    """
    attempts: List[AttemptRecord] = []
    schema = response_schema_for(chart_kind)

    for attempt, strategy in enumerate(strategies[:MAX_ATTEMPTS]):
        record = AttemptRecord(attempt=attempt, strategy=strategy.name)
        attempts.append(record)
        prompt = strategy.build(question, chart_kind, serialized_rows)
        min_points, max_points = strategy.point_bounds(chart_kind, row_count)

        try:
            raw = await llm.generate(SYSTEM_PROMPT, prompt, schema)
            result = validate_response(
                parse_model_json(raw), chart_kind, min_points, max_points
            )
        except ShapeValidationFailed as error:
            record.error = str(error)
            logger.warning(
                f"Chart attempt {attempt} ({strategy.name}) rejected: {error}"
            )
            continue
        except Exception as error:
            record.error = f"{type(error).__name__}: {error}"
            logger.warning(
                f"Chart attempt {attempt} ({strategy.name}) model call failed: {error}"
            )
            continue

        logger.info(f"Chart attempt {attempt} ({strategy.name}) accepted")
        return ShapeOutcome(result=result, state=ShapeState.SUCCESS, attempts=attempts)

    logger.warning(
        f"All {len(attempts)} chart attempts failed, returning {chart_kind.value} fallback"
    )
    return ShapeOutcome(
        result=fallback_result(chart_kind, row_count),
        state=ShapeState.EXHAUSTED,
        attempts=attempts,
    )
