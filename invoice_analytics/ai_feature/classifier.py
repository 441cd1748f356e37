import logging

from invoice_analytics.ai_feature.errors import ClassificationAmbiguous
from invoice_analytics.ai_feature.llm import LanguageModel
from invoice_analytics.ai_feature.schema_contract import SYSTEM_PROMPT
from invoice_analytics.core.schemas import ChartKind

logger = logging.getLogger(__name__)

# Used whenever the model's answer names neither chart kind
DEFAULT_CHART_KIND = ChartKind.PIE

_ANSWERS = {
    "pie_chart": ChartKind.PIE,
    "pie": ChartKind.PIE,
    "waterfall_chart": ChartKind.WATERFALL,
    "waterfall": ChartKind.WATERFALL,
}


def build_classification_prompt(question: str, serialized_rows: str) -> str:
    return f"""
Analyze these query results and determine which chart type would be most appropriate: pie_chart or waterfall_chart.
Only respond with the chart type name, nothing else.

Original question: {question}

Query results: {serialized_rows}
"""


def parse_chart_kind(answer: str) -> ChartKind:
    normalized = (answer or "").strip().strip("\"'`.").strip().lower().replace(" ", "_")
    try:
        return _ANSWERS[normalized]
    except KeyError:
        raise ClassificationAmbiguous(f"Unrecognized chart type answer: {answer!r}")


async def classify_chart(
    question: str, serialized_rows: str, llm: LanguageModel
) -> ChartKind:
    """Let the model pick pie vs waterfall; unclear or failed answers fall back to pie."""
    try:
        answer = await llm.generate(
            SYSTEM_PROMPT, build_classification_prompt(question, serialized_rows)
        )
        kind = parse_chart_kind(answer)
    except ClassificationAmbiguous as error:
        logger.warning(f"{error}; defaulting to {DEFAULT_CHART_KIND.value}")
        return DEFAULT_CHART_KIND
    except Exception as error:
        logger.warning(
            f"Chart type classification failed: {error}; defaulting to {DEFAULT_CHART_KIND.value}"
        )
        return DEFAULT_CHART_KIND

    logger.info(f"Chart type selected: {kind.value}")
    return kind
