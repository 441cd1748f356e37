"""
Prompt table for chart generation.

PROMPT_STRATEGIES is indexed by attempt number. Every later entry gives the
model less freedom than the one before it; the last one pins the answer to
three data points.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from invoice_analytics.core.schemas import ChartKind

PIE_EXAMPLE = """{
  "interpretation": "Analysis of the data...",
  "statistics": {
    "type": "pie_chart",
    "data": {
      "labels": ["Category A", "Category B", "Category C"],
      "values": [30, 45, 25]
    }
  }
}"""

WATERFALL_EXAMPLE = """{
  "interpretation": "Analysis of the data...",
  "statistics": {
    "type": "waterfall_chart",
    "data": {
      "categories": ["Start", "Revenue", "Expenses", "Taxes", "End"],
      "values": [0, 500, -300, -50, 150]
    }
  }
}"""

MINIMAL_PIE_EXAMPLE = """{
  "interpretation": "Brief analysis focusing on the top 3 categories",
  "statistics": {
    "type": "pie_chart",
    "data": {
      "labels": ["Category A", "Category B", "Category C"],
      "values": [50, 30, 20]
    }
  }
}"""

MINIMAL_WATERFALL_EXAMPLE = """{
  "interpretation": "Brief analysis of the overall change",
  "statistics": {
    "type": "waterfall_chart",
    "data": {
      "categories": ["Start", "Change", "End"],
      "values": [0, 100, 100]
    }
  }
}"""


def _example(chart_kind: ChartKind) -> str:
    return WATERFALL_EXAMPLE if chart_kind == ChartKind.WATERFALL else PIE_EXAMPLE


def _label_field(chart_kind: ChartKind) -> str:
    return "categories" if chart_kind == ChartKind.WATERFALL else "labels"


def standard_prompt(question: str, chart_kind: ChartKind, serialized_rows: str) -> str:
    labels = _label_field(chart_kind)
    if chart_kind == ChartKind.WATERFALL:
        sign_rule = "Use negative values for decreases."
    else:
        sign_rule = "Pie chart values must not be negative."
    return f"""
Analyze these query results and generate a {chart_kind.value} visualization.

Original question: {question}

Query results: {serialized_rows}

IMPORTANT REQUIREMENTS:
1. The "{labels}" and "values" arrays MUST have exactly the same length.
2. Make sure all values in the "values" array are valid numbers.
3. {sign_rule}

Example {chart_kind.value} format:
{_example(chart_kind)}
"""


def stepwise_prompt(question: str, chart_kind: ChartKind, serialized_rows: str) -> str:
    labels = _label_field(chart_kind)
    return f"""
Create a {chart_kind.value} visualization from the following data.

Original question: {question}

Query results: {serialized_rows}

FOLLOW THESE EXACT STEPS:
1. Identify the key categories/dimensions in the data
2. Calculate the corresponding values for each category
3. Count the items in "{labels}", count the items in "values": the two counts MUST match
4. Format the result according to the example below

Example {chart_kind.value} format:
{_example(chart_kind)}

DOUBLE-CHECK that the number of items in "{labels}" matches the number of items in "values".
"""


def minimal_prompt(question: str, chart_kind: ChartKind, serialized_rows: str) -> str:
    if chart_kind == ChartKind.WATERFALL:
        return f"""
Create a waterfall chart with exactly 3 data points: Start, Change, and End.

Original question: {question}

Query results: {serialized_rows}

FOLLOW THESE EXACT STEPS:
1. Set the Start value to 0
2. Calculate a single Change value that represents the main insight from the data
3. Calculate the End value as Start + Change
4. Format as shown in the example

Example format:
{MINIMAL_WATERFALL_EXAMPLE}
"""
    return f"""
Create a pie chart with exactly 3 data points representing the most important categories.

Original question: {question}

Query results: {serialized_rows}

FOLLOW THESE EXACT STEPS:
1. Identify the 3 most important categories in the data
2. Calculate the corresponding values for each category
3. Format as shown in the example

Example format:
{MINIMAL_PIE_EXAMPLE}
"""


@dataclass(frozen=True)
class PromptStrategy:
    name: str
    build: Callable[[str, ChartKind, str], str]
    # Answers with any other number of data points fail validation
    exact_points: Optional[int] = None

    def point_bounds(
        self, chart_kind: ChartKind, row_count: int
    ) -> Tuple[Optional[int], Optional[int]]:
        """(min, max) data points an answer may have; pie may not invent slices past row_count."""
        if self.exact_points is None:
            return None, None
        if chart_kind == ChartKind.PIE:
            return min(self.exact_points, row_count), self.exact_points
        return self.exact_points, self.exact_points


PROMPT_STRATEGIES: List[PromptStrategy] = [
    PromptStrategy("standard", standard_prompt),
    PromptStrategy("stepwise", stepwise_prompt),
    PromptStrategy("minimal", minimal_prompt, exact_points=3),
]


def _response_schema(chart_kind: ChartKind, data_schema: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "required": ["interpretation", "statistics"],
        "additionalProperties": False,
        "properties": {
            "interpretation": {
                "type": "string",
                "description": "Insightful analysis of the data",
            },
            "statistics": {
                "type": "object",
                "required": ["type", "data"],
                "additionalProperties": False,
                "properties": {
                    "type": {"type": "string", "enum": [chart_kind.value]},
                    "data": data_schema,
                },
            },
        },
    }


PIE_RESPONSE_SCHEMA = _response_schema(
    ChartKind.PIE,
    {
        "type": "object",
        "required": ["labels", "values"],
        "additionalProperties": False,
        "properties": {
            "labels": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Category labels for the pie chart",
            },
            "values": {
                "type": "array",
                "items": {"type": "number"},
                "description": "Numeric values for each category",
            },
        },
    },
)

WATERFALL_RESPONSE_SCHEMA = _response_schema(
    ChartKind.WATERFALL,
    {
        "type": "object",
        "required": ["categories", "values"],
        "additionalProperties": False,
        "properties": {
            "categories": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Category labels for the waterfall chart",
            },
            "values": {
                "type": "array",
                "items": {"type": "number"},
                "description": "Numeric values for each category",
            },
        },
    },
)


def response_schema_for(chart_kind: ChartKind) -> Dict[str, Any]:
    if chart_kind == ChartKind.WATERFALL:
        return WATERFALL_RESPONSE_SCHEMA
    return PIE_RESPONSE_SCHEMA
