"""
Natural-language analytics over the invoice database.

Flow for one question:
1. Generate SQL from the question and the schema
2. Execute it (read-only)
3. Pick a chart kind for the rows
4. Generate + validate chart data, retrying with narrower prompts
Every failure past the entry point comes back as an AnalysisResult, never as an exception.
"""
import logging
from functools import lru_cache

from invoice_analytics.ai_feature.classifier import classify_chart
from invoice_analytics.ai_feature.errors import AnalysisError, EmptyQuestion
from invoice_analytics.ai_feature.executor import Executor, QueryExecutor, serialize_rows
from invoice_analytics.ai_feature.llm import LanguageModel, OpenAILanguageModel
from invoice_analytics.ai_feature.shape_generator import generate_chart
from invoice_analytics.ai_feature.synthesizer import synthesize_sql
from invoice_analytics.core.database import engine
from invoice_analytics.core.schemas import (
    AnalysisResult,
    PieChartData,
    PieChartStatistics,
)

logger = logging.getLogger(__name__)

NO_DATA_INTERPRETATION = "No data available for analysis."


def error_result(message: str) -> AnalysisResult:
    return AnalysisResult(
        interpretation=message,
        statistics=PieChartStatistics(data=PieChartData(labels=["Error"], values=[100])),
    )


def no_data_result() -> AnalysisResult:
    return AnalysisResult(
        interpretation=NO_DATA_INTERPRETATION,
        statistics=PieChartStatistics(
            data=PieChartData(labels=["No Data"], values=[100])
        ),
    )


class AnalysisService:
    """Holds the model and database capabilities; one instance serves many requests."""

    def __init__(self, llm: LanguageModel, executor: Executor):
        self.llm = llm
        self.executor = executor

    async def analyze(self, question: str) -> AnalysisResult:
        try:
            sql = await synthesize_sql(question, self.llm)
            rows = await self.executor.execute(sql)
        except EmptyQuestion as error:
            return error_result(str(error))
        except AnalysisError as error:
            logger.error(f"Error in statistical analysis: {error}")
            return error_result(f"Analysis failed: {error}")
        except Exception as error:
            logger.exception(f"Unexpected error in statistical analysis: {error}")
            return error_result(f"Analysis failed: {error}")

        if not rows:
            return no_data_result()

        serialized = serialize_rows(rows)
        chart_kind = await classify_chart(question, serialized, self.llm)
        outcome = await generate_chart(
            question, chart_kind, serialized, len(rows), self.llm
        )
        return outcome.result


@lru_cache
def get_analysis_service() -> AnalysisService:
    """Shared service for the HTTP layer; tests swap it through dependency_overrides."""
    return AnalysisService(llm=OpenAILanguageModel(), executor=QueryExecutor(engine))
