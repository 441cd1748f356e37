import logging
import re

from invoice_analytics.ai_feature.errors import EmptyQuestion, SynthesisFailed
from invoice_analytics.ai_feature.llm import LanguageModel, strip_code_fences
from invoice_analytics.ai_feature.schema_contract import DB_SCHEMA, SYSTEM_PROMPT

logger = logging.getLogger(__name__)

# Plausibility check only, this is not a SQL parser
_SELECT_RE = re.compile(r"\bselect\b", re.IGNORECASE)


def build_sql_prompt(question: str, schema: str = DB_SCHEMA) -> str:
    return (
        f"Database schema:\n{schema}\n\n"
        f"Generate a PostgreSQL query to answer: {question}\n"
        "Only answer with the SQL query string. Do not markdown format it, "
        "write the query directly."
    )


async def synthesize_sql(
    question: str, llm: LanguageModel, schema: str = DB_SCHEMA
) -> str:
    """
    Ask the model for one read-only SQL statement answering the question.

    Raises:
        EmptyQuestion: question is blank after trimming.
        SynthesisFailed: the model call errored or returned something without SELECT.
    """
    if not isinstance(question, str) or not question.strip():
        raise EmptyQuestion()

    try:
        raw = await llm.generate(SYSTEM_PROMPT, build_sql_prompt(question, schema))
    except Exception as error:
        logger.error(f"Model call failed while generating SQL: {error}")
        raise SynthesisFailed(f"Failed to generate SQL query: {error}") from error

    sql = strip_code_fences(raw)
    if not _SELECT_RE.search(sql):
        raise SynthesisFailed(
            "Failed to generate SQL query: Failed to generate a valid SQL query"
        )

    logger.info(f"Generated SQL: {sql}")
    return sql
