import pytest

from conftest import StubLanguageModel
from invoice_analytics.ai_feature.classifier import classify_chart, parse_chart_kind
from invoice_analytics.ai_feature.errors import ClassificationAmbiguous, EmptyQuestion, SynthesisFailed
from invoice_analytics.ai_feature.llm import strip_code_fences
from invoice_analytics.ai_feature.schema_contract import DB_SCHEMA
from invoice_analytics.ai_feature.synthesizer import synthesize_sql
from invoice_analytics.core.schemas import ChartKind


@pytest.mark.asyncio
async def test_synthesize_returns_sql_and_sends_schema():
    llm = StubLanguageModel(sql="```sql\nSELECT COUNT(*) FROM invoices\n```")
    sql = await synthesize_sql("How many invoices?", llm)

    assert sql == "SELECT COUNT(*) FROM invoices"
    call = llm.calls_of("sql")[0]
    assert DB_SCHEMA in call["user"]
    assert DB_SCHEMA in call["system"]
    assert call["schema"] is None


@pytest.mark.asyncio
async def test_synthesize_select_check_is_case_insensitive():
    llm = StubLanguageModel(sql="with t as (select 1) select * from t")
    assert (await synthesize_sql("q", llm)).startswith("with")


@pytest.mark.asyncio
async def test_synthesize_rejects_blank_question():
    llm = StubLanguageModel()
    with pytest.raises(EmptyQuestion):
        await synthesize_sql("  \n ", llm)
    assert llm.calls == []


@pytest.mark.asyncio
async def test_synthesize_rejects_non_query():
    with pytest.raises(SynthesisFailed):
        await synthesize_sql("q", StubLanguageModel(sql="DELETE FROM invoices"))


@pytest.mark.asyncio
async def test_synthesize_wraps_model_errors():
    with pytest.raises(SynthesisFailed) as info:
        await synthesize_sql("q", StubLanguageModel(sql=ValueError("bad key")))
    assert isinstance(info.value.__cause__, ValueError)


@pytest.mark.parametrize(
    "answer, expected",
    [
        ("pie_chart", ChartKind.PIE),
        ("waterfall_chart", ChartKind.WATERFALL),
        (" Waterfall_Chart\n", ChartKind.WATERFALL),
        ('"pie_chart".', ChartKind.PIE),
        ("waterfall chart", ChartKind.WATERFALL),
    ],
)
def test_parse_chart_kind(answer, expected):
    assert parse_chart_kind(answer) == expected


def test_parse_chart_kind_ambiguous():
    with pytest.raises(ClassificationAmbiguous):
        parse_chart_kind("I would use a bar chart")


@pytest.mark.asyncio
async def test_classify_defaults_to_pie_on_model_error():
    llm = StubLanguageModel(chart_type=RuntimeError("timeout"))
    assert await classify_chart("q", "[]", llm) == ChartKind.PIE


@pytest.mark.asyncio
async def test_classify_prompt_includes_question_and_rows():
    llm = StubLanguageModel(chart_type="waterfall_chart")
    kind = await classify_chart("How did totals change?", '[{"month": "2025-01"}]', llm)

    assert kind == ChartKind.WATERFALL
    prompt = llm.calls_of("classify")[0]["user"]
    assert "How did totals change?" in prompt
    assert '[{"month": "2025-01"}]' in prompt


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences("  SELECT 1  ") == "SELECT 1"
    assert strip_code_fences(None) == ""
