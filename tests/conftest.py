import json
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from invoice_analytics.ai_feature.service import AnalysisService, get_analysis_service
from invoice_analytics.core import models
from invoice_analytics.core.database import Base
from invoice_analytics.core.sessions import ChatSessionStore, get_session_store
from invoice_analytics.main import app


def pie_response(labels, values, interpretation="Most invoices are paid by bank transfer."):
    return json.dumps(
        {
            "interpretation": interpretation,
            "statistics": {
                "type": "pie_chart",
                "data": {"labels": labels, "values": values},
            },
        }
    )


def waterfall_response(categories, values, interpretation="Tax adds more than discount removes."):
    return json.dumps(
        {
            "interpretation": interpretation,
            "statistics": {
                "type": "waterfall_chart",
                "data": {"categories": categories, "values": values},
            },
        }
    )


class StubLanguageModel:
    """
    Scripted model. Answers come from three queues: SQL prompts, chart-type
    prompts and chart-data prompts (the only ones sent with an output schema).
    Exceptions in a queue are raised instead of returned.
    """

    def __init__(self, sql=None, chart_type="pie_chart", shapes=None):
        self.sql_responses = [sql or "SELECT payment_method, COUNT(*) AS count FROM invoices GROUP BY payment_method"]
        self.classify_responses = [chart_type]
        self.shape_responses = list(shapes or [])
        self.calls = []

    @staticmethod
    def _next(queue):
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def generate(self, system_prompt, user_prompt, output_schema=None):
        if output_schema is not None:
            kind = "shape"
        elif "Generate a PostgreSQL query" in user_prompt:
            kind = "sql"
        else:
            kind = "classify"
        self.calls.append({"kind": kind, "system": system_prompt, "user": user_prompt, "schema": output_schema})

        if kind == "sql":
            return self._next(self.sql_responses)
        if kind == "classify":
            return self._next(self.classify_responses)
        if not self.shape_responses:
            return "not json at all"
        return self._next(self.shape_responses)

    def calls_of(self, kind):
        return [call for call in self.calls if call["kind"] == kind]


class StubExecutor:
    def __init__(self, rows=None, error=None):
        self.rows = rows if rows is not None else []
        self.error = error
        self.queries = []

    async def execute(self, sql, params=None):
        self.queries.append(sql)
        if self.error is not None:
            raise self.error
        return list(self.rows)


PAYMENT_ROWS = [
    {"payment_method": "Bank Transfer", "count": 12},
    {"payment_method": "Credit Card", "count": 5},
]


@pytest.fixture
def llm():
    return StubLanguageModel()


@pytest.fixture
def executor():
    return StubExecutor(rows=PAYMENT_ROWS)


@pytest.fixture
def service(llm, executor):
    return AnalysisService(llm=llm, executor=executor)


@pytest.fixture
def session_store():
    return ChatSessionStore()


# Client
@pytest_asyncio.fixture(scope="function")
async def client(service, session_store):
    app.dependency_overrides[get_analysis_service] = lambda: service
    app.dependency_overrides[get_session_store] = lambda: session_store

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# In-memory sqlite copy of the invoice schema with a few rows in it
@pytest_asyncio.fixture(scope="function")
async def sqlite_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", poolclass=StaticPool, echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(
            insert(models.Customer.__table__),
            [
                {"id": 1, "name": "Acme Corp", "email": "billing@acme.test"},
                {"id": 2, "name": "Globex", "email": "ap@globex.test"},
            ],
        )
        await conn.execute(
            insert(models.Invoice.__table__),
            [
                {
                    "id": 1,
                    "invoice_number": "INV-2025-0001",
                    "invoice_date": date(2025, 1, 10),
                    "customer_id": 1,
                    "subtotal": Decimal("1000.00"),
                    "discount": Decimal("50.00"),
                    "tax": Decimal("75.00"),
                    "shipping": Decimal("20.00"),
                    "total": Decimal("1045.00"),
                    "payment_method": "Bank Transfer",
                },
                {
                    "id": 2,
                    "invoice_number": "INV-2025-0002",
                    "invoice_date": date(2025, 2, 3),
                    "customer_id": 2,
                    "subtotal": Decimal("200.00"),
                    "discount": Decimal("0.00"),
                    "tax": Decimal("20.00"),
                    "shipping": Decimal("0.00"),
                    "total": Decimal("220.00"),
                    "payment_method": "Credit Card",
                },
            ],
        )
        await conn.execute(
            insert(models.InvoiceItem.__table__),
            [
                {"invoice_id": 1, "description": "Consulting", "quantity": Decimal("4"), "unit_price": Decimal("250.00")},
                {"invoice_id": 2, "description": "Software", "quantity": Decimal("2"), "unit_price": Decimal("100.00")},
            ],
        )
    yield engine
    await engine.dispose()
