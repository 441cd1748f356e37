import pytest
from httpx import AsyncClient

from conftest import pie_response


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_analyze_returns_envelope(client: AsyncClient, llm):
    llm.shape_responses = [pie_response(["Bank Transfer", "Credit Card"], [12, 5])]
    response = await client.post(
        "/api/analyze",
        json={"question": "What's the breakdown of invoices by payment method?"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    statistics = body["result"]["statistics"]
    assert statistics["type"] == "pie_chart"
    assert statistics["data"]["labels"] == ["Bank Transfer", "Credit Card"]
    assert len(statistics["data"]["colors"]) == 2


@pytest.mark.asyncio
async def test_analyze_blank_question_is_error_chart(client: AsyncClient):
    """Blank question still gets a renderable chart"""
    response = await client.post("/api/analyze", json={"question": "  "})

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["interpretation"].startswith("Invalid question")
    assert result["statistics"] == {"type": "pie_chart", "data": {"labels": ["Error"], "values": [100]}}


@pytest.mark.asyncio
async def test_analyze_missing_question_is_400(client: AsyncClient):
    response = await client.post("/api/analyze", json={})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Question is required"}


@pytest.mark.asyncio
async def test_chat_session_flow(client: AsyncClient, llm):
    llm.shape_responses = [pie_response(["Bank Transfer", "Credit Card"], [12, 5])]

    created = await client.post("/api/chat/session")
    assert created.status_code == 200
    session_id = created.json()["session"]["id"]

    message = await client.post(
        f"/api/chat/message/{session_id}", json={"question": "Split by payment method?"}
    )
    assert message.status_code == 200
    assert message.json()["sessionId"] == session_id
    assert message.json()["result"]["statistics"]["type"] == "pie_chart"

    history = (await client.get(f"/api/chat/session/{session_id}")).json()["session"]["history"]
    assert [entry["role"] for entry in history] == ["user", "system"]
    assert history[0]["content"] == "Split by payment method?"
    assert "statistics" not in history[0]
    assert history[1]["statistics"]["data"]["values"] == [12, 5]


@pytest.mark.asyncio
async def test_clear_session_keeps_it(client: AsyncClient):
    session_id = (await client.post("/api/chat/session")).json()["session"]["id"]
    await client.post(f"/api/chat/message/{session_id}", json={"question": "Anything?"})

    cleared = await client.delete(f"/api/chat/session/{session_id}")
    assert cleared.status_code == 200
    assert cleared.json() == {"success": True, "message": "Chat history cleared"}

    session = (await client.get(f"/api/chat/session/{session_id}")).json()["session"]
    assert session["history"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/chat/session/nope"),
        ("delete", "/api/chat/session/nope"),
        ("post", "/api/chat/message/nope"),
    ],
)
async def test_unknown_session_is_404(client: AsyncClient, method, path):
    kwargs = {"json": {"question": "hi"}} if method == "post" else {}
    response = await getattr(client, method)(path, **kwargs)

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Session not found"}
