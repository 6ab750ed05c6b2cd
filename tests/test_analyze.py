from budgetbot.deps import get_llm, get_messenger
from budgetbot.errors import LLMError
from budgetbot.main import app


def _payload(telegram_id, **overrides):
    payload = {
        "transactions": [
            {"date": "2025-11-03", "amount": -12.5, "currency": "EUR", "category": "Groceries", "merchant": "Lidl"}
        ],
        "categoryStats": [{"category": "Groceries", "total": 12.5, "percentage": 100}],
        "totalSpent": 12.5,
        "period": "week",
        "dateRange": "03 Nov - 09 Nov",
        "userTelegramId": telegram_id,
        "userCurrency": "EUR",
    }
    payload.update(overrides)
    return payload


def test_analysis_is_generated_and_sent(client, llm, messenger, user):
    llm.analysis = "So, Alice — here's your week."

    response = client.post("/api/analyze", json=_payload(user.telegram_id))

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Analysis generated and sent",
        "analysis": "So, Alice — here's your week.",
    }
    assert messenger.sent == [(user.telegram_id, "So, Alice — here's your week.", "Markdown")]

    prompt = llm.prompts[0]
    assert '"currency_symbol": "€"' in prompt
    assert '"user_name": "Alice"' in prompt
    assert '"merchant": "Lidl"' in prompt
    assert "Total Spent: 12.5 EUR" in prompt


def test_unknown_currency_falls_back_to_code(client, llm, user):
    client.post("/api/analyze", json=_payload(user.telegram_id, userCurrency="XYZ"))
    assert '"currency_symbol": "XYZ"' in llm.prompts[0]


def test_missing_fields(client, user):
    response = client.post("/api/analyze", json={"transactions": []})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"


def test_unknown_user(client):
    response = client.post("/api/analyze", json=_payload(999999))
    assert response.status_code == 404


def test_llm_failure(client, llm, messenger, user):
    llm.error = LLMError("Failed to generate analysis")

    response = client.post("/api/analyze", json=_payload(user.telegram_id))

    assert response.status_code == 502
    assert messenger.sent == []


def test_missing_openai_key(client, user):
    app.dependency_overrides[get_llm] = lambda: None
    assert client.post("/api/analyze", json=_payload(user.telegram_id)).status_code == 500


def test_delivery_is_skipped_without_bot_token(client, user):
    app.dependency_overrides[get_messenger] = lambda: None

    response = client.post("/api/analyze", json=_payload(user.telegram_id))

    assert response.status_code == 200
    assert response.json()["analysis"] == "Report"
