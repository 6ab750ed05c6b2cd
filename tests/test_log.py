from budgetbot import crud
from budgetbot.deps import get_llm
from budgetbot.errors import LLMError
from budgetbot.main import app
from budgetbot.models import TransactionKind

UNKNOWN_USER = "00000000-0000-0000-0000-000000000000"


def test_log_from_query_string(client, llm, ai_user, db):
    llm.extraction = "50.00 USD McDonald's"

    response = client.get(f"/api/{ai_user.id}/log", params={"message": "You spent $50.00 at McDonald's"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Spending logged successfully"
    assert body["spending"]["amount"] == 50.0
    assert body["spending"]["currency"] == "USD"
    assert body["spending"]["name"] == "McDonald's"
    assert llm.messages == ["You spent $50.00 at McDonald's"]
    assert len(crud.list_transactions(db, TransactionKind.SPENDING, ai_user.id)) == 1


def test_log_from_body_fields(client, llm, ai_user):
    llm.extraction = "100.00 PLN Biedronka"

    response = client.post(f"/api/{ai_user.id}/log", json={"sms": "Payment of 100.00 PLN to Biedronka"})

    assert response.status_code == 200
    assert response.json()["spending"]["currency"] == "PLN"
    assert llm.messages == ["Payment of 100.00 PLN to Biedronka"]


def test_post_falls_back_to_query_string(client, llm, ai_user):
    llm.extraction = "25.50 Coffee Shop"

    response = client.post(f"/api/{ai_user.id}/log", params={"message": "Transaction: 25.50 Coffee Shop"})

    assert response.status_code == 200
    assert response.json()["spending"]["currency"] == "USD"


def test_missing_message(client, ai_user):
    assert client.get(f"/api/{ai_user.id}/log").status_code == 400
    response = client.post(f"/api/{ai_user.id}/log", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Message is required"}


def test_unknown_user(client):
    response = client.get(f"/api/{UNKNOWN_USER}/log", params={"message": "x"})
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_ai_features_disabled(client, user):
    response = client.get(f"/api/{user.id}/log", params={"message": "x"})
    assert response.status_code == 403


def test_openai_key_missing(client, ai_user):
    app.dependency_overrides[get_llm] = lambda: None

    response = client.get(f"/api/{ai_user.id}/log", params={"message": "x"})

    assert response.status_code == 500
    assert response.json() == {"error": "OpenAI API key not configured"}


def test_llm_failure(client, llm, ai_user):
    llm.error = LLMError("Failed to process message with AI", details="rate limited")

    response = client.get(f"/api/{ai_user.id}/log", params={"message": "x"})

    assert response.status_code == 502
    assert response.json() == {"error": "Failed to process message with AI", "details": "rate limited"}


def test_unparseable_ai_response(client, llm, ai_user, db):
    llm.extraction = "I could not find a transaction"

    response = client.get(f"/api/{ai_user.id}/log", params={"message": "Your OTP is 1234"})

    assert response.status_code == 400
    assert response.json() == {
        "error": "Failed to parse transaction from AI response",
        "ai_response": "I could not find a transaction",
    }
    assert crud.list_transactions(db, TransactionKind.SPENDING, ai_user.id) == []


def test_unknown_currency_in_ai_response(client, llm, ai_user):
    llm.extraction = "10 XYZ Stuff"

    response = client.get(f"/api/{ai_user.id}/log", params={"message": "x"})

    assert response.status_code == 400
    assert response.json()["currency"] == "XYZ"
