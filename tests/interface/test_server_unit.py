from unittest.mock import patch

from fastapi.testclient import TestClient

from deckwise.consts import VERSION
from deckwise.server import app

client = TestClient(app)

NOW = "2024-03-10T12:00:00Z"


def _card(**fields):
    card = {"id": "c1", "deckId": "d1", "userId": "u1"}
    card.update(fields)
    return card


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version():
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_ratings():
    response = client.get("/ratings")
    assert response.status_code == 200
    buttons = {b["label"]: b for b in response.json()}
    assert buttons["Again"]["rating"] == 0
    assert buttons["Again"]["passed"] is False
    assert buttons["Hard"]["rating"] == 3
    assert buttons["Hard"]["passed"] is True


def test_schedule_returns_camel_case_card_and_event():
    req = {
        "card": _card(repetition=2, easeFactor=2.5, interval=6, dueDate=NOW),
        "qualityRating": 4,
        "now": NOW,
    }

    response = client.post("/schedule", json=req)

    assert response.status_code == 200
    data = response.json()
    assert data["card"]["repetition"] == 3
    assert data["card"]["interval"] == 15
    assert data["card"]["dueDate"].startswith("2024-03-25T12:00:00")
    assert data["reviewEvent"]["qualityRating"] == 4
    assert data["reviewEvent"]["resultingInterval"] == 15
    assert data["reviewEvent"]["cardId"] == "c1"


def test_schedule_rejects_out_of_range_rating():
    response = client.post("/schedule", json={"card": _card(), "qualityRating": 7, "now": NOW})
    assert response.status_code == 400
    assert "between 0 and 5" in response.json()["detail"]


def test_schedule_rejects_fractional_rating():
    response = client.post("/schedule", json={"card": _card(), "qualityRating": 4.5})
    assert response.status_code == 422


def test_classify():
    response = client.post("/classify", json={"card": _card(), "now": NOW})
    assert response.status_code == 200
    assert response.json() == {"classification": "new"}


def test_queue():
    cards = [_card(id=f"n{i}") for i in range(4)]
    cards.append(_card(id="due", repetition=2, interval=6, dueDate="2024-03-09T12:00:00Z"))

    response = client.post(
        "/queue", json={"cards": cards, "now": NOW, "sessionLimit": 3, "seed": 5}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["dueCount"] == 1
    assert data["newCount"] == 2
    assert "due" in {c["id"] for c in data["cards"]}


def test_queue_empty_deck():
    response = client.post("/queue", json={"cards": [], "now": NOW})
    assert response.json()["status"] == "empty_deck"


def test_streak():
    req = {
        "reviewTimestamps": ["2024-03-08T10:00:00Z", "2024-03-09T10:00:00Z"],
        "now": NOW,
    }
    response = client.post("/streak", json=req)
    assert response.status_code == 200
    data = response.json()
    assert data["current"] == 2
    assert data["longest"] == 2
    assert data["lastStudyDate"] == "2024-03-09"


def test_streak_unknown_time_zone():
    response = client.post("/streak", json={"reviewTimestamps": [], "timeZone": "Mars/Olympus"})
    assert response.status_code == 400


def test_statistics_without_history():
    response = client.post("/statistics", json={"cards": [_card()], "now": NOW, "dateRange": "7d"})

    assert response.status_code == 200
    data = response.json()
    assert data["totalCards"] == 1
    assert data["retentionRate"] is None
    assert data["averageInterval"] is None
    assert data["classificationCounts"]["new"] == 1
    assert len(data["activity"]) == 7
    assert data["deckProgress"][0]["status"] == "new"


def test_queue_without_seed_keeps_its_order():
    cards = [_card(id=f"n{i}") for i in range(10)]
    req = {"cards": cards, "now": NOW}

    first = client.post("/queue", json=req).json()
    second = client.post("/queue", json=req).json()

    assert [c["id"] for c in first["cards"]] == [c["id"] for c in second["cards"]]
    assert first["seed"] == "d1:2024-03-10"


def test_statistics_unknown_time_zone():
    response = client.post("/statistics", json={"cards": [], "timeZone": "Mars/Olympus"})
    assert response.status_code == 400
    assert "Mars/Olympus" in response.json()["detail"]


@patch("deckwise.server.MetricsCalculator.aggregate")
def test_statistics_internal_key_error_is_500(mock_aggregate):
    mock_aggregate.side_effect = KeyError("deck_id")

    response = client.post("/statistics", json={"cards": [], "now": NOW})

    assert response.status_code == 500
    assert "time zone" not in response.json()["detail"]
