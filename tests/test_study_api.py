from fastapi.testclient import TestClient

from main import app


def _create_deck(client, name="Direito Penal"):
    response = client.post("/decks", json={"name": name, "subject": "law"})
    assert response.status_code == 201
    return response.json()["id"]


def _add_cards(client, deck_id, count):
    ids = []
    for index in range(count):
        response = client.post(
            f"/decks/{deck_id}/cards",
            json={"variant": "basic", "payload": {"front": f"Art. {index}", "back": "..."}},
        )
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids


def test_study_session_round_trip(conn):
    client = TestClient(app)
    deck_id = _create_deck(client)
    card_ids = _add_cards(client, deck_id, 3)

    summary = client.get(f"/decks/{deck_id}/summary").json()
    assert summary == {"total": 3, "due": 3, "new": 3}

    response = client.post("/sessions", json={"deck_id": deck_id})
    assert response.status_code == 201
    session = response.json()
    assert session["status"] == "active"
    assert session["queue"] == card_ids
    assert session["current_card_id"] == card_ids[0]

    response = client.post(
        f"/sessions/{session['session_id']}/grade",
        json={"grade": "good", "card_id": card_ids[0], "answer_seconds": 4},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["card"]["repetitions"] == 1
    assert body["card"]["interval_days"] == 1
    assert body["card"]["ease_factor"] == 2.36
    assert body["card"]["total_reviews"] == 1
    assert body["stats"]["cards_graded"] == 1
    assert body["stats"]["status"] == "active"

    client.post(f"/sessions/{session['session_id']}/grade", json={"quality": 5})
    body = client.post(f"/sessions/{session['session_id']}/grade", json={"grade": "again"}).json()
    assert body["card"]["last_quality"] == 0
    assert body["stats"]["status"] == "completed"
    assert body["stats"]["cards_graded"] == 3
    assert body["stats"]["correct_count"] == 2

    response = client.post(f"/sessions/{session['session_id']}/grade", json={"quality": 3})
    assert response.status_code == 409
    assert response.json()["error"] == "SessionClosedError"

    summary = client.get(f"/decks/{deck_id}/summary").json()
    assert summary == {"total": 3, "due": 0, "new": 1}

    stats = client.get(f"/stats/decks/{deck_id}").json()
    assert stats["total_reviews"] == 3
    assert stats["correct_reviews"] == 2
    assert stats["success_rate"] == 66.7
    assert stats["grades"] == {"0": 1, "3": 1, "5": 1}


def test_grade_validation(conn):
    client = TestClient(app)
    deck_id = _create_deck(client)
    _add_cards(client, deck_id, 1)
    session_id = client.post("/sessions", json={"deck_id": deck_id}).json()["session_id"]

    response = client.post(f"/sessions/{session_id}/grade", json={"quality": 7})
    assert response.status_code == 422
    assert response.json()["error"] == "InvalidGradeError"

    response = client.post(f"/sessions/{session_id}/grade", json={})
    assert response.status_code == 422

    response = client.post(f"/sessions/{session_id}/grade", json={"quality": 3, "card_id": 424242})
    assert response.status_code == 404
    assert response.json()["error"] == "CardNotFoundError"

    session = client.get(f"/sessions/{session_id}").json()
    assert session["cards_graded"] == 0
    assert session["status"] == "active"


def test_grade_rejects_non_integer_quality(conn):
    client = TestClient(app)
    deck_id = _create_deck(client)
    (card_id,) = _add_cards(client, deck_id, 1)
    session_id = client.post("/sessions", json={"deck_id": deck_id}).json()["session_id"]

    for quality in (True, "3", 3.5):
        response = client.post(f"/sessions/{session_id}/grade", json={"quality": quality})
        assert response.status_code == 422, quality

    session = client.get(f"/sessions/{session_id}").json()
    assert session["cards_graded"] == 0
    assert session["current_card_id"] == card_id
    card = client.get(f"/decks/{deck_id}/cards/{card_id}").json()
    assert card["version"] == 1
    assert card["total_reviews"] == 0


def test_abort_session(conn):
    client = TestClient(app)
    deck_id = _create_deck(client)
    _add_cards(client, deck_id, 2)
    session_id = client.post("/sessions", json={"deck_id": deck_id}).json()["session_id"]
    client.post(f"/sessions/{session_id}/grade", json={"quality": 4})

    response = client.post(f"/sessions/{session_id}/abort")
    assert response.status_code == 200
    assert response.json()["status"] == "aborted"
    assert response.json()["cards_graded"] == 1

    response = client.post(f"/sessions/{session_id}/grade", json={"quality": 4})
    assert response.status_code == 409


def test_unknown_resources(conn):
    client = TestClient(app)
    assert client.get("/sessions/nope").status_code == 404
    assert client.post("/sessions", json={"deck_id": 999}).status_code == 404
    assert client.get("/decks/999/summary").status_code == 404
    assert client.get("/decks/999").status_code == 404


def test_duplicate_deck_name(conn):
    client = TestClient(app)
    _create_deck(client, "Constitucional")
    response = client.post("/decks", json={"name": "Constitucional"})
    assert response.status_code == 400


def test_list_decks_includes_summary(conn):
    client = TestClient(app)
    first = _create_deck(client, "A")
    _create_deck(client, "B")
    _add_cards(client, first, 2)

    decks = client.get("/decks").json()
    assert [deck["name"] for deck in decks] == ["A", "B"]
    assert decks[0]["summary"] == {"total": 2, "due": 2, "new": 2}
    assert decks[1]["summary"] == {"total": 0, "due": 0, "new": 0}


def test_delete_deck_reassigns_cards(conn):
    client = TestClient(app)
    old_deck = _create_deck(client, "Old")
    new_deck = _create_deck(client, "New")
    card_ids = _add_cards(client, old_deck, 2)

    response = client.delete(f"/decks/{old_deck}?reassign_to={new_deck}")
    assert response.status_code == 204
    assert client.get(f"/decks/{old_deck}").status_code == 404
    moved = client.get(f"/decks/{new_deck}/cards").json()
    assert [card["id"] for card in moved] == card_ids


def test_delete_deck_removes_cards(conn):
    client = TestClient(app)
    deck_id = _create_deck(client)
    card_ids = _add_cards(client, deck_id, 1)

    assert client.delete(f"/decks/{deck_id}").status_code == 204
    assert client.get(f"/decks/{deck_id}/cards/{card_ids[0]}").status_code == 404


def test_health():
    client = TestClient(app)
    assert client.get("/health").json() == {"status": "ok"}
