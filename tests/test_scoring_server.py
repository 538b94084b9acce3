import json

import pytest
from fastapi.testclient import TestClient

from quiz_player.server.quiz_catalog import QuizCatalog, parse_quiz_definition
from quiz_player.server.scoring_server import create_scoring_app


@pytest.fixture
def client(definition_data):
    definition_data["settings"]["maxAttempts"] = 2
    catalog = QuizCatalog([parse_quiz_definition(json.dumps(definition_data))])
    return TestClient(create_scoring_app(catalog))


def _start(client) -> str:
    response = client.post("/api/quizzes/quiz-def/attempts")
    assert response.status_code == 201
    return response.json()["attemptId"]


def test_get_quiz_returns_player_view(client):
    response = client.get("/api/quizzes/quiz-def")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "quiz-def"
    assert body["settings"]["passingScore"] == 50
    assert "isCorrect" not in json.dumps(body)


def test_unknown_quiz_is_404(client):
    assert client.get("/api/quizzes/nope").status_code == 404
    assert client.post("/api/quizzes/nope/attempts").status_code == 404


def test_start_attempt(client):
    response = client.post("/api/quizzes/quiz-def/attempts")

    body = response.json()
    assert body["quizId"] == "quiz-def"
    assert body["attemptId"]
    assert body["startedAt"]


def test_submit_grades_every_question_type(client):
    attempt_id = _start(client)

    response = client.post(
        f"/api/quizzes/quiz-def/attempts/{attempt_id}/submit",
        json={
            "answers": {
                "mc": "b",
                "tf": "false",
                "match": {"p1": "p1", "p2": "p1"},
                "text": "  Zero ",
            },
            "timeSpentSeconds": 90,
        },
    )

    assert response.status_code == 200
    body = response.json()
    results = {item["questionId"]: item for item in body["results"]}
    assert results["mc"]["isCorrect"] and results["mc"]["pointsEarned"] == 2
    assert results["tf"]["isCorrect"]
    assert not results["match"]["isCorrect"]
    assert json.loads(results["match"]["userAnswer"]) == {"p1": "p1", "p2": "p1"}
    assert results["match"]["correctAnswers"][0]["content"] == {"France": "Paris", "Italy": "Rome"}
    assert results["text"]["isCorrect"]
    assert body["score"] == 4
    assert body["totalPoints"] == 5
    assert body["percentage"] == 80.0
    assert body["timeSpentSeconds"] == 90


def test_unanswered_questions_score_zero(client):
    attempt_id = _start(client)

    body = client.post(f"/api/quizzes/quiz-def/attempts/{attempt_id}/submit", json={"answers": {}}).json()

    assert body["score"] == 0
    assert body["percentage"] == 0.0
    assert all(item["userAnswer"] is None for item in body["results"])


def test_true_false_accepts_option_id(client):
    attempt_id = _start(client)

    body = client.post(
        f"/api/quizzes/quiz-def/attempts/{attempt_id}/submit",
        json={"answers": {"tf": "o2", "match": {"p1": "p1", "p2": "p2"}}},
    ).json()

    assert body["score"] == 2
    assert body["percentage"] == 40.0


def test_second_submit_is_conflict(client):
    attempt_id = _start(client)
    url = f"/api/quizzes/quiz-def/attempts/{attempt_id}/submit"

    assert client.post(url, json={"answers": {}}).status_code == 200
    assert client.post(url, json={"answers": {}}).status_code == 409


def test_unknown_attempt_is_404(client):
    response = client.post("/api/quizzes/quiz-def/attempts/missing/submit", json={"answers": {}})

    assert response.status_code == 404


def test_attempt_limit(client):
    for _ in range(2):
        attempt_id = _start(client)
        client.post(f"/api/quizzes/quiz-def/attempts/{attempt_id}/submit", json={"answers": {}})

    assert client.post("/api/quizzes/quiz-def/attempts").status_code == 409


def test_malformed_body_is_422(client):
    attempt_id = _start(client)

    response = client.post(f"/api/quizzes/quiz-def/attempts/{attempt_id}/submit", json={"answers": [1, 2]})

    assert response.status_code == 422


@pytest.fixture
def immediate_client(definition_data):
    definition_data["settings"]["feedbackMode"] = "immediate"
    catalog = QuizCatalog([parse_quiz_definition(json.dumps(definition_data))])
    return TestClient(create_scoring_app(catalog))


def test_question_submit_grades_one_answer(immediate_client):
    attempt_id = _start(immediate_client)
    url = f"/api/quizzes/quiz-def/attempts/{attempt_id}/questions/text/submit"

    response = immediate_client.post(url, json={"answer": " Zero "})

    assert response.status_code == 200
    body = response.json()
    assert body["questionId"] == "text"
    assert body["isCorrect"] is True
    assert immediate_client.post(url, json={"answer": "0"}).status_code == 409


def test_question_submit_for_unknown_question_is_404(immediate_client):
    attempt_id = _start(immediate_client)

    response = immediate_client.post(
        f"/api/quizzes/quiz-def/attempts/{attempt_id}/questions/nope/submit", json={"answer": "x"}
    )

    assert response.status_code == 404


def test_question_submit_needs_immediate_feedback_quiz(client):
    attempt_id = _start(client)

    response = client.post(f"/api/quizzes/quiz-def/attempts/{attempt_id}/questions/mc/submit", json={"answer": "b"})

    assert response.status_code == 409


def test_question_submit_after_final_submit_is_conflict(immediate_client):
    attempt_id = _start(immediate_client)
    immediate_client.post(f"/api/quizzes/quiz-def/attempts/{attempt_id}/submit", json={"answers": {}})

    response = immediate_client.post(
        f"/api/quizzes/quiz-def/attempts/{attempt_id}/questions/mc/submit", json={"answer": "b"}
    )

    assert response.status_code == 409
