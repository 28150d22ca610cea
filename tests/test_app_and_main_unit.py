import pytest
from fastapi.testclient import TestClient

import main as entry
from backend.app import main as api


@pytest.fixture
def client() -> TestClient:
    return TestClient(api.app)


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "MathSteps API"}


def test_solve_arithmetic(client) -> None:
    response = client.post("/api/solve", json={"problem": "2 + 3 * 4"})
    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "arithmetic"
    assert body["problem"] == "2 + 3 * 4"
    assert body["solution"] == 14
    assert "full_problem" not in body
    assert body["steps"][0] == {
        "action": "Expression Parsed",
        "math": "2 + 3 * 4",
        "explanation": "Evaluating the arithmetic expression step by step.",
    }
    assert body["steps"][-1]["result"] == 14


def test_solve_derivative(client) -> None:
    response = client.post("/api/solve", json={"problem": "d/dx(x^3)"})
    assert response.status_code == 200
    assert response.json()["solution"] == "3*x^2"


def test_unsolvable_problem_returns_400_with_steps(client) -> None:
    response = client.post("/api/solve", json={"problem": "x^2 + 1 = 0"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Unsolvable expression"
    assert body["suggestion"] == "Try a different format or a simpler expression"
    assert body["type"] == "algebra"
    assert body["steps"][-1]["action"] == "Processing Error"


def test_blank_problem_is_rejected(client) -> None:
    response = client.post("/api/solve", json={"problem": "   "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Problem cannot be empty."


def test_missing_problem_field_is_a_validation_error(client) -> None:
    response = client.post("/api/solve", json={})
    assert response.status_code == 422


def test_long_problem_is_truncated_for_display(client) -> None:
    problem = "1+" * 60 + "1"
    response = client.post("/api/solve", json={"problem": problem})
    assert response.status_code == 200
    body = response.json()
    assert body["solution"] == 61
    assert body["problem"] == problem[:100] + "..."
    assert body["full_problem"] == problem


def test_unexpected_error_returns_500(client, monkeypatch) -> None:
    def boom(problem, config=None):
        raise RuntimeError("kaput")

    monkeypatch.setattr(api, "solve_problem", boom)
    response = client.post("/api/solve", json={"problem": "2+2"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Solver error: kaput"


def test_cli_prints_steps_and_solution(capsys) -> None:
    assert entry.main(["2 + 3 * 4"]) == 0
    out = capsys.readouterr().out
    assert "Type: arithmetic" in out
    assert "3 * 4 = 12" in out
    assert "=> 14" in out


def test_cli_reports_unsolvable_and_usage(capsys) -> None:
    assert entry.main(["x^2 + 1 = 0"]) == 1
    assert "Unsolvable expression" in capsys.readouterr().out
    assert entry.main(["   "]) == 1
    assert "Invalid input" in capsys.readouterr().out
    assert entry.main([]) == 2
    assert "Usage" in capsys.readouterr().out
