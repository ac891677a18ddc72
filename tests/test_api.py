"""Tests for the FastAPI tic-tac-toe interface."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tictactoe import ui
from tictactoe.ui import app


client = TestClient(app)
ui.COMPUTER_MOVE_DELAY = 0.0


def _new_game(mode: str = "pvp") -> dict:
    response = client.post("/api/game", json={"mode": mode})
    assert response.status_code == 200
    return response.json()


def _move(game_id: str, cell_index: int):
    return client.post(f"/api/game/{game_id}/move", json={"cellIndex": cell_index})


def test_create_game_initial_state():
    payload = _new_game()
    assert payload["mode"] == "pvp"
    assert payload["board"] == [""] * 9
    assert payload["currentPlayer"] == "X"
    assert payload["running"] is True
    assert payload["outcome"] == "in_progress"
    assert payload["scores"] == {"X": 0, "O": 0, "T": 0}
    assert payload["canUndo"] is False
    assert payload["moveLog"] == []


def test_computer_replies_after_human_move():
    game_id = _new_game("pvc")["id"]

    state = _move(game_id, 0).json()
    assert state["board"][0] == "X"
    assert state["currentPlayer"] == "O"
    assert state["aiPending"] is True

    follow_up = client.get(f"/api/game/{game_id}").json()
    assert follow_up["aiPending"] is False
    assert follow_up["currentPlayer"] == "X"
    assert follow_up["moveLog"][-1] == {"player": "O", "cellIndex": 4}
    assert follow_up["board"][4] == "O"


def test_win_is_reported_and_scored():
    game_id = _new_game()["id"]
    for idx in (0, 4, 1, 7):
        assert _move(game_id, idx).status_code == 200
    state = _move(game_id, 2).json()

    assert state["outcome"] == "win"
    assert state["winner"] == "X"
    assert state["winningLine"] == [0, 1, 2]
    assert state["running"] is False
    assert state["currentPlayer"] is None
    assert state["scores"]["X"] == 1
    assert state["message"] == "Player X wins!"

    late = _move(game_id, 5)
    assert late.status_code == 400


def test_invalid_move_rejected():
    game_id = _new_game()["id"]
    assert _move(game_id, 0).status_code == 200

    duplicate_move = _move(game_id, 0)
    assert duplicate_move.status_code == 400
    assert duplicate_move.json()["detail"]

    out_of_range = _move(game_id, 9)
    assert out_of_range.status_code == 422


def test_rejects_unsupported_mode():
    response = client.post("/api/game", json={"mode": "online"})
    assert response.status_code == 422


def test_missing_game_returns_404():
    assert client.get("/api/game/nope").status_code == 404
    assert client.post("/api/game/nope/undo").status_code == 404


def test_undo_in_pvc_returns_to_human_turn():
    game_id = _new_game("pvc")["id"]
    _move(game_id, 0)

    state = client.post(f"/api/game/{game_id}/undo").json()
    assert state["board"] == [""] * 9
    assert state["currentPlayer"] == "X"
    assert state["canUndo"] is False


def test_restart_and_full_reset():
    game_id = _new_game()["id"]
    for idx in (0, 4, 1, 7, 2):
        _move(game_id, idx)

    state = client.post(
        f"/api/game/{game_id}/restart", json={"fullReset": False}
    ).json()
    assert state["board"] == [""] * 9
    assert state["running"] is True
    assert state["scores"] == {"X": 1, "O": 0, "T": 0}

    state = client.post(
        f"/api/game/{game_id}/restart", json={"fullReset": True}
    ).json()
    assert state["scores"] == {"X": 0, "O": 0, "T": 0}


def test_mode_change_restarts_round():
    game_id = _new_game()["id"]
    _move(game_id, 4)

    state = client.post(f"/api/game/{game_id}/mode", json={"mode": "pvc"}).json()
    assert state["mode"] == "pvc"
    assert state["board"] == [""] * 9
    assert state["currentPlayer"] == "X"


def test_actions_blocked_while_computer_moves():
    game_id = _new_game("pvc")["id"]
    ui.SESSIONS[game_id].ai_pending = True
    try:
        assert _move(game_id, 0).status_code == 409
        assert client.post(f"/api/game/{game_id}/undo").status_code == 409
        assert client.post(f"/api/game/{game_id}/restart").status_code == 409
        mode_change = client.post(f"/api/game/{game_id}/mode", json={"mode": "pvp"})
        assert mode_change.status_code == 409
    finally:
        ui.SESSIONS[game_id].ai_pending = False


def test_index_serves_page():
    response = client.get("/")
    assert response.status_code == 200
    assert "Tic-Tac-Toe" in response.text
    assert "theme-toggle" in response.text
