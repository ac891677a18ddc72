"""FastAPI-powered web UI for playing tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .game import (
    EMPTY,
    HUMAN_VS_COMPUTER,
    HUMAN_VS_HUMAN,
    MODES,
    InvalidMoveError,
    TicTacToeGame,
)

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for an active game plus the bookkeeping for the computer turn."""

    game: TicTacToeGame
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Tic-tac-toe played in the browser")


COMPUTER_MOVE_DELAY: float = 0.3  # seconds


class _ModeRequest(BaseModel):
    mode: str = Field(
        default=HUMAN_VS_HUMAN,
        description="'pvp' for two humans, 'pvc' to play the computer",
    )

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: str) -> str:
        if value not in MODES:
            raise ValueError(
                f"Unsupported mode {value!r}. "
                f"Choose one of {', '.join(MODES)}."
            )
        return value


class NewGameRequest(_ModeRequest):
    """Request payload for starting a new game."""


class ModeRequest(_ModeRequest):
    """Request payload for switching mode on an existing game."""


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


class RestartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_reset: bool = Field(default=False, alias="fullReset")


def _create_session(mode: str) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession(game=TicTacToeGame(mode=mode))
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created game %s (mode=%s)", session_id, mode)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _ensure_idle(session: GameSession) -> None:
    if session.ai_pending:
        raise HTTPException(
            status_code=409, detail="Computer is completing its move"
        )


def _log_if_finished(game_id: str, game: TicTacToeGame) -> None:
    if not game.running:
        logger.info(
            "Game %s finished: %s (scores=%s)",
            game_id,
            game.status_message,
            game.scores.as_dict(),
        )


def _run_computer_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, COMPUTER_MOVE_DELAY))

    with session.lock:
        try:
            session.game.step()
            _log_if_finished(game_id, session.game)
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        move_log: List[Dict[str, object]] = [
            {"player": move.player, "cellIndex": move.index}
            for move in game.history
        ]
        line = game.winning_line
        return {
            "id": game_id,
            "mode": game.mode,
            "board": [c if c != EMPTY else "" for c in game.board.cells],
            "currentPlayer": game.turn,
            "running": game.running,
            "outcome": game.outcome.state,
            "winner": game.outcome.winner,
            "winningLine": list(line) if line else None,
            "scores": game.scores.as_dict(),
            "canUndo": game.can_undo,
            "message": game.status_message,
            "moveLog": move_log,
            "aiPending": session.ai_pending,
        }


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        _ensure_idle(session)
        game = session.game
        try:
            game.apply_move(cell_index)
        except InvalidMoveError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        _log_if_finished(game_id, game)

        should_schedule_ai = (
            game.mode == HUMAN_VS_COMPUTER
            and game.running
            and game.current_player == game.computer
        )
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_computer_turn, game_id)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/undo")
def undo_move(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        _ensure_idle(session)
        session.game.undo()
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(
    game_id: str, request: Optional[RestartRequest] = None
) -> Dict[str, object]:
    session = _get_session(game_id)
    full_reset = request.full_reset if request else False
    with session.lock:
        _ensure_idle(session)
        session.game.restart(full_reset=full_reset)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/mode")
def change_mode(game_id: str, request: ModeRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        _ensure_idle(session)
        session.game.set_mode(request.mode)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic-Tac-Toe</title>
    <link rel=\"preconnect\" href=\"https://fonts.googleapis.com\" />
    <link rel=\"preconnect\" href=\"https://fonts.gstatic.com\" crossorigin />
    <link
      href=\"https://fonts.googleapis.com/css2?family=Poppins:wght@400;500;600;700&display=swap\"
      rel=\"stylesheet\"
    />
    <style>
      :root {
        color-scheme: light;
        font-family: 'Poppins', system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
        font-weight: 400;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        color: #13203a;
        transition: background 0.4s ease, color 0.4s ease;
      }
      body.dark {
        color-scheme: dark;
        background: radial-gradient(circle at top, #1d2540, #121829 55%, #0b0f1c);
        color: #e4e9ff;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(520px, 100%);
      }
      body.dark main {
        background: rgba(22, 28, 48, 0.92);
        box-shadow: 0 20px 40px rgba(0, 0, 0, 0.45);
      }
      h1 {
        margin: 0 0 1.25rem;
        font-size: clamp(1.8rem, 2.4vw + 1.2rem, 2.4rem);
        text-align: center;
        letter-spacing: 0.06em;
      }
      .controls {
        display: flex;
        flex-wrap: wrap;
        gap: 0.75rem;
        justify-content: center;
        align-items: center;
        margin-bottom: 1.25rem;
      }
      button,
      select {
        font-size: 1rem;
        padding: 0.55rem 0.95rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        color: inherit;
        cursor: pointer;
        transition: transform 0.1s ease, box-shadow 0.1s ease;
        font-family: inherit;
      }
      body.dark button,
      body.dark select {
        background: #232c4a;
        border-color: rgba(160, 180, 255, 0.25);
      }
      button:hover:not(:disabled),
      select:hover {
        transform: translateY(-1px);
        box-shadow: 0 8px 18px rgba(0, 64, 128, 0.12);
      }
      button:disabled {
        cursor: default;
        opacity: 0.6;
        transform: none;
        box-shadow: none;
      }
      .secondary {
        background: rgba(226, 232, 255, 0.9);
      }
      label {
        font-weight: 600;
        margin-right: 0.5rem;
      }
      #status {
        text-align: center;
        font-size: 1.1rem;
        font-weight: 600;
        margin: 0 auto 0.5rem;
      }
      #message {
        text-align: center;
        min-height: 1.5rem;
        font-weight: 600;
        margin-bottom: 1rem;
      }
      #board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.55rem;
        max-width: 360px;
        margin: 0 auto 1.5rem;
      }
      #board.thinking {
        opacity: 0.75;
      }
      .cell {
        aspect-ratio: 1 / 1;
        border-radius: 14px;
        font-size: clamp(2rem, 8vw, 3rem);
        font-weight: 700;
        padding: 0;
      }
      .cell.x {
        color: #f04a6a;
      }
      .cell.o {
        color: #3a7bff;
      }
      .cell.win {
        background: #ffe28a;
        box-shadow: 0 0 0 3px rgba(240, 180, 40, 0.8);
      }
      body.dark .cell.win {
        background: #6b5410;
      }
      .scores {
        display: flex;
        justify-content: center;
        gap: 1.5rem;
        font-weight: 600;
      }
      .hidden {
        display: none !important;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>Tic-Tac-Toe</h1>
      <div class=\"controls\">
        <label for=\"mode\">Mode</label>
        <select id=\"mode\">
          <option value=\"pvp\">Human vs Human</option>
          <option value=\"pvc\">Human vs Computer</option>
        </select>
        <button id=\"theme-toggle\" class=\"secondary\" type=\"button\">🌙 Dark Mode</button>
      </div>
      <div id=\"status\">Turn: <span id=\"turn\">X</span></div>
      <div id=\"message\" role=\"status\"></div>
      <div id=\"board\" aria-label=\"Game board\"></div>
      <div class=\"controls\">
        <button id=\"restart\" type=\"button\">Restart</button>
        <button id=\"reset-scores\" class=\"secondary\" type=\"button\">Reset scores</button>
        <button id=\"undo\" class=\"secondary hidden\" type=\"button\">Undo</button>
      </div>
      <div class=\"scores\">
        <span>X: <span id=\"scoreX\">0</span></span>
        <span>O: <span id=\"scoreO\">0</span></span>
        <span>Ties: <span id=\"scoreT\">0</span></span>
      </div>
    </main>
    <script>
      const boardEl = document.getElementById('board');
      const modeEl = document.getElementById('mode');
      const restartButton = document.getElementById('restart');
      const resetScoresButton = document.getElementById('reset-scores');
      const undoButton = document.getElementById('undo');
      const themeToggleButton = document.getElementById('theme-toggle');
      const turnEl = document.getElementById('turn');
      const messageEl = document.getElementById('message');
      const scoreXEl = document.getElementById('scoreX');
      const scoreOEl = document.getElementById('scoreO');
      const scoreTEl = document.getElementById('scoreT');

      let gameId = null;
      let gameState = null;
      let isRequestPending = false;
      let aiPollHandle = null;

      themeToggleButton.addEventListener('click', () => {
        document.body.classList.toggle('dark');
        themeToggleButton.textContent = document.body.classList.contains('dark')
          ? '☀️ Light Mode'
          : '🌙 Dark Mode';
      });

      function stopAiPolling() {
        if (aiPollHandle !== null) {
          clearTimeout(aiPollHandle);
          aiPollHandle = null;
        }
      }

      function ensureAiPolling() {
        if (aiPollHandle !== null) return;
        aiPollHandle = window.setTimeout(pollAiState, 350);
      }

      async function request(path, options = {}) {
        const response = await fetch(path, {
          method: options.method || 'GET',
          headers: { 'Content-Type': 'application/json' },
          body: options.body ? JSON.stringify(options.body) : undefined,
        });
        if (!response.ok) {
          const payload = await response.json().catch(() => ({}));
          const detail = typeof payload?.detail === 'string' ? payload.detail : 'Request failed';
          throw new Error(detail);
        }
        return response.json();
      }

      async function send(path, body) {
        if (isRequestPending) return;
        isRequestPending = true;
        try {
          setState(await request(path, { method: 'POST', body }));
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      async function startGame() {
        stopAiPolling();
        await send('/api/game', { mode: modeEl.value });
      }

      async function pollAiState() {
        aiPollHandle = null;
        if (!gameId) return;
        try {
          setState(await request(`/api/game/${gameId}`));
        } catch (error) {
          console.error('Polling failed', error);
        }
      }

      function setState(data) {
        if (data.id) {
          gameId = data.id;
        }
        gameState = data;
        render();
        if (gameState.aiPending) {
          ensureAiPolling();
        } else {
          stopAiPolling();
        }
      }

      function render() {
        boardEl.innerHTML = '';
        if (!gameState) return;
        const winningLine = new Set(gameState.winningLine || []);
        boardEl.classList.toggle('thinking', gameState.aiPending);
        gameState.board.forEach((value, index) => {
          const cell = document.createElement('button');
          cell.className = 'cell';
          cell.type = 'button';
          cell.textContent = value;
          cell.setAttribute('aria-label', `cell ${index + 1}`);
          if (value) {
            cell.classList.add(value === 'X' ? 'x' : 'o');
          }
          if (winningLine.has(index)) {
            cell.classList.add('win');
          }
          cell.disabled = !gameState.running || gameState.aiPending || Boolean(value);
          cell.addEventListener('click', () => send(`/api/game/${gameId}/move`, { cellIndex: index }));
          boardEl.appendChild(cell);
        });
        turnEl.textContent = gameState.currentPlayer || '-';
        messageEl.textContent = gameState.message;
        scoreXEl.textContent = gameState.scores.X;
        scoreOEl.textContent = gameState.scores.O;
        scoreTEl.textContent = gameState.scores.T;
        undoButton.classList.toggle('hidden', !gameState.canUndo);
        modeEl.value = gameState.mode;
      }

      restartButton.addEventListener('click', () =>
        send(`/api/game/${gameId}/restart`, { fullReset: false })
      );
      resetScoresButton.addEventListener('click', () =>
        send(`/api/game/${gameId}/restart`, { fullReset: true })
      );
      modeEl.addEventListener('change', () => send(`/api/game/${gameId}/mode`, { mode: modeEl.value }));
      undoButton.addEventListener('click', () => send(`/api/game/${gameId}/undo`));

      startGame();
    </script>
  </body>
</html>
"""
