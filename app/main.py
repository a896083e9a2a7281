"""FastAPI application for Decay Arena"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastmcp import FastMCP

from app.agents.config import configured_backend
from app.errors import ArenaError, TransportError
from app.game.decay_intelligence import DecayIntelligence
from app.logging_utils import configure_root_logger
from app.models.enums import ErrorType
from app.models.game_state import GameSnapshot, SessionConfig
from app.models.responses import ErrorSlotResponse, HealthResponse, HistoryResponse, MoveResult
from app.setup.default_game import DEFAULT_GAME_ID, bootstrap_default_game
from app.state.game_manager import GameManager, GameNotFoundError
from app.state.turn_engine import MoveOutcome

# Global game manager instance
game_manager = GameManager()

# Configure logging early so startup hooks can log useful information
_LOG_FILE = configure_root_logger(service_name="api", env_prefix="APP_")
logger = logging.getLogger("app.main")
if _LOG_FILE:
    logger.info("API log file initialised at %s", _LOG_FILE)

demo_game_state = bootstrap_default_game(game_manager, game_id=DEFAULT_GAME_ID, logger=logger)


def _http_error(e: Exception) -> HTTPException:
    """Map domain errors onto HTTP status codes"""
    if isinstance(e, GameNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, TransportError):
        return HTTPException(status_code=502, detail=e.to_dict())
    if isinstance(e, ArenaError):
        return HTTPException(status_code=400, detail=e.to_dict())
    return HTTPException(status_code=400, detail=str(e))


def _move_result(game_id: str, outcome: Optional[MoveOutcome]) -> MoveResult:
    snapshot = game_manager.snapshot(game_id)
    if outcome is None:
        return MoveResult(applied=False, game=snapshot)
    return MoveResult(
        applied=True,
        move=outcome.move,
        winner=outcome.winner,
        decayed=[move.coordinate for move in outcome.decayed],
        game=snapshot,
    )


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """FastAPI application lifespan."""
    logger.info("FastAPI application starting up...")
    logger.info("Game manager initialized with %d active games", len(game_manager.sessions))
    yield
    logger.info("FastAPI application shutting down...")
    game_manager.shutdown()


app = FastAPI(
    title="Decay Arena API",
    description="Decaying tic-tac-toe played by two AI agents",
    version="0.1.0",
    lifespan=app_lifespan
)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "name": "Decay Arena API",
        "version": "0.1.0",
        "status": "running",
        "default_game": DEFAULT_GAME_ID,
    }


@app.get("/health", response_model=HealthResponse)
def health():
    """Service health and agent credential check"""
    backend, has_key = configured_backend()
    return HealthResponse(
        games=len(game_manager.sessions),
        agent_backend=backend,
        api_key_configured=has_key,
    )


@app.post("/game", response_model=GameSnapshot)
def create_game(game_id: Optional[str] = None, config: Optional[SessionConfig] = None):
    """Create a new game"""
    try:
        state = game_manager.create_game(game_id, config)
        return game_manager.snapshot(state.game_id)
    except Exception as e:
        raise _http_error(e)


@app.get("/game/{game_id}", response_model=GameSnapshot)
def get_game(game_id: str):
    """Get current game state"""
    try:
        return game_manager.snapshot(game_id)
    except GameNotFoundError as e:
        raise _http_error(e)


# Routes that may queue an agent turn are async so the scheduler runs on the
# server's event loop.

@app.post("/game/{game_id}/start", response_model=GameSnapshot)
async def start_game(game_id: str):
    """Start (or resume) the game"""
    try:
        game_manager.start_game(game_id)
        return game_manager.snapshot(game_id)
    except (GameNotFoundError, ValueError, RuntimeError) as e:
        raise _http_error(e)


@app.post("/game/{game_id}/pause", response_model=GameSnapshot)
async def pause_game(game_id: str):
    """Pause the game and drop any scheduled agent turn"""
    try:
        game_manager.pause_game(game_id)
        return game_manager.snapshot(game_id)
    except (GameNotFoundError, ValueError) as e:
        raise _http_error(e)


@app.post("/game/{game_id}/reset", response_model=GameSnapshot)
async def reset_game(game_id: str):
    """Reset to an empty board in not_started"""
    try:
        game_manager.reset_game(game_id)
        return game_manager.snapshot(game_id)
    except GameNotFoundError as e:
        raise _http_error(e)


@app.post("/game/{game_id}/retry", response_model=GameSnapshot)
async def retry_game(game_id: str):
    """Resume a game halted by an error"""
    try:
        game_manager.retry_game(game_id)
        return game_manager.snapshot(game_id)
    except (GameNotFoundError, ValueError, RuntimeError) as e:
        raise _http_error(e)


@app.post("/game/{game_id}/move", response_model=MoveResult)
async def make_move(game_id: str, coordinate: str):
    """Place the acting symbol on ``coordinate`` (e.g. B2)"""
    try:
        outcome = game_manager.make_move(game_id, coordinate)
    except (GameNotFoundError, ArenaError, ValueError, RuntimeError) as e:
        raise _http_error(e)
    return _move_result(game_id, outcome)


@app.post("/game/{game_id}/agent-move", response_model=MoveResult)
async def agent_move(game_id: str):
    """Ask the acting agent for one move now"""
    try:
        outcome = await game_manager.request_agent_move(game_id)
    except (GameNotFoundError, ValueError, RuntimeError) as e:
        raise _http_error(e)

    error = game_manager.last_error(game_id)
    agent_failed = (
        error is not None
        and error.fatal
        and error.error_type in (ErrorType.TRANSPORT_ERROR, ErrorType.AGENT_ERROR)
    )
    if outcome is None and agent_failed:
        raise HTTPException(status_code=502, detail=error.model_dump(mode="json"))
    return _move_result(game_id, outcome)


@app.get("/game/{game_id}/history", response_model=HistoryResponse)
def get_history(game_id: str, limit: int = 50):
    """Get the tail of the move log"""
    try:
        state = game_manager.get_session(game_id).state
    except GameNotFoundError as e:
        raise _http_error(e)

    return HistoryResponse(
        game_id=game_id,
        total_events=len(state.move_log),
        events=game_manager.history(game_id, limit),
    )


@app.get("/game/{game_id}/decay", response_model=DecayIntelligence)
def get_decay(game_id: str):
    """Decay timing for every piece on the board"""
    try:
        return game_manager.decay_intelligence(game_id)
    except GameNotFoundError as e:
        raise _http_error(e)


@app.get("/game/{game_id}/error", response_model=ErrorSlotResponse)
def get_error(game_id: str):
    """Read the last recorded error"""
    try:
        return ErrorSlotResponse(game_id=game_id, error=game_manager.last_error(game_id))
    except GameNotFoundError as e:
        raise _http_error(e)


@app.delete("/game/{game_id}/error", response_model=ErrorSlotResponse)
def clear_error(game_id: str):
    """Mark the last error handled and clear it; returns the cleared entry"""
    try:
        return ErrorSlotResponse(game_id=game_id, error=game_manager.clear_error(game_id))
    except GameNotFoundError as e:
        raise _http_error(e)


# Generate MCP server from FastAPI endpoints
# This must come after all endpoints are defined
logger.info("Generating MCP server from FastAPI endpoints...")
mcp = FastMCP.from_fastapi(
    app=app,
    name="Decay Arena MCP"
)

# Create MCP ASGI app and mount it
mcp_app = mcp.http_app(path='/mcp')


@asynccontextmanager
async def combined_lifespan(app: FastAPI):
    """Combined lifespan for FastAPI and MCP."""
    async with app_lifespan(app):
        async with mcp_app.lifespan(app):
            logger.info("MCP server ready at /mcp")
            yield


app.router.lifespan_context = combined_lifespan

app.mount("/mcp", mcp_app)
logger.info("MCP server mounted at /mcp")


async def main():
    await mcp.run_async(transport="http", port=8000)

if __name__ == "__main__":
    asyncio.run(main())
