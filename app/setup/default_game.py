"""Utilities to prepare a demo game at startup."""
from __future__ import annotations

import logging
import os
from typing import Optional

from app.models.game_state import GameState, SessionConfig
from app.state.game_manager import GameManager


# Default identifiers are configurable so docker-compose users can override them
DEFAULT_GAME_ID = os.getenv("DEFAULT_GAME_ID", "demo-game")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


def session_config_from_env() -> SessionConfig:
    """Build a :class:`SessionConfig` from ``DECAY_HORIZON``, ``MAX_TURNS``,
    ``TURN_DELAY``, ``AUTO_PLAY`` and ``RESTART_DELAY``."""

    defaults = SessionConfig()
    restart_delay = os.getenv("RESTART_DELAY")
    return SessionConfig(
        decay_horizon=int(os.getenv("DECAY_HORIZON", defaults.decay_horizon)),
        max_turns=int(os.getenv("MAX_TURNS", defaults.max_turns)),
        turn_delay=float(os.getenv("TURN_DELAY", defaults.turn_delay)),
        auto_play=_env_flag("AUTO_PLAY", defaults.auto_play),
        restart_delay=float(restart_delay) if restart_delay else None,
        halt_on_invalid_move=_env_flag("HALT_ON_INVALID_MOVE", defaults.halt_on_invalid_move),
    )


def bootstrap_default_game(
    manager: GameManager,
    *,
    game_id: Optional[str] = None,
    config: Optional[SessionConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> GameState:
    """Create the demo game if it does not already exist.

    The game is left in ``not_started`` so an operator (or the MCP client)
    decides when the agents begin. Repeated calls return the existing state.

    Args:
        manager: Shared :class:`GameManager` instance.
        game_id: Optional override for the demo game identifier.
        config: Session settings; read from the environment when omitted.
        logger: Optional logger used to emit informative startup messages.

    Returns:
        The prepared :class:`GameState` instance.
    """

    demo_game_id = game_id or DEFAULT_GAME_ID
    existing = manager.get_game(demo_game_id)
    if existing:
        if logger:
            logger.debug("Demo game %s already prepared", demo_game_id)
        return existing

    state = manager.create_game(demo_game_id, config or session_config_from_env())

    if logger:
        logger.info(
            "Prepared demo game %s (decay horizon %d, auto-play %s)",
            demo_game_id,
            state.config.decay_horizon,
            state.config.auto_play,
        )

    return state


__all__ = [
    "bootstrap_default_game",
    "session_config_from_env",
    "DEFAULT_GAME_ID",
]
