#!/usr/bin/env python3
"""Play Decay Arena matches headlessly in the terminal.

This script:
1. Builds the two move agents from the environment
2. Plays one or more games turn by turn, printing the board after each move
3. Reports the winner (or the error that stopped the game)

Usage:
    python run_arena.py --games 3

Environment variables:
    AGENT_BACKEND: Optional - openrouter (default), anthropic or random
    OPENROUTER_API_KEY: Required for the openrouter backend
    ANTHROPIC_API_KEY: Required for the anthropic backend
    X_AGENT_MODEL / O_AGENT_MODEL: Optional - Model per symbol
    DECAY_HORIZON: Optional - Turns a piece stays on the board (default: 7)
    MAX_TURNS: Optional - Turn ceiling before a forced draw (default: 50)
    ARENA_LOG_LEVEL: Optional - Logging level (default: INFO)
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from app.agents.config import AgentConfig
from app.agents.factory import build_agents
from app.game.board import render_board
from app.logging_utils import configure_root_logger
from app.models.enums import GameStatus
from app.setup.default_game import session_config_from_env
from app.state.game_manager import GameManager


logger = logging.getLogger("arena")


async def play_game(manager: GameManager, game_id: str, *, continue_on_invalid: bool) -> GameStatus:
    """Play one game to completion and return its final status."""
    manager.start_game(game_id)
    orchestrator = manager.orchestrator_for(game_id)
    session = orchestrator.session

    while session.state.status == GameStatus.PLAYING:
        outcome = await orchestrator.request_move()
        if outcome is not None:
            print(f"\nTurn {session.state.turn_number}: {session.state.move_log[-1]}")
            if outcome.decayed:
                print("Decayed: " + ", ".join(move.coordinate for move in outcome.decayed))
            print(render_board(session.state.board))
            continue

        error = session.last_error
        if error is not None:
            logger.warning("%s: %s", error.error_type.value, error.message)
        if session.state.status != GameStatus.PLAYING or not continue_on_invalid:
            break
        session.clear_error()

    state = session.state
    if state.status == GameStatus.WON:
        print(f"\n{state.player_name(state.winner)} ({state.winner.value}) wins on turn {state.turn_number}")
    elif state.status == GameStatus.DRAW:
        print(f"\nDraw after {state.turn_number} turns")
    else:
        print(f"\nGame stopped while {state.status.value}")
    return state.status


async def main(args: argparse.Namespace) -> int:
    """Main entry point."""
    configure_root_logger(service_name="arena", env_prefix="ARENA_")

    try:
        agent_config = AgentConfig.from_env()
    except RuntimeError as e:
        logger.error("%s", e)
        return 1

    session_config = session_config_from_env().model_copy(update={"auto_play": False})
    manager = GameManager(
        agent_factory=lambda: build_agents(agent_config),
        orchestrator_settings=agent_config.orchestrator,
    )

    logger.info("=" * 60)
    logger.info("Decay Arena - %s backend", agent_config.backend)
    logger.info("Decay horizon: %d, max turns: %d", session_config.decay_horizon, session_config.max_turns)
    logger.info("=" * 60)

    results: dict[str, int] = {}
    try:
        for number in range(1, args.games + 1):
            game_id = f"arena-{number}"
            manager.create_game(game_id, session_config)
            status = await play_game(manager, game_id, continue_on_invalid=args.continue_on_invalid)
            state = manager.get_game(game_id)
            key = state.winner.value if status == GameStatus.WON else status.value
            results[key] = results.get(key, 0) + 1
    finally:
        manager.shutdown()

    logger.info("Results: %s", ", ".join(f"{key}={count}" for key, count in sorted(results.items())))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Play Decay Arena matches between two agents")
    parser.add_argument("--games", type=int, default=1, help="Number of games to play")
    parser.add_argument(
        "--continue-on-invalid",
        action="store_true",
        help="Ask the agent again after an invalid or unparseable reply",
    )
    args = parser.parse_args()

    try:
        exit_code = asyncio.run(main(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(0)
