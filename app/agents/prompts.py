"""
Prompt text for LLM-backed agents.

Pure formatting over a :class:`MoveRequest`. Nothing here affects engine
correctness; an agent that ignores these prompts still has to return a
legal coordinate.
"""
from __future__ import annotations

from dataclasses import dataclass

from app.game.board import available_positions, render_board
from app.game.decay_intelligence import DecayIntelligence, describe
from app.models.agent_protocol import MoveRequest
from app.models.enums import PlayerSymbol


@dataclass(frozen=True, slots=True)
class Personality:
    """Flavour profile for one side"""

    identity: str
    style: str
    directive: str


PERSONALITIES: dict[PlayerSymbol, Personality] = {
    PlayerSymbol.X: Personality(
        identity="You are X, an analytical strategist",
        style="Methodical and defensive. Block threats first, then build lines that outlast decay.",
        directive="Analyze systematically, defend smartly, win methodically.",
    ),
    PlayerSymbol.O: Personality(
        identity="You are O, an aggressive tactician",
        style="Bold and opportunistic. Seize the initiative and force your opponent to react.",
        directive="Strike fast, seize initiative, create pressure.",
    ),
}

DECAY_RULES = """MOVE DECAY RULES:
- Every piece disappears {horizon} turns after it was placed.
- A cell freed by decay can be played again.
- A line only wins if all three pieces are on the board at the same time."""

RESPONSE_FORMAT = """RESPONSE FORMAT:
Reply with ONLY the coordinate (A1, A2, A3, B1, B2, B3, C1, C2 or C3).
Do not include any explanation."""


def _describe_moves(request: MoveRequest) -> str:
    horizon = request.game_state.decay_horizon
    if not request.game_state.active_moves:
        return "No pieces on the board yet"

    lines = []
    for move in request.game_state.active_moves:
        left = horizon - move.age
        note = " (disappears after this turn)" if left <= 1 else ""
        lines.append(f"{move.coordinate}({move.symbol.value}) - age {move.age}, {left} turns left{note}")
    return "\n   ".join(lines)


def build_system_prompt(symbol: PlayerSymbol) -> str:
    personality = PERSONALITIES[symbol]
    return (
        f"{personality.identity} playing decaying tic-tac-toe as {symbol.value}.\n"
        f"{personality.style}\n"
        f"Core directive: {personality.directive}"
    )


def build_move_prompt(request: MoveRequest) -> str:
    """User prompt for one move request"""
    state = request.game_state
    last_move = state.move_log[-1] if state.move_log else "None"

    sections = [
        f"You play {request.acting_symbol.value}. Turn {state.turn_number + 1} of at most {state.max_turns}.",
        f"CURRENT BOARD:\n{render_board(state.board)}",
        f"AVAILABLE POSITIONS: {', '.join(available_positions(state.board))}",
        f"PIECES ON BOARD:\n   {_describe_moves(request)}",
        f"LAST MOVE: {last_move}",
        DECAY_RULES.format(horizon=state.decay_horizon),
    ]

    if request.decay_intelligence:
        intel = DecayIntelligence.model_validate(request.decay_intelligence)
        sections.append(describe(intel))

    sections.append(RESPONSE_FORMAT)
    return "\n\n".join(sections) + "\n\nYour move:"
