"""
Decay intelligence.

Read-only analysis of how close each live move is to expiring. The
orchestrator attaches it to outgoing move requests as optional context;
nothing in the engine depends on it.
"""
from pydantic import BaseModel, Field

from app.game.decay import move_age, remaining_life, turns_until_decay
from app.models.enums import DecayPressure, PlayerSymbol
from app.models.game_state import GameState

# Moves with this many turns or fewer left count towards decay pressure
NEAR_EXPIRY_TURNS = 2


class DecayInfo(BaseModel):
    """Decay timing for one live move"""
    coordinate: str
    symbol: PlayerSymbol
    current_age: int
    turns_until_decay: int
    decays_on_turn: int
    remaining_life: float


class DecayTimingAnalysis(BaseModel):
    """Aggregate timing across the board"""
    total_moves_on_board: int = 0
    oldest_move_age: int = 0
    newest_move_age: int = 0
    average_age: float = 0.0
    decay_pressure: DecayPressure = DecayPressure.LOW


class DecayIntelligence(BaseModel):
    """Live moves bucketed by how soon they disappear"""
    turn_number: int
    decay_horizon: int
    decaying_next: list[DecayInfo] = Field(default_factory=list)
    decaying_soon: list[DecayInfo] = Field(default_factory=list)
    future: list[DecayInfo] = Field(default_factory=list)
    timing: DecayTimingAnalysis = Field(default_factory=DecayTimingAnalysis)


def analyze(game_state: GameState) -> DecayIntelligence:
    """Build decay intelligence for the current state"""
    turn = game_state.turn_number
    horizon = game_state.config.decay_horizon

    infos = [
        DecayInfo(
            coordinate=move.coordinate,
            symbol=move.symbol,
            current_age=move_age(move, turn),
            turns_until_decay=turns_until_decay(move, turn, horizon),
            decays_on_turn=move.turn_number + horizon,
            remaining_life=round(remaining_life(move, turn, horizon), 3),
        )
        for move in game_state.active_moves
    ]

    return DecayIntelligence(
        turn_number=turn,
        decay_horizon=horizon,
        decaying_next=[info for info in infos if info.turns_until_decay <= 1],
        decaying_soon=[info for info in infos if info.turns_until_decay == 2],
        future=[info for info in infos if info.turns_until_decay > 2],
        timing=_timing_analysis(infos),
    )


def _timing_analysis(infos: list[DecayInfo]) -> DecayTimingAnalysis:
    if not infos:
        return DecayTimingAnalysis()

    ages = [info.current_age for info in infos]
    near_expiry = sum(1 for info in infos if info.turns_until_decay <= NEAR_EXPIRY_TURNS)

    if near_expiry >= 3:
        pressure = DecayPressure.HIGH
    elif near_expiry >= 1:
        pressure = DecayPressure.MEDIUM
    else:
        pressure = DecayPressure.LOW

    return DecayTimingAnalysis(
        total_moves_on_board=len(infos),
        oldest_move_age=max(ages),
        newest_move_age=min(ages),
        average_age=round(sum(ages) / len(ages), 1),
        decay_pressure=pressure,
    )


def describe(intel: DecayIntelligence) -> str:
    """Short prose summary for agent prompts"""
    if intel.timing.total_moves_on_board == 0:
        return "DECAY AWARENESS: Board is empty - no decay concerns yet."

    lines = [
        f"DECAY AWARENESS (Turn {intel.turn_number}, pieces last {intel.decay_horizon} turns):",
        f"- {intel.timing.total_moves_on_board} active pieces, "
        f"decay pressure {intel.timing.decay_pressure.value}",
    ]
    if intel.decaying_next:
        cells = ", ".join(f"{i.coordinate}({i.symbol.value})" for i in intel.decaying_next)
        lines.append(f"- Disappearing after this turn: {cells}")
    if intel.decaying_soon:
        cells = ", ".join(f"{i.coordinate}({i.symbol.value})" for i in intel.decaying_soon)
        lines.append(f"- Disappearing in 2 turns: {cells}")
    return "\n".join(lines)
