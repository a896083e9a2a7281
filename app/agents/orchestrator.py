"""
Agent move orchestration.

Asks the acting agent for exactly one move at a time, validates the reply
against the board the request was built from, and applies it through the
session. Transport failures are retried with backoff, each attempt under a
fresh request id; invalid replies are recorded and never corrected on the
agent's behalf. Anything else an agent raises halts the game.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Mapping, Optional

import httpx

from app.agents.base import MoveAgent
from app.agents.config import OrchestratorSettings
from app.errors import AgentError, ArenaError, TransportError
from app.game import decay_intelligence
from app.models.agent_protocol import MoveRequest, MoveResponse, RequestGameState
from app.models.enums import GameStatus, PlayerSymbol
from app.models.game_state import GameState
from app.state.session import GameSession
from app.state.turn_engine import MoveOutcome
from app.validation.move_validator import MoveValidator


logger = logging.getLogger("app.agents.orchestrator")

TRANSPORT_FAILURES = (asyncio.TimeoutError, httpx.HTTPError, ConnectionError, TransportError)


class AgentMoveOrchestrator:
    """Drives agent turns for one :class:`GameSession`."""

    def __init__(
        self,
        session: GameSession,
        agents: Mapping[PlayerSymbol, MoveAgent],
        settings: Optional[OrchestratorSettings] = None,
    ):
        self.session = session
        self.agents = dict(agents)
        self.settings = settings or OrchestratorSettings()

    # ----- request building -----

    def build_request(self, game_state: GameState) -> MoveRequest:
        intel = None
        if self.settings.attach_decay_intelligence:
            intel = decay_intelligence.analyze(game_state).model_dump(mode="json")

        return MoveRequest(
            game_id=game_state.game_id,
            acting_symbol=game_state.current_symbol,
            game_state=RequestGameState.from_game_state(game_state),
            decay_intelligence=intel,
        )

    def _wanted(self, request_id: str) -> bool:
        """Still the awaited attempt, and the game still wants a move."""
        return self.session.is_expected(request_id) and self.session.state.status == GameStatus.PLAYING

    def _halt_if_current(self, request_id: str, error: ArenaError) -> None:
        if self._wanted(request_id):
            self.session.halt(error)
        else:
            logger.warning(
                "Game %s: dropping %s for superseded request %s: %s",
                self.session.game_id,
                error.error_type.value,
                request_id,
                error.message,
            )

    # ----- one turn -----

    async def request_move(self) -> Optional[MoveOutcome]:
        """Consult the acting agent once and apply its move.

        Returns the applied outcome, or None when the reply was invalid,
        stale, or the agent could not be consulted.

        Raises:
            ValueError: the game is not playing or the agent is missing
            RuntimeError: another request is already in flight
        """
        session = self.session
        state = session.state
        if state.status != GameStatus.PLAYING:
            raise ValueError(f"Cannot request a move while the game is {state.status.value}")

        symbol = state.current_symbol
        agent = self.agents.get(symbol)
        if agent is None:
            raise ValueError(f"No agent configured for {symbol.value}")
        agent_name = getattr(agent, "name", symbol.value)

        request = self.build_request(state)
        session.begin_request(request.request_id)
        # one entry per attempt; the last one is the id the session awaits
        sent = [request]
        logger.info(
            "Game %s: asking %s (%s) for turn %d [request %s]",
            session.game_id,
            agent_name,
            symbol.value,
            state.turn_number + 1,
            request.request_id,
        )

        try:
            response = await self._send_with_retry(agent, sent)
        except TransportError as exc:
            self._halt_if_current(sent[-1].request_id, exc)
            return None
        except Exception as exc:
            logger.exception("Game %s: agent %s failed", session.game_id, agent_name)
            self._halt_if_current(
                sent[-1].request_id,
                AgentError(
                    f"Agent {agent_name} failed: {exc.__class__.__name__}: {exc}",
                    {"symbol": symbol.value, "cause": exc.__class__.__name__},
                ),
            )
            return None
        finally:
            request = sent[-1]
            superseded = not session.is_expected(request.request_id)
            session.end_request(request.request_id)

        if response is None or superseded:
            logger.info("Game %s: no reply to apply for request %s", session.game_id, request.request_id)
            return None

        if session.state.status != GameStatus.PLAYING:
            logger.info(
                "Game %s: discarding reply, game is now %s",
                session.game_id,
                session.state.status.value,
            )
            return None

        try:
            row, col, coordinate = MoveValidator.validate(response.coordinate, request.game_state.board)
        except ArenaError as exc:
            exc.details.setdefault("symbol", symbol.value)
            exc.details.setdefault("request_id", request.request_id)
            if session.state.config.halt_on_invalid_move:
                session.halt(exc)
            else:
                session.scheduler.cancel()
                session.record_error(exc)
            return None

        outcome = session.apply_move(row, col)
        logger.info("Game %s: %s played %s", session.game_id, symbol.value, coordinate)
        return outcome

    async def _send_with_retry(self, agent: MoveAgent, sent: list[MoveRequest]) -> Optional[MoveResponse]:
        """Send the last request in ``sent`` with a hard timeout, retrying transport failures.

        Every retry goes out under a new request id, so a late reply to an
        earlier attempt no longer matches. Returns None once the session has
        moved on (reset, pause, halt) while waiting.
        """
        settings = self.settings
        attempts = 0

        while True:
            attempts += 1
            request = sent[-1]
            try:
                response = await asyncio.wait_for(
                    agent.propose_move(request),
                    timeout=settings.request_timeout,
                )
                if response.request_id != request.request_id:
                    raise TransportError(
                        f"Stale response for request {response.request_id}",
                        {"expected": request.request_id, "received": response.request_id},
                    )
                return response

            except TRANSPORT_FAILURES as exc:
                if not self._wanted(request.request_id):
                    return None

                if isinstance(exc, asyncio.TimeoutError):
                    reason = f"no reply within {settings.request_timeout:.1f}s"
                else:
                    reason = str(exc) or exc.__class__.__name__

                if attempts > settings.max_retries:
                    raise TransportError(
                        f"Agent unreachable after {attempts} attempts: {reason}",
                        {"request_id": request.request_id},
                        attempts=attempts,
                    ) from exc

                delay = settings.backoff_delay(attempts)
                self.session.record_error(
                    TransportError(f"Attempt {attempts} failed: {reason}", attempts=attempts)
                )
                logger.warning(
                    "Game %s: attempt %d/%d failed (%s); retrying in %.2fs",
                    self.session.game_id,
                    attempts,
                    settings.max_retries + 1,
                    reason,
                    delay,
                )
                await asyncio.sleep(delay)

                if not self._wanted(request.request_id):
                    return None

                retry = request.model_copy(update={"request_id": uuid.uuid4().hex})
                if not self.session.rotate_request(request.request_id, retry.request_id):
                    return None
                sent.append(retry)

    # ----- auto-play -----

    def schedule_next(self) -> bool:
        """Queue the next agent turn, or a restart once the game is over."""
        session = self.session
        state = session.state
        config = state.config

        if not config.auto_play:
            return False

        if state.status == GameStatus.PLAYING:
            return session.scheduler.schedule(config.turn_delay, self.play_turn, label="agent turn")

        if state.is_finished and config.restart_delay is not None:
            return session.scheduler.schedule(config.restart_delay, self.restart, label="restart")

        return False

    async def play_turn(self) -> None:
        """Scheduler callback: one agent turn, then queue the following one."""
        if self.session.state.status != GameStatus.PLAYING or self.session.request_in_flight:
            return

        outcome = await self.request_move()
        if outcome is not None:
            self.schedule_next()

    async def restart(self) -> None:
        self.session.reset()
        self.session.start()
        self.schedule_next()

    def stop(self) -> None:
        self.session.close()
