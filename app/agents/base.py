"""Move agent interface and the local, network-free agents."""
from __future__ import annotations

import random
from collections import deque
from typing import Iterable, Optional, Protocol, Union, runtime_checkable

from app.game.board import available_positions
from app.models.agent_protocol import MoveRequest, MoveResponse


@runtime_checkable
class MoveAgent(Protocol):
    """Anything that can answer a :class:`MoveRequest` with a coordinate.

    Agents are stateless per turn: everything they need travels in the
    request. Network agents raise :class:`~app.errors.TransportError` (or let
    ``httpx`` errors escape) when the service cannot be reached.
    """

    name: str

    async def propose_move(self, request: MoveRequest) -> MoveResponse:
        ...


class ScriptedAgent:
    """Replays a fixed list of replies, one per request.

    An entry may be a string (the reply text) or an exception instance,
    which is raised instead of answering.
    """

    def __init__(self, replies: Iterable[Union[str, BaseException, None]], *, name: str = "scripted"):
        self.name = name
        self._replies = deque(replies)
        self.requests: list[MoveRequest] = []

    async def propose_move(self, request: MoveRequest) -> MoveResponse:
        self.requests.append(request)
        if not self._replies:
            raise RuntimeError(f"{self.name} has no scripted replies left")

        reply = self._replies.popleft()
        if isinstance(reply, BaseException):
            raise reply
        return MoveResponse(request_id=request.request_id, coordinate=reply, raw_text=reply)


class RandomAgent:
    """Picks a random empty cell. Useful for offline demos."""

    def __init__(self, *, name: str = "random", seed: Optional[int] = None):
        self.name = name
        self._rng = random.Random(seed)

    async def propose_move(self, request: MoveRequest) -> MoveResponse:
        options = available_positions(request.game_state.board)
        coordinate = self._rng.choice(options) if options else None
        return MoveResponse(request_id=request.request_id, coordinate=coordinate)
