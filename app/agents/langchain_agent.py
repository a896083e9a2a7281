"""Move agent driven by a LangChain chat model."""
from __future__ import annotations

import logging
import os
from typing import Any, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage

from app.agents.config import AgentConfig
from app.agents.prompts import build_move_prompt, build_system_prompt
from app.errors import TransportError
from app.models.agent_protocol import MoveRequest, MoveResponse
from app.models.enums import PlayerSymbol


def create_anthropic_llm(model: str, api_key: Optional[str], *, max_tokens: int = 10, temperature: float = 0.7):
    """Build the default chat model for the ``anthropic`` backend."""
    return ChatAnthropic(
        model=model,
        api_key=api_key or os.getenv("ANTHROPIC_API_KEY"),
        temperature=temperature,
        max_tokens=max_tokens,
    )


class LangChainAgent:
    """
    Wraps any chat model exposing ``ainvoke`` (ChatAnthropic by default).

    Each request is a fresh two-message conversation: agents keep no memory
    between turns.
    """

    def __init__(
        self,
        symbol: PlayerSymbol,
        config: AgentConfig,
        *,
        llm: Any = None,
    ):
        self.symbol = symbol
        self.name = config.names.get(symbol, symbol.value)
        self.model = config.models[symbol]
        self.llm = llm or create_anthropic_llm(
            self.model,
            config.api_key,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
        )
        self.logger = logging.getLogger(f"app.agents.langchain.{symbol.value}")

    async def propose_move(self, request: MoveRequest) -> MoveResponse:
        messages = [
            SystemMessage(content=build_system_prompt(request.acting_symbol)),
            HumanMessage(content=build_move_prompt(request)),
        ]

        try:
            reply = await self.llm.ainvoke(messages)
        except Exception as e:
            # Provider SDKs raise their own error types; all of them mean the
            # model could not be reached or refused the call.
            raise TransportError(
                f"{self.name} request failed: {e.__class__.__name__}: {e}",
                {"model": self.model},
            ) from e

        content = reply.content if isinstance(reply.content, str) else _flatten(reply.content)
        content = content.strip()
        self.logger.info("%s (%s) answered %r", self.name, self.symbol.value, content)
        return MoveResponse(request_id=request.request_id, coordinate=content, raw_text=content)


def _flatten(blocks: list) -> str:
    """Join the text parts of a content-block reply."""
    parts = []
    for block in blocks:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
