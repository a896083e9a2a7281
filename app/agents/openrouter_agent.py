"""Move agent backed by an OpenAI-compatible chat completions endpoint."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from app.agents.config import AgentConfig
from app.agents.prompts import build_move_prompt, build_system_prompt
from app.errors import TransportError
from app.models.agent_protocol import MoveRequest, MoveResponse
from app.models.enums import PlayerSymbol


class OpenRouterAgent:
    """Asks a hosted model for a coordinate through OpenRouter.

    HTTP failures become :class:`TransportError` so the orchestrator can retry
    them. Whatever text comes back is handed over unparsed; reading a
    coordinate out of it is the orchestrator's job.
    """

    def __init__(
        self,
        symbol: PlayerSymbol,
        config: AgentConfig,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.symbol = symbol
        self.config = config
        self.model = config.models[symbol]
        self.name = config.names.get(symbol, symbol.value)
        self._client = client
        self.logger = logging.getLogger(f"app.agents.openrouter.{symbol.value}")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "HTTP-Referer": self.config.http_referer,
            "X-Title": self.config.app_title,
            "Content-Type": "application/json",
        }

    def _payload(self, request: MoveRequest) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(request.acting_symbol)},
                {"role": "user", "content": build_move_prompt(request)},
            ],
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }

    async def _post(self, client: httpx.AsyncClient, payload: dict) -> httpx.Response:
        return await client.post(
            f"{self.config.base_url.rstrip('/')}/chat/completions",
            headers=self._headers(),
            json=payload,
        )

    async def propose_move(self, request: MoveRequest) -> MoveResponse:
        payload = self._payload(request)
        timeout = self.config.orchestrator.request_timeout

        try:
            if self._client is not None:
                response = await self._post(self._client, payload)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await self._post(client, payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{self.name} request failed: HTTP {e.response.status_code}",
                {"status_code": e.response.status_code, "model": self.model},
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"{self.name} request failed: {e.__class__.__name__}: {e}",
                {"model": self.model},
            ) from e

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError):
            self.logger.warning("Unexpected completion payload from %s", self.model)
            content = ""

        content = content.strip()
        self.logger.info("%s (%s) answered %r", self.name, self.symbol.value, content)
        return MoveResponse(request_id=request.request_id, coordinate=content, raw_text=content)
