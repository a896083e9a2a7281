"""Configuration helpers for move agents and the orchestrator."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from app.models.enums import PlayerSymbol


def _get_env(*keys: str, default: Optional[str] = None) -> Optional[str]:
    """Return the first environment variable that is set."""

    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return default


# OpenRouter slugs are the dataclass defaults; the anthropic backend talks to
# the Anthropic API directly and needs its own model names.
ANTHROPIC_MODELS = {
    PlayerSymbol.X: "claude-3-5-sonnet-latest",
    PlayerSymbol.O: "claude-3-5-haiku-latest",
}


def configured_backend() -> tuple[str, bool]:
    """(backend name, whether its API key is set) without raising."""

    backend = (_get_env("AGENT_BACKEND", default="openrouter") or "openrouter").lower()
    if backend == "random":
        return backend, True
    if backend == "anthropic":
        return backend, bool(_get_env("ANTHROPIC_API_KEY"))
    return backend, bool(_get_env("openrouter_api_key", "OPENROUTER_API_KEY"))


@dataclass(slots=True)
class OrchestratorSettings:
    """Timeout and retry policy for agent requests."""

    request_timeout: float = 30.0
    max_retries: int = 3
    backoff_base: float = 0.5
    backoff_factor: float = 2.0
    attach_decay_intelligence: bool = True

    def backoff_delay(self, retry_number: int) -> float:
        """Seconds to wait before retry ``retry_number`` (1-based)."""

        return self.backoff_base * self.backoff_factor ** (retry_number - 1)


@dataclass(slots=True)
class AgentConfig:
    """Runtime configuration for the two move agents."""

    backend: str = "openrouter"
    api_key: Optional[str] = None
    base_url: str = "https://openrouter.ai/api/v1"
    models: dict[PlayerSymbol, str] = field(
        default_factory=lambda: {
            PlayerSymbol.X: "anthropic/claude-3.5-sonnet",
            PlayerSymbol.O: "openai/gpt-4o",
        }
    )
    names: dict[PlayerSymbol, str] = field(
        default_factory=lambda: {
            PlayerSymbol.X: "Claude",
            PlayerSymbol.O: "GPT-4",
        }
    )
    http_referer: str = "https://github.com/decay-arena/decay-arena"
    app_title: str = "Decay Arena"
    temperature: float = 0.7
    max_tokens: int = 10
    orchestrator: OrchestratorSettings = field(default_factory=OrchestratorSettings)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """Load configuration from environment variables."""

        backend = (_get_env("AGENT_BACKEND", default="openrouter") or "openrouter").lower()
        if backend not in ("openrouter", "anthropic", "random"):
            raise RuntimeError(
                f"AGENT_BACKEND must be openrouter, anthropic or random (got {backend!r})"
            )

        if backend == "anthropic":
            api_key = _get_env("ANTHROPIC_API_KEY")
        else:
            api_key = _get_env("openrouter_api_key", "OPENROUTER_API_KEY")

        if backend != "random" and not api_key:
            raise RuntimeError(
                "An API key is required for the "
                f"{backend} backend (OPENROUTER_API_KEY or ANTHROPIC_API_KEY)"
            )

        defaults = cls()
        if backend == "anthropic":
            defaults.models = dict(ANTHROPIC_MODELS)
        models = {
            PlayerSymbol.X: _get_env("X_AGENT_MODEL", default=defaults.models[PlayerSymbol.X]),
            PlayerSymbol.O: _get_env("O_AGENT_MODEL", default=defaults.models[PlayerSymbol.O]),
        }
        names = {
            PlayerSymbol.X: _get_env("X_AGENT_NAME", default=defaults.names[PlayerSymbol.X]),
            PlayerSymbol.O: _get_env("O_AGENT_NAME", default=defaults.names[PlayerSymbol.O]),
        }

        orchestrator = OrchestratorSettings(
            request_timeout=float(_get_env("AGENT_REQUEST_TIMEOUT", default="30")),
            max_retries=int(_get_env("AGENT_MAX_RETRIES", default="3")),
            backoff_base=float(_get_env("AGENT_BACKOFF_BASE", default="0.5")),
            backoff_factor=float(_get_env("AGENT_BACKOFF_FACTOR", default="2")),
        )

        return cls(
            backend=backend,
            api_key=api_key,
            base_url=_get_env("OPENROUTER_BASE_URL", default=defaults.base_url),
            models=models,
            names=names,
            http_referer=_get_env("OPENROUTER_REFERER", default=defaults.http_referer),
            app_title=_get_env("OPENROUTER_APP_TITLE", default=defaults.app_title),
            orchestrator=orchestrator,
        )
