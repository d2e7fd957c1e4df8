"""Runtime provider snapshot helpers."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


def is_enabled(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _is_configured(value: str | None) -> bool:
    return bool(value and value.strip())


def resolve_map_provider() -> str:
    return "amap" if _is_configured(os.getenv("AMAP_API_KEY")) else "disabled"


def resolve_llm_provider() -> str:
    if _is_configured(os.getenv("DASHSCOPE_API_KEY")):
        return "dashscope"
    if _is_configured(os.getenv("OPENAI_API_KEY")):
        return "openai"
    if _is_configured(os.getenv("LLM_API_KEY")):
        return "llm_compatible"
    return "heuristic"


class ProviderSnapshot(BaseModel):
    llm_provider: str = Field(default="heuristic")
    map_provider: str = Field(default="disabled")
    expense_llm_enabled: bool = Field(default=True)
    trip_llm_enabled: bool = Field(default=True)
    persistence_enabled: bool = Field(default=True)


def resolve_provider_snapshot() -> ProviderSnapshot:
    return ProviderSnapshot(
        llm_provider=resolve_llm_provider(),
        map_provider=resolve_map_provider(),
        expense_llm_enabled=is_enabled("EXPENSE_LLM_ENABLED", default=True),
        trip_llm_enabled=is_enabled("TRIP_LLM_ENABLED", default=True),
        persistence_enabled=is_enabled("TRAVEL_PERSISTENCE_ENABLED", default=True),
    )


__all__ = [
    "ProviderSnapshot",
    "is_enabled",
    "resolve_provider_snapshot",
]
