from __future__ import annotations

import os
from dataclasses import fields

from src.domain.models import PlannerSettings


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str) -> int | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_list(name: str) -> tuple[str, ...] | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def reveal_errors() -> bool:
    return _env_bool("PLANNER_REVEAL_ERRORS", False)


def planner_settings_from_env() -> PlannerSettings:
    """PlannerSettings with overrides from PLANNER_* env vars.

    Each field maps to PLANNER_<FIELD NAME>, e.g. PLANNER_CACHE_CAPACITY=200,
    PLANNER_INITIAL_LINES=470,473 or PLANNER_SEARCH_SCOPE=all. Unset vars
    keep the defaults.
    """

    overrides: dict[str, object] = {}
    for f in fields(PlannerSettings):
        env_name = f"PLANNER_{f.name.upper()}"
        default = f.default
        if isinstance(default, tuple):
            values = _env_list(env_name)
            if values is not None:
                overrides[f.name] = values
        elif isinstance(default, int):
            value = _env_int(env_name)
            if value is not None:
                overrides[f.name] = value
        else:
            raw = (os.getenv(env_name) or "").strip()
            if raw:
                overrides[f.name] = raw

    return PlannerSettings(**overrides)  # type: ignore[arg-type]
