"""Application configuration read from the environment."""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Union

DEFAULT_STATS_TABLE = "player_stats"


@dataclass(frozen=True)
class Configured:
    """Remote stats store endpoint and access key are both present."""

    url: str
    key: str


@dataclass(frozen=True)
class Unconfigured:
    """Stats store is disabled; local play is unaffected."""


StoreConfig = Union[Configured, Unconfigured]


def _log_level(value: str) -> str:
    level = value.strip().upper()
    # getLevelName maps known names to ints and anything else to "Level <name>".
    if level and isinstance(logging.getLevelName(level), int):
        return level
    return "INFO"


@dataclass(frozen=True)
class AppConfig:
    store: StoreConfig = field(default_factory=Unconfigured)
    stats_table: str = DEFAULT_STATS_TABLE
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


# PUBLIC_INTERFACE
def load_store_config(environ: Optional[Mapping[str, str]] = None) -> StoreConfig:
    """Return Configured only when both SUPABASE_URL and SUPABASE_KEY are non-blank."""
    env = os.environ if environ is None else environ
    url = env.get("SUPABASE_URL", "").strip()
    key = env.get("SUPABASE_KEY", "").strip()
    if url and key:
        return Configured(url=url, key=key)
    return Unconfigured()


# PUBLIC_INTERFACE
def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Read the whole application configuration once, at startup."""
    env = os.environ if environ is None else environ
    origins = [o.strip() for o in env.get("ALLOWED_ORIGINS", "*").split(",") if o.strip()]
    return AppConfig(
        store=load_store_config(env),
        stats_table=env.get("STATS_TABLE", "").strip() or DEFAULT_STATS_TABLE,
        allowed_origins=origins or ["*"],
        log_level=_log_level(env.get("LOG_LEVEL", "")),
    )
