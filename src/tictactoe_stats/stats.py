"""
Player stats collaborator: a remote table of name -> {wins, draws}.

Every remote failure is logged and swallowed; callers only ever see empty
results. Increments are a read followed by a write, so concurrent writers on
the same name can lose updates.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError
from supabase import Client, create_client

from .config import AppConfig, Configured
from .models import PlayerStats

logger = logging.getLogger(__name__)


def _clean(names: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for name in names or []:
        if name and name not in seen:
            seen.append(name)
    return seen


def _to_stats(row: Dict[str, Any]) -> PlayerStats:
    return PlayerStats(wins=row.get("wins") or 0, draws=row.get("draws") or 0)


class StatsStore(ABC):
    """Operations the game session needs from a stats backend."""

    available: bool = False

    @abstractmethod
    def ensure_exists(self, names: Iterable[str]) -> List[str]:
        ...

    @abstractmethod
    def fetch_stats(self, names: Iterable[str]) -> Dict[str, PlayerStats]:
        ...

    @abstractmethod
    def increment_win(self, name: str) -> Optional[PlayerStats]:
        ...

    @abstractmethod
    def increment_draws(self, names: Iterable[str]) -> Dict[str, PlayerStats]:
        ...


class DisabledStatsStore(StatsStore):
    """Store used when no endpoint is configured. Every call is a no-op."""

    available = False

    def ensure_exists(self, names: Iterable[str]) -> List[str]:
        return []

    def fetch_stats(self, names: Iterable[str]) -> Dict[str, PlayerStats]:
        return {}

    def increment_win(self, name: str) -> Optional[PlayerStats]:
        return None

    def increment_draws(self, names: Iterable[str]) -> Dict[str, PlayerStats]:
        return {}


class SupabaseStatsStore(StatsStore):
    """Stats table behind a Supabase client created once at startup."""

    available = True

    def __init__(self, client: Client, table: str = "player_stats"):
        self.client = client
        self.table = table

    # PUBLIC_INTERFACE
    def ensure_exists(self, names: Iterable[str]) -> List[str]:
        """Create zero rows for names not in the table yet. Existing counts are kept."""
        rows = [{"name": name, "wins": 0, "draws": 0} for name in _clean(names)]
        if not rows:
            return []
        try:
            self.client.table(self.table).upsert(
                rows, on_conflict="name", ignore_duplicates=True
            ).execute()
        except Exception as e:
            logger.warning("ensure_exists %s: %s", [r["name"] for r in rows], e)
            return []
        return [r["name"] for r in rows]

    # PUBLIC_INTERFACE
    def fetch_stats(self, names: Iterable[str]) -> Dict[str, PlayerStats]:
        """Map of name -> stats. Names missing from the table are missing here too."""
        wanted = _clean(names)
        if not wanted:
            return {}
        try:
            resp = (
                self.client.table(self.table)
                .select("name,wins,draws")
                .in_("name", wanted)
                .execute()
            )
            return {row["name"]: _to_stats(row) for row in resp.data or [] if row.get("name")}
        except ValidationError as e:
            logger.warning("fetch_stats %s: bad row: %s", wanted, e)
            return {}
        except Exception as e:
            logger.warning("fetch_stats %s: %s", wanted, e)
            return {}

    def _increment(self, name: str, column: str) -> Optional[PlayerStats]:
        try:
            current = (
                self.client.table(self.table)
                .select(column)
                .eq("name", name)
                .single()
                .execute()
            )
            value = int((current.data or {}).get(column) or 0) + 1
            resp = (
                self.client.table(self.table)
                .update({column: value})
                .eq("name", name)
                .execute()
            )
            rows = resp.data or []
            if not rows:
                logger.warning("increment %s for %s: no row updated", column, name)
                return None
            return _to_stats(rows[0])
        except ValidationError as e:
            logger.warning("increment %s for %s: bad row: %s", column, name, e)
            return None
        except Exception as e:
            logger.warning("increment %s for %s: %s", column, name, e)
            return None

    # PUBLIC_INTERFACE
    def increment_win(self, name: str) -> Optional[PlayerStats]:
        """Add one win for `name`, creating the row first if needed."""
        if not name:
            return None
        self.ensure_exists([name])
        return self._increment(name, "wins")

    # PUBLIC_INTERFACE
    def increment_draws(self, names: Iterable[str]) -> Dict[str, PlayerStats]:
        """Add one draw for each name. A failure on one name does not stop the others."""
        wanted = _clean(names)
        if not wanted:
            return {}
        self.ensure_exists(wanted)
        updated: Dict[str, PlayerStats] = {}
        for name in wanted:
            stats = self._increment(name, "draws")
            if stats is not None:
                updated[name] = stats
        return updated


# PUBLIC_INTERFACE
def build_stats_store(config: AppConfig) -> StatsStore:
    """Create the store for this process. Unconfigured yields a DisabledStatsStore."""
    store_config = config.store
    if not isinstance(store_config, Configured):
        logger.info("Stats store not configured; stats disabled")
        return DisabledStatsStore()
    try:
        client = create_client(store_config.url, store_config.key)
    except Exception as e:
        logger.warning("Could not create stats client: %s", e)
        return DisabledStatsStore()
    logger.info("Stats store connected (table=%s)", config.stats_table)
    return SupabaseStatsStore(client, table=config.stats_table)
