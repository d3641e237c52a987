"""
Game session: the single place where transitions meet the stats store.

Intents are serialized with a lock. Each transition's effects are executed
in order, inside the lock, right after the new state is stored, so the
record latch is already set when the write goes out.
"""
import logging
import threading
from typing import Dict, Iterable, Optional

from . import core
from .core import EnsurePlayers, FetchStats, GameState, RecordDraw, RecordWin
from .models import PlayerStats
from .stats import DisabledStatsStore, StatsStore

logger = logging.getLogger(__name__)


class GameSession:
    def __init__(self, store: Optional[StatsStore] = None):
        self.store = store if store is not None else DisabledStatsStore()
        self.state = GameState()
        self.stats: Dict[str, PlayerStats] = {}
        self._lock = threading.Lock()

    @property
    def stats_enabled(self) -> bool:
        return bool(self.store.available)

    # PUBLIC_INTERFACE
    def set_players(self, name_x: str, name_o: str) -> GameState:
        """Name both players; ensures their rows exist and loads their stats."""
        with self._lock:
            state, effects = core.set_players(self.state, name_x, name_o)
            if state is self.state:
                logger.debug("Player names rejected: %r / %r", name_x, name_o)
                return state
            logger.info("Players set: X=%s O=%s", state.players.x, state.players.o)
            self.state = state
            self._run(effects)
            return self.state

    # PUBLIC_INTERFACE
    def move(self, index: int) -> GameState:
        """Play the current mark at `index`; records the result when the game ends."""
        with self._lock:
            state, effects = core.apply_move(self.state, index)
            if state is self.state:
                logger.debug("Ignored move at %s", index)
                return state
            self.state = state
            self._run(effects)
            return self.state

    # PUBLIC_INTERFACE
    def refresh(self) -> GameState:
        """Re-evaluate the outcome. Never records the same game twice."""
        with self._lock:
            self.state, effects = core.settle(self.state)
            self._run(effects)
            return self.state

    # PUBLIC_INTERFACE
    def reset(self) -> GameState:
        """New game with the same players and cached stats."""
        with self._lock:
            self.state = core.reset(self.state)
            return self.state

    def player_stats(self) -> Dict[str, PlayerStats]:
        """Cached stats for the current players, zeros where nothing was fetched."""
        players = self.state.players
        if players is None:
            return {}
        return {name: self.stats.get(name, PlayerStats()) for name in players.names}

    def _run(self, effects: Iterable[core.Effect]) -> None:
        for effect in effects:
            if isinstance(effect, EnsurePlayers):
                self.store.ensure_exists(list(effect.names))
            elif isinstance(effect, FetchStats):
                self.stats = self.store.fetch_stats(list(effect.names))
            elif isinstance(effect, RecordWin):
                logger.info("Recording win for %s", effect.name)
                self.store.increment_win(effect.name)
            elif isinstance(effect, RecordDraw):
                logger.info("Recording draw for %s", ", ".join(effect.names))
                self.store.increment_draws(list(effect.names))
            else:
                raise TypeError(f"Unknown effect: {effect!r}")
