import pytest

from tictactoe_stats.models import PlayerStats
from tictactoe_stats.stats import StatsStore


class RecordingStore(StatsStore):
    """In-memory stats table that remembers every call made to it."""

    available = True

    def __init__(self):
        self.rows = {}
        self.calls = []

    def ensure_exists(self, names):
        self.calls.append(("ensure_exists", list(names)))
        for name in names:
            self.rows.setdefault(name, {"wins": 0, "draws": 0})
        return list(names)

    def fetch_stats(self, names):
        self.calls.append(("fetch_stats", list(names)))
        return {n: PlayerStats(**self.rows[n]) for n in names if n in self.rows}

    def increment_win(self, name):
        self.calls.append(("increment_win", name))
        row = self.rows.setdefault(name, {"wins": 0, "draws": 0})
        row["wins"] += 1
        return PlayerStats(**row)

    def increment_draws(self, names):
        self.calls.append(("increment_draws", list(names)))
        out = {}
        for name in names:
            row = self.rows.setdefault(name, {"wins": 0, "draws": 0})
            row["draws"] += 1
            out[name] = PlayerStats(**row)
        return out

    def count(self, op):
        return len([c for c in self.calls if c[0] == op])


@pytest.fixture
def store():
    return RecordingStore()
