import logging
from unittest.mock import MagicMock

import pytest

from tictactoe_stats import stats as stats_module
from tictactoe_stats.config import AppConfig, Configured, Unconfigured
from tictactoe_stats.models import PlayerStats
from tictactoe_stats.session import GameSession
from tictactoe_stats.stats import DisabledStatsStore, StatsStore, SupabaseStatsStore, build_stats_store


@pytest.fixture
def client():
    return MagicMock()


def table(client):
    return client.table.return_value


def test_ensure_exists_upserts_without_overwriting(client):
    store = SupabaseStatsStore(client)
    assert store.ensure_exists(["Alice", "", "Bob", "Alice"]) == ["Alice", "Bob"]
    client.table.assert_called_with("player_stats")
    table(client).upsert.assert_called_once_with(
        [{"name": "Alice", "wins": 0, "draws": 0}, {"name": "Bob", "wins": 0, "draws": 0}],
        on_conflict="name",
        ignore_duplicates=True,
    )


def test_ensure_exists_with_no_names_skips_the_call(client):
    assert SupabaseStatsStore(client).ensure_exists([]) == []
    client.table.assert_not_called()


def test_fetch_stats_maps_rows_and_defaults_nulls(client):
    table(client).select.return_value.in_.return_value.execute.return_value.data = [
        {"name": "Alice", "wins": 2, "draws": None},
    ]
    result = SupabaseStatsStore(client, table="scores").fetch_stats(["Alice", "Bob"])
    client.table.assert_called_with("scores")
    table(client).select.return_value.in_.assert_called_once_with("name", ["Alice", "Bob"])
    assert result == {"Alice": PlayerStats(wins=2, draws=0)}


def test_fetch_stats_failure_is_swallowed(client, caplog):
    table(client).select.return_value.in_.return_value.execute.side_effect = RuntimeError("down")
    with caplog.at_level(logging.WARNING):
        assert SupabaseStatsStore(client).fetch_stats(["Alice"]) == {}
    assert "down" in caplog.text


def test_increment_win_reads_then_writes(client):
    select_chain = table(client).select.return_value.eq.return_value.single.return_value
    select_chain.execute.return_value.data = {"wins": 2}
    table(client).update.return_value.eq.return_value.execute.return_value.data = [
        {"name": "Alice", "wins": 3, "draws": 1},
    ]
    result = SupabaseStatsStore(client).increment_win("Alice")
    table(client).select.assert_called_with("wins")
    table(client).update.assert_called_once_with({"wins": 3})
    table(client).update.return_value.eq.assert_called_once_with("name", "Alice")
    assert result == PlayerStats(wins=3, draws=1)


def test_increment_win_failure_returns_none(client):
    select_chain = table(client).select.return_value.eq.return_value.single.return_value
    select_chain.execute.side_effect = RuntimeError("timeout")
    assert SupabaseStatsStore(client).increment_win("Alice") is None
    table(client).update.assert_not_called()


def test_increment_draws_continues_after_one_failure(client):
    select_chain = table(client).select.return_value.eq.return_value.single.return_value
    select_chain.execute.side_effect = [RuntimeError("boom"), MagicMock(data={"draws": 4})]
    table(client).update.return_value.eq.return_value.execute.return_value.data = [
        {"name": "Bob", "wins": 0, "draws": 5},
    ]
    result = SupabaseStatsStore(client).increment_draws(["Alice", "Bob"])
    assert result == {"Bob": PlayerStats(wins=0, draws=5)}
    table(client).update.assert_called_once_with({"draws": 5})


def test_disabled_store_returns_empty_results():
    store = DisabledStatsStore()
    assert store.available is False
    assert store.ensure_exists(["Alice"]) == []
    assert store.fetch_stats(["Alice"]) == {}
    assert store.increment_win("Alice") is None
    assert store.increment_draws(["Alice", "Bob"]) == {}


def test_build_stats_store_unconfigured():
    assert isinstance(build_stats_store(AppConfig(store=Unconfigured())), DisabledStatsStore)
    assert not isinstance(build_stats_store(AppConfig()), SupabaseStatsStore)


def test_build_stats_store_configured(monkeypatch):
    created = []

    def fake_create_client(url, key):
        created.append((url, key))
        return MagicMock()

    monkeypatch.setattr(stats_module, "create_client", fake_create_client)
    config = AppConfig(store=Configured(url="https://db.example", key="k"), stats_table="scores")
    store = build_stats_store(config)
    assert isinstance(store, SupabaseStatsStore)
    assert store.table == "scores"
    assert created == [("https://db.example", "k")]


def test_build_stats_store_degrades_when_client_fails(monkeypatch):
    def broken(url, key):
        raise ValueError("Invalid URL")

    monkeypatch.setattr(stats_module, "create_client", broken)
    store = build_stats_store(AppConfig(store=Configured(url="nope", key="k")))
    assert store.available is False


def call_names(client):
    return [c[0] for c in client.mock_calls]


def test_ensure_exists_failure_is_swallowed(client, caplog):
    table(client).upsert.return_value.execute.side_effect = RuntimeError("refused")
    with caplog.at_level(logging.WARNING):
        assert SupabaseStatsStore(client).ensure_exists(["Alice"]) == []
    assert "refused" in caplog.text


def test_increment_win_ensures_row_before_reading(client):
    select_chain = table(client).select.return_value.eq.return_value.single.return_value
    select_chain.execute.return_value.data = {"wins": 0}
    table(client).update.return_value.eq.return_value.execute.return_value.data = [
        {"name": "Alice", "wins": 1, "draws": 0},
    ]
    SupabaseStatsStore(client).increment_win("Alice")
    names = call_names(client)
    assert names.index("table().upsert") < names.index("table().select")
    table(client).upsert.assert_called_once_with(
        [{"name": "Alice", "wins": 0, "draws": 0}], on_conflict="name", ignore_duplicates=True
    )


def test_increment_draws_ensures_rows_before_reading(client):
    select_chain = table(client).select.return_value.eq.return_value.single.return_value
    select_chain.execute.return_value.data = {"draws": 0}
    table(client).update.return_value.eq.return_value.execute.return_value.data = [
        {"name": "Alice", "wins": 0, "draws": 1},
    ]
    SupabaseStatsStore(client).increment_draws(["Alice", "Bob"])
    names = call_names(client)
    assert names.index("table().upsert") < names.index("table().select")


def test_fetch_stats_bad_row_is_swallowed(client, caplog):
    table(client).select.return_value.in_.return_value.execute.return_value.data = [
        {"name": "Alice", "wins": -1, "draws": 0},
    ]
    with caplog.at_level(logging.WARNING):
        assert SupabaseStatsStore(client).fetch_stats(["Alice", "Bob"]) == {}
    assert "bad row" in caplog.text


def test_increment_win_bad_row_returns_none(client):
    select_chain = table(client).select.return_value.eq.return_value.single.return_value
    select_chain.execute.return_value.data = {"wins": 2}
    table(client).update.return_value.eq.return_value.execute.return_value.data = [
        {"name": "Alice", "wins": "lots", "draws": 0},
    ]
    assert SupabaseStatsStore(client).increment_win("Alice") is None


def test_session_survives_bad_remote_rows(client):
    table(client).select.return_value.in_.return_value.execute.return_value.data = [
        {"name": "Alice", "wins": -1, "draws": 0},
    ]
    session = GameSession(SupabaseStatsStore(client))
    state = session.set_players("Alice", "Bob")
    assert state.names_set
    assert session.player_stats() == {"Alice": PlayerStats(), "Bob": PlayerStats()}


def test_stats_store_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        StatsStore()
