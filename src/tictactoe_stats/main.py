import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import AppConfig, load_config
from .core import GameState, playable_cells, status_text
from .models import GameStateResponse, MoveRequest, PlayersRequest, StatsResponse
from .session import GameSession
from .stats import StatsStore, build_stats_store

logger = logging.getLogger(__name__)


def _stats_status(session: GameSession) -> str:
    return "Supabase env loaded" if session.stats_enabled else "Supabase env not set"


def _session(request: Request) -> GameSession:
    return request.app.state.session


def _game_response(session: GameSession, state: GameState) -> GameStateResponse:
    outcome = state.outcome
    players = state.players
    return GameStateResponse(
        board=list(state.board),
        status=outcome.status,
        status_text=status_text(state),
        next_turn=state.next_turn,
        winner=outcome.winner,
        winning_line=list(outcome.line) if outcome.line else None,
        player_x=players.x if players else None,
        player_o=players.o if players else None,
        names_set=state.names_set,
        playable=playable_cells(state),
        stats=session.player_stats(),
        stats_enabled=session.stats_enabled,
        stats_status=_stats_status(session),
    )


# PUBLIC_INTERFACE
def create_app(config: Optional[AppConfig] = None, store: Optional[StatsStore] = None) -> FastAPI:
    """Build the application. The stats store is created here once and injected into the session.

    Args:
        config: Application config; read from the environment when omitted.
        store: Stats store to use instead of the one built from `config`.
    Returns:
        FastAPI: The configured application.
    """
    config = config or load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if store is None:
        store = build_stats_store(config)

    app = FastAPI(
        title="Tic Tac Toe API",
        description="Two-player Tic Tac Toe with per-player win/draw stats.",
        version="0.2.0",
        openapi_tags=[
            {"name": "game", "description": "Name players, play moves, reset"},
            {"name": "stats", "description": "Per-player win/draw statistics"},
        ],
    )
    app.state.session = GameSession(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", tags=["health"])
    def health_check():
        """Health check route for backend"""
        return {"message": "Healthy"}

    # PUBLIC_INTERFACE
    @app.get("/game", response_model=GameStateResponse, tags=["game"], summary="Get current game state")
    def get_game(request: Request):
        """Board, outcome, status line and the players' cached stats."""
        session = _session(request)
        return _game_response(session, session.refresh())

    # PUBLIC_INTERFACE
    @app.post("/players", response_model=GameStateResponse, tags=["game"], summary="Set player names")
    def set_players(body: PlayersRequest, request: Request):
        """Name both players. Required before the first move; names are fixed afterwards.

        Blank names are not an error: the game simply stays locked (`names_set` false).
        """
        session = _session(request)
        return _game_response(session, session.set_players(body.player_x, body.player_o))

    # PUBLIC_INTERFACE
    @app.post("/move", response_model=GameStateResponse, tags=["game"], summary="Make a move")
    def make_move(body: MoveRequest, request: Request):
        """Play the next mark. Moves on occupied cells, after the game ended or
        before players are named are ignored and the state is returned unchanged."""
        session = _session(request)
        return _game_response(session, session.move(body.index))

    # PUBLIC_INTERFACE
    @app.post("/reset", response_model=GameStateResponse, tags=["game"], summary="Start a new game")
    def reset_game(request: Request):
        """Clear the board; X moves first. Player names and stats are kept."""
        session = _session(request)
        return _game_response(session, session.reset())

    # PUBLIC_INTERFACE
    @app.get("/stats", response_model=StatsResponse, tags=["stats"], summary="Get player stats")
    def get_stats(request: Request):
        """Cached win/draw counts for the current players."""
        session = _session(request)
        return StatsResponse(
            stats_enabled=session.stats_enabled,
            stats_status=_stats_status(session),
            players=session.player_stats(),
        )

    return app


app = create_app()
