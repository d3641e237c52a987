from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union

X = "X"
O = "O"

Board = Tuple[Optional[str], ...]

EMPTY_BOARD: Board = (None,) * 9

# Rows, columns, diagonals. Scan order decides which line is reported
# when a board completes more than one.
WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

ONGOING = "ongoing"
WON = "won"
DRAWN = "drawn"


@dataclass(frozen=True)
class Outcome:
    """Derived result of a board: ongoing, won (with mark and line) or drawn."""

    status: str
    winner: Optional[str] = None
    line: Optional[Tuple[int, int, int]] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != ONGOING


# PUBLIC_INTERFACE
def evaluate(board: Board) -> Outcome:
    """Checks the 8 lines in fixed order and returns the board's outcome.

    Any 9-cell configuration is accepted; reachability is not validated.
    """
    for a, b, c in WINNING_LINES:
        if board[a] and board[a] == board[b] == board[c]:
            return Outcome(WON, winner=board[a], line=(a, b, c))
    if all(board):
        return Outcome(DRAWN)
    return Outcome(ONGOING)


@dataclass(frozen=True)
class Players:
    x: str
    o: str

    @property
    def names(self) -> List[str]:
        return [self.x, self.o]

    def name_for(self, mark: str) -> str:
        return self.x if mark == X else self.o


# Effects are returned by transitions and executed by the caller, once.
@dataclass(frozen=True)
class EnsurePlayers:
    names: Tuple[str, ...]


@dataclass(frozen=True)
class FetchStats:
    names: Tuple[str, ...]


@dataclass(frozen=True)
class RecordWin:
    name: str


@dataclass(frozen=True)
class RecordDraw:
    names: Tuple[str, ...]


Effect = Union[EnsurePlayers, FetchStats, RecordWin, RecordDraw]


@dataclass(frozen=True)
class GameState:
    """One game instance plus the session's player identity.

    `recorded` is the latch: it flips to True together with the emission of
    the result effects and only `reset` clears it.
    """

    board: Board = EMPTY_BOARD
    current: str = X
    players: Optional[Players] = None
    recorded: bool = False

    @property
    def outcome(self) -> Outcome:
        return evaluate(self.board)

    @property
    def names_set(self) -> bool:
        return self.players is not None

    @property
    def next_turn(self) -> Optional[str]:
        return None if self.outcome.is_terminal else self.current


# PUBLIC_INTERFACE
def set_players(state: GameState, name_x: str, name_o: str) -> Tuple[GameState, List[Effect]]:
    """Identify both players once. Blank names or a second call are ignored."""
    name_x = (name_x or "").strip()
    name_o = (name_o or "").strip()
    if state.players is not None or not name_x or not name_o:
        return state, []
    players = Players(x=name_x, o=name_o)
    names = tuple(players.names)
    return replace(state, players=players), [EnsurePlayers(names), FetchStats(names)]


# PUBLIC_INTERFACE
def settle(state: GameState) -> Tuple[GameState, List[Effect]]:
    """Emit the result effects if the game just ended and nothing was recorded yet."""
    outcome = state.outcome
    if not outcome.is_terminal or state.recorded or state.players is None:
        return state, []
    names = tuple(state.players.names)
    if outcome.status == WON:
        result: Effect = RecordWin(state.players.name_for(outcome.winner))
    else:
        result = RecordDraw(names)
    return replace(state, recorded=True), [result, FetchStats(names)]


# PUBLIC_INTERFACE
def apply_move(state: GameState, index: int) -> Tuple[GameState, List[Effect]]:
    """Place the current mark at `index`. Invalid attempts leave the state as is."""
    if (
        state.players is None
        or state.outcome.is_terminal
        or not 0 <= index < len(state.board)
        or state.board[index] is not None
    ):
        return state, []
    board = state.board[:index] + (state.current,) + state.board[index + 1:]
    moved = replace(state, board=board, current=O if state.current == X else X)
    return settle(moved)


# PUBLIC_INTERFACE
def reset(state: GameState) -> GameState:
    """Start a new game; player names survive."""
    return GameState(players=state.players)


# PUBLIC_INTERFACE
def playable_cells(state: GameState) -> List[bool]:
    """Which cells accept a move right now."""
    open_for_play = state.names_set and not state.outcome.is_terminal
    return [open_for_play and cell is None for cell in state.board]


# PUBLIC_INTERFACE
def status_text(state: GameState) -> str:
    """Human readable status line: next to move, winner or draw."""
    outcome = state.outcome
    if outcome.status == WON:
        if state.players is not None:
            name = state.players.name_for(outcome.winner)
        else:
            name = f"Player {outcome.winner}"
        return f"Winner: {outcome.winner} ({name})"
    if outcome.status == DRAWN:
        return "Draw!"
    return f"Next: {state.current}"
