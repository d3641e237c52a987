from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional


# PUBLIC_INTERFACE
class PlayerStats(BaseModel):
    """Win/draw counters for one player, as held by the stats table."""
    wins: int = Field(0, ge=0, description="Games won.")
    draws: int = Field(0, ge=0, description="Games drawn.")


# PUBLIC_INTERFACE
class PlayersRequest(BaseModel):
    """Request model for naming both players before the first move."""
    player_x: str = Field(..., description="Display name for the X side.")
    player_o: str = Field(..., description="Display name for the O side.")


# PUBLIC_INTERFACE
class MoveRequest(BaseModel):
    """Request model for making a move."""
    index: int = Field(..., ge=0, le=8, description="Cell index, row-major (0-8).")


# PUBLIC_INTERFACE
class GameStateResponse(BaseModel):
    """Current board, derived outcome and the players' stats."""
    board: List[Optional[Literal["X", "O"]]]
    status: Literal["ongoing", "won", "drawn"]
    status_text: str
    next_turn: Optional[Literal["X", "O"]] = None
    winner: Optional[Literal["X", "O"]] = None
    winning_line: Optional[List[int]] = None
    player_x: Optional[str] = None
    player_o: Optional[str] = None
    names_set: bool
    playable: List[bool]
    stats: Dict[str, PlayerStats] = Field(default_factory=dict)
    stats_enabled: bool
    stats_status: str


# PUBLIC_INTERFACE
class StatsResponse(BaseModel):
    """Stats for the identified players; zeros for names not fetched yet."""
    stats_enabled: bool
    stats_status: str
    players: Dict[str, PlayerStats]
