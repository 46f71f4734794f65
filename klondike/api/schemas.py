"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a client (browser table,
terminal, test harness) and the engine. Column and pile indices are
range-checked here so out-of-range values never reach the reducer.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- VALIDATION_ERROR: Request body failed validation
- STATE_LOAD_DISABLED: Whole-state replacement is switched off
- INVALID_STATE: A loaded state breaks the card invariants
- INTERNAL_ERROR: Unexpected server error
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field, RootModel, model_validator


TableauColumn = Annotated[int, Field(ge=0, le=6, description="Tableau column (0-6)")]
FoundationPile = Annotated[int, Field(ge=0, le=3, description="Foundation pile (0-3)")]
DrawCount = Literal[1, 3]


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STATE_LOAD_DISABLED = "STATE_LOAD_DISABLED"
    INVALID_STATE = "INVALID_STATE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardModel(BaseModel):
    """A single card."""
    suit: Literal["spades", "hearts", "diamonds", "clubs"]
    rank: int = Field(ge=1, le=13, description="1 = Ace ... 13 = King")
    face_up: bool = False
    label: Optional[str] = Field(default=None, description="Display label, e.g. 'Q♥'")


class SelectionModel(BaseModel):
    """The picked-up cards: a suffix of one pile."""
    source: Literal["waste", "tableau", "foundation"]
    card_index: int = Field(ge=0)
    column: Optional[TableauColumn] = None
    pile_index: Optional[FoundationPile] = None

    @model_validator(mode="after")
    def check_location(self):
        if self.source == "tableau" and self.column is None:
            raise ValueError("tableau selection requires column")
        if self.source == "foundation" and self.pile_index is None:
            raise ValueError("foundation selection requires pile_index")
        return self


class GameStateModel(BaseModel):
    """Complete game state as the client renders it."""
    stock: list[CardModel] = Field(default_factory=list)
    waste: list[CardModel] = Field(default_factory=list)
    foundations: list[list[CardModel]] = Field(min_length=4, max_length=4)
    tableau: list[list[CardModel]] = Field(min_length=7, max_length=7)
    selection: Optional[SelectionModel] = None
    status: Literal["idle", "playing", "won"] = "idle"
    moves: int = Field(default=0, ge=0)
    elapsed_seconds: int = Field(default=0, ge=0)
    draw_count: DrawCount = 1


# =============================================================================
# Actions (discriminated on "type")
# =============================================================================

class NewGameAction(BaseModel):
    type: Literal["new_game"] = "new_game"


class SetDrawCountAction(BaseModel):
    type: Literal["set_draw_count"] = "set_draw_count"
    count: DrawCount


class TickAction(BaseModel):
    type: Literal["tick"] = "tick"


class ClickStockAction(BaseModel):
    type: Literal["click_stock"] = "click_stock"


class ClickWasteAction(BaseModel):
    type: Literal["click_waste"] = "click_waste"


class ClickTableauAction(BaseModel):
    type: Literal["click_tableau"] = "click_tableau"
    column: TableauColumn
    card_index: int = Field(ge=0, description="Index in the column; past the end means the empty slot")


class ClickFoundationAction(BaseModel):
    type: Literal["click_foundation"] = "click_foundation"
    pile_index: FoundationPile


class AutoMoveAction(BaseModel):
    type: Literal["auto_move_to_foundation"] = "auto_move_to_foundation"
    source: SelectionModel


ActionRequest = Annotated[
    Union[
        NewGameAction,
        SetDrawCountAction,
        TickAction,
        ClickStockAction,
        ClickWasteAction,
        ClickTableauAction,
        ClickFoundationAction,
        AutoMoveAction,
    ],
    Field(discriminator="type"),
]


class ActionBody(RootModel[ActionRequest]):
    """Request body for POST /actions: one action, tagged by "type"."""


# =============================================================================
# Requests
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    draw_count: DrawCount = 1
    seed: Optional[int] = Field(default=None, description="Seed for reproducible deals")


class LoadStateRequest(BaseModel):
    """Replace a session's state verbatim (test harness only)."""
    state: GameStateModel


# =============================================================================
# Responses
# =============================================================================

class SessionResponse(BaseModel):
    """Session status plus the current state."""
    session_id: str
    status: SessionStatus
    created_at: float
    seed: Optional[int] = None
    state: GameStateModel


class GameStateResponse(BaseModel):
    """State returned after reading or changing a session."""
    session_id: str
    state: GameStateModel
    changed: bool = Field(default=False, description="False when the action was a no-op")
    visible_waste: list[CardModel] = Field(default_factory=list)
    is_won: bool = False


class SessionListResponse(BaseModel):
    """List of active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response when a session is ended."""
    session_id: str
    ended: bool


class HealthResponse(BaseModel):
    """Health check response."""
    status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
    version: str
    environment: str
    active_sessions: int = 0


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None
