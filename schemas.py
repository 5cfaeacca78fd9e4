"""
API request / response schemas
"""
from typing import Any, Dict, Optional

from eth_utils import decode_hex, encode_hex
from pydantic import BaseModel, Field, field_validator

from models import MAX_WAGER, UINT256_MAX, Game, GameStatus, Play


class GameCreate(BaseModel):
    commitment: str = Field(..., description="0x-prefixed keccak256 hash of the hidden value")
    wager: int = Field(..., ge=0, le=MAX_WAGER)

    @field_validator("commitment")
    @classmethod
    def commitment_is_hex(cls, value: str) -> str:
        try:
            decode_hex(value)
        except ValueError:
            raise ValueError("commitment must be a hex string")
        return value

    @property
    def commitment_bytes(self) -> bytes:
        return decode_hex(self.commitment)


class GameJoin(BaseModel):
    # 引擎本身不檢查範圍，API 這一層只接受三種拳
    play: Play


class GameSettle(BaseModel):
    value: int = Field(..., ge=0, le=UINT256_MAX)


class GameResponse(BaseModel):
    id: int
    maker: str
    taker: Optional[str]
    wager: int
    created_at: int
    maker_commitment: str
    taker_play: int
    finished: bool
    settled: bool
    status: GameStatus

    @classmethod
    def from_game(cls, game: Game) -> "GameResponse":
        return cls(
            id=game.id,
            maker=game.maker,
            taker=game.taker,
            wager=game.wager,
            created_at=game.created_at,
            maker_commitment=encode_hex(game.maker_commitment),
            taker_play=game.taker_play,
            finished=game.finished,
            settled=game.settled,
            status=game.status
        )


class NextGameIdResponse(BaseModel):
    next_id: int


class EventResponse(BaseModel):
    id: int
    game_id: int
    event_type: str
    data: Dict[str, Any]
    created_at: int

    model_config = {"from_attributes": True}


class BalanceResponse(BaseModel):
    account: str
    available: int


class WithdrawResponse(BaseModel):
    account: str
    amount: int
