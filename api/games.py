"""
Game API Endpoints

重點：
1. 所有業務邏輯集中在 GameRegistry，這裡只做轉換
2. 業務異常依類型對應到 HTTP status（見 api.dependencies.ERROR_STATUS）
3. 呼叫者身分來自 X-Caller header
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

import logging

from database import get_db
from schemas import (
    GameCreate,
    GameJoin,
    GameSettle,
    GameResponse,
    NextGameIdResponse,
    EventResponse
)
from core.engine import RpsEngine
from core.exceptions import RpsGameException
from api.dependencies import get_caller, get_engine, to_http_exception

router = APIRouter(prefix="/api/games", tags=["games"])
logger = logging.getLogger(__name__)


@router.post("", response_model=GameResponse, status_code=201)
def create_game(
    game_data: GameCreate,
    caller: str = Depends(get_caller),
    engine: RpsEngine = Depends(get_engine),
    db: Session = Depends(get_db)
):
    """
    建立遊戲

    參數：
        commitment: keccak256(uint256 value) 的 hex 字串
        wager: 賭注
    """
    try:
        game = engine.registry.create_game(
            db, caller, game_data.commitment_bytes, game_data.wager
        )
        return GameResponse.from_game(game)

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("", response_model=List[GameResponse])
def list_games(
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    engine: RpsEngine = Depends(get_engine),
    db: Session = Depends(get_db)
):
    games = engine.registry.list_games(db, offset=offset, limit=limit)
    return [GameResponse.from_game(game) for game in games]


@router.get("/next-id", response_model=NextGameIdResponse)
def get_next_game_id(engine: RpsEngine = Depends(get_engine), db: Session = Depends(get_db)):
    return NextGameIdResponse(next_id=engine.registry.next_game_id(db))


@router.get("/{game_id}", response_model=GameResponse)
def get_game(game_id: int, engine: RpsEngine = Depends(get_engine), db: Session = Depends(get_db)):
    try:
        return GameResponse.from_game(engine.registry.get_game(db, game_id))
    except RpsGameException as e:
        raise to_http_exception(e)


@router.get("/{game_id}/events", response_model=List[EventResponse])
def get_game_events(game_id: int, engine: RpsEngine = Depends(get_engine), db: Session = Depends(get_db)):
    try:
        events = engine.registry.list_events(db, game_id)
        return [EventResponse.model_validate(event) for event in events]
    except RpsGameException as e:
        raise to_http_exception(e)


@router.post("/{game_id}/join", response_model=GameResponse)
def join_game(
    game_id: int,
    join_data: GameJoin,
    caller: str = Depends(get_caller),
    engine: RpsEngine = Depends(get_engine),
    db: Session = Depends(get_db)
):
    """
    加入遊戲（taker 出拳並下注）
    """
    try:
        game = engine.registry.join_game(db, caller, game_id, join_data.play)
        return GameResponse.from_game(game)

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to join game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/cancel", response_model=GameResponse)
def cancel_game(
    game_id: int,
    caller: str = Depends(get_caller),
    engine: RpsEngine = Depends(get_engine),
    db: Session = Depends(get_db)
):
    try:
        game = engine.registry.cancel_game(db, caller, game_id)
        return GameResponse.from_game(game)

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to cancel game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/settle", response_model=GameResponse)
def settle_game(
    game_id: int,
    settle_data: GameSettle,
    caller: str = Depends(get_caller),
    engine: RpsEngine = Depends(get_engine),
    db: Session = Depends(get_db)
):
    """
    Maker 公開原值並結算
    """
    try:
        game = engine.registry.settle_game(db, caller, game_id, settle_data.value)
        return GameResponse.from_game(game)

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to settle game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/claim", response_model=GameResponse)
def claim_game(
    game_id: int,
    caller: str = Depends(get_caller),
    engine: RpsEngine = Depends(get_engine),
    db: Session = Depends(get_db)
):
    """
    Maker 逾時未結算時，taker 取走彩池
    """
    try:
        game = engine.registry.claim_game(db, caller, game_id)
        return GameResponse.from_game(game)

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to claim game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
