"""
事件服務：記錄遊戲事件到 EventLog

事件與狀態變更在同一個 transaction 內寫入，
所以被 rollback 的操作不會留下事件。
"""
from typing import List
import logging

from sqlalchemy.orm import Session

from models import EventLog

logger = logging.getLogger(__name__)

GAME_CREATED = "GameCreated"
GAME_FINISHED = "GameFinished"
GAME_SETTLED = "GameSettled"
GAME_CLAIMED = "GameClaimed"
GAME_CANCELED = "GameCanceled"


def record_event(db: Session, game_id: int, event_type: str, data: dict, now: int) -> EventLog:
    """
    新增一筆事件紀錄（不 commit，交由外層 transaction 處理）

    參數：
        db: SQLAlchemy Session
        game_id: 遊戲 ID
        event_type: GameCreated / GameFinished / GameSettled / GameClaimed / GameCanceled
        data: 事件欄位
        now: 目前的邏輯時間
    """
    event = EventLog(
        game_id=game_id,
        event_type=event_type,
        data=data,
        created_at=now
    )
    db.add(event)
    logger.info(f"{event_type} game={game_id} {data}")
    return event


def list_game_events(db: Session, game_id: int) -> List[EventLog]:
    return (
        db.query(EventLog)
        .filter(EventLog.game_id == game_id)
        .order_by(EventLog.id)
        .all()
    )
