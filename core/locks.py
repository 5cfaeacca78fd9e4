"""
並發控制工具

提供 Database-level 的鎖定機制，防止競態條件（Race Condition）

主要使用 SELECT ... FOR UPDATE 來實現悲觀鎖（Pessimistic Locking）：
- 同一場遊戲的 join / cancel / settle / claim 互斥
- 同一個帳號的餘額扣款 / 入帳 / 提款互斥
- 分配 game id 時鎖定計數器，確保 id 嚴格遞增

FOR UPDATE 鎖不到還不存在的 row，所以 Balance 和 GameCounter
先用 INSERT ... ON CONFLICT DO NOTHING 確保 row 存在，再上鎖。
"""
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, Query

from models import Game, Balance, GameCounter

COUNTER_ID = 1


def _insert_if_missing(db: Session, model, index_elements: list[str], **values) -> None:
    """
    若 row 不存在就建立；已存在（包含被其他 transaction 同時建立）則不做任何事

    支援 PostgreSQL 與 SQLite
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        insert = postgresql.insert
    elif dialect == "sqlite":
        insert = sqlite.insert
    else:
        raise NotImplementedError(f"Row upsert is not supported on {dialect}")

    stmt = insert(model).values(**values).on_conflict_do_nothing(
        index_elements=index_elements
    )
    db.execute(stmt)


def with_game_lock(game_id: int, db: Session) -> Query:
    """
    鎖定一個 Game（行級鎖）

    範例：
        game = with_game_lock(game_id, db).first()
        if not game:
            raise UnknownGame(game_id)

    注意：
        - nowait=False 表示如果鎖被佔用，會等待
        - 必須在 transaction 內使用（確保有 commit 或 rollback）
    """
    return db.query(Game).filter(
        Game.id == game_id
    ).with_for_update(nowait=False)


def with_balance_lock(account: str, db: Session) -> Query:
    """鎖定一個帳號的 Balance（行級鎖）"""
    return db.query(Balance).filter(
        Balance.account == account
    ).with_for_update(nowait=False)


def lock_or_create_balance(account: str, db: Session) -> Balance:
    """
    取得並鎖定帳號的 Balance，沒有的話先建立（available = 0）

    兩個 transaction 同時替新帳號入帳時，只有一個會真的 INSERT，
    另一個在 FOR UPDATE 上等待，不會出現 IntegrityError
    """
    _insert_if_missing(db, Balance, ["account"], account=account, available=0)
    return with_balance_lock(account, db).one()


def with_counter_lock(db: Session) -> Query:
    """鎖定 game id 計數器"""
    return db.query(GameCounter).filter(
        GameCounter.id == COUNTER_ID
    ).with_for_update(nowait=False)


def lock_or_create_counter(db: Session) -> GameCounter:
    """取得並鎖定 game id 計數器，第一次使用時從 0 開始"""
    _insert_if_missing(db, GameCounter, ["id"], id=COUNTER_ID, next_id=0)
    return with_counter_lock(db).one()
