"""
資料模型

- Game：一場兩人猜拳賭局（id 從 0 開始遞增）
- Balance：每個帳號在 engine 內的可用餘額
- GameCounter：下一個 game id
- EventLog：遊戲事件紀錄（GameCreated / GameFinished / ...）
"""
import enum
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Integer,
    JSON,
    LargeBinary,
    Numeric,
    String,
)
from sqlalchemy.types import TypeDecorator

from database import Base

UINT256_MAX = 2 ** 256 - 1
# 賭注上限：確保 2 * wager 的彩池仍然是 uint256
MAX_WAGER = UINT256_MAX // 2


class Amount(TypeDecorator):
    """
    uint256 金額欄位

    - PostgreSQL：NUMERIC(78, 0)
    - 其他資料庫（SQLite）：十進位字串，避免超過 64-bit 時變成 REAL 失去精度

    寫入時檢查範圍，讀出一律是 Python int
    """
    impl = Numeric(78, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(78, 0))
        return dialect.type_descriptor(String(78))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if not 0 <= value <= UINT256_MAX:
            raise ValueError(f"Amount {value} is outside the uint256 range")
        if dialect.name == "postgresql":
            return Decimal(value)
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


class Play(enum.IntEnum):
    ROCK = 0
    PAPER = 1
    SCISSORS = 2


class GameStatus(str, enum.Enum):
    OPEN = "OPEN"
    AWAITING_SETTLEMENT = "AWAITING_SETTLEMENT"
    SETTLED = "SETTLED"


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=False)
    maker = Column(String(128), nullable=False, index=True)
    taker = Column(String(128), nullable=True, index=True)  # None 表示尚無 taker
    wager = Column(Amount, nullable=False)
    created_at = Column(BigInteger, nullable=False)
    maker_commitment = Column(LargeBinary(32), nullable=False)
    # 原樣儲存，不做 0..2 範圍檢查
    taker_play = Column(Integer, nullable=False, default=0)
    finished = Column(Boolean, nullable=False, default=False)
    settled = Column(Boolean, nullable=False, default=False)

    @property
    def status(self) -> GameStatus:
        if self.settled:
            return GameStatus.SETTLED
        if self.finished:
            return GameStatus.AWAITING_SETTLEMENT
        return GameStatus.OPEN


class Balance(Base):
    __tablename__ = "balances"

    account = Column(String(128), primary_key=True)
    available = Column(Amount, nullable=False, default=0)


class GameCounter(Base):
    __tablename__ = "game_counters"

    id = Column(Integer, primary_key=True)
    next_id = Column(Integer, nullable=False, default=0)


class EventLog(Base):
    __tablename__ = "event_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(Integer, nullable=False, index=True)
    event_type = Column(String(32), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(BigInteger, nullable=False)
