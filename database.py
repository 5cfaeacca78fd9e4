from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
import logging

from core.exceptions import RpsGameException

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./rps_escrow.db"
    # 超過此秒數後 taker 可以 claim 整個彩池（以建立時間起算）
    claim_timeout_sec: int = 60 * 60
    # Engine 在外部 token ledger 上的託管帳號
    custody_account: str = "rps-escrow"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

# SQLite 需要特殊設定：connect_args={"check_same_thread": False}
# 這允許多執行緒存取同一個 SQLite 連線（FastAPI 的多執行緒環境需要）
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=True
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency：提供 Database Session

    使用 yield 確保 session 在請求結束後會被關閉
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Transaction decorator：確保每個遊戲操作「全有或全無」

    使用方式：
        @transactional
        def create_game(self, db: Session, ...):
            game = Game(...)
            db.add(game)
            # 不需要手動 commit，decorator 會處理

    如果函式內發生異常：
        - 自動 rollback（包含外部轉帳失敗的 TransferFailed）
        - 異常會被重新拋出（讓上層處理）

    注意：
        - 參數中必須有一個 db: Session（可以在 self 之後）
        - 不要在函式內手動 commit（decorator 會處理）
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        # 找出 db session（可能在 args 或 kwargs）
        db = kwargs.get('db')
        if db is None:
            db = next((arg for arg in args if isinstance(arg, Session)), None)

        if db is None:
            raise ValueError(
                f"@transactional requires a 'db: Session' argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except RpsGameException as e:
            # 業務規則拒絕，屬於正常流程
            logger.warning(f"{func.__name__} rejected: {type(e).__name__}: {e}")
            db.rollback()
            raise
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
