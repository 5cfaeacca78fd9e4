"""
Balance API Endpoints

職責：
1. 查詢帳號在 engine 內的可用餘額
2. 提領全部餘額到外部 token ledger
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import BalanceResponse, WithdrawResponse
from core.engine import RpsEngine
from core.exceptions import RpsGameException
from api.dependencies import get_caller, get_engine, to_http_exception

router = APIRouter(prefix="/api/balances", tags=["balances"])
logger = logging.getLogger(__name__)


@router.get("/{account}", response_model=BalanceResponse)
def get_balance(account: str, engine: RpsEngine = Depends(get_engine), db: Session = Depends(get_db)):
    return BalanceResponse(account=account, available=engine.escrow.balance_of(db, account))


@router.post("/withdraw", response_model=WithdrawResponse)
def withdraw(
    caller: str = Depends(get_caller),
    engine: RpsEngine = Depends(get_engine),
    db: Session = Depends(get_db)
):
    """
    提領全部內部餘額

    外部轉帳失敗時返回 402，餘額維持不變
    """
    try:
        amount = engine.escrow.withdraw(db, caller)
        return WithdrawResponse(account=caller, amount=amount)

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to withdraw for {caller}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
