"""
Escrow Ledger：管理每個帳號在 engine 內的可用餘額

職責：
1. 下注時優先扣內部餘額，不足的部分才向外部 ledger 轉入
2. 結算 / 取消 / claim 時入帳到內部餘額（不碰外部 ledger）
3. 提款時把內部餘額整筆轉出

注意：
- 這裡的方法不自己 commit，由呼叫端（GameRegistry 或 withdraw）的
  @transactional 控制整個操作的 commit / rollback
- 外部轉帳失敗一律拋出 TransferFailed，不重試
"""
from sqlalchemy.orm import Session
import logging

from models import Balance
from core.locks import lock_or_create_balance, with_balance_lock
from core.exceptions import TransferFailed, ZeroBalance
from core.token_ledger import TokenLedger
from database import transactional

logger = logging.getLogger(__name__)


class EscrowLedger:
    """內部餘額管理器"""

    def __init__(self, token_ledger: TokenLedger, custody_account: str):
        self.token_ledger = token_ledger
        self.custody_account = custody_account

    def balance_of(self, db: Session, account: str) -> int:
        balance = db.query(Balance).filter(Balance.account == account).first()
        return balance.available if balance else 0

    def debit_for_wager(self, db: Session, account: str, amount: int) -> None:
        """
        從玩家扣除賭注

        流程：
        1. amount 為 0：不做任何事
        2. 內部餘額足夠：只扣內部餘額
        3. 內部餘額不足：內部餘額歸零，差額透過 transfer_from 轉入託管帳號

        異常：
            TransferFailed: 外部轉帳失敗（呼叫端的 transaction 會 rollback）
        """
        if amount == 0:
            return

        balance = lock_or_create_balance(account, db)
        if balance.available >= amount:
            balance.available -= amount
            db.flush()
            logger.info(f"Debited {amount} from internal balance of {account}")
            return

        shortfall = amount - balance.available
        balance.available = 0
        db.flush()

        if not self.token_ledger.transfer_from(account, self.custody_account, shortfall):
            raise TransferFailed("transfer_from", shortfall)

        logger.info(f"Pulled {shortfall} from {account} via token ledger")

    def credit(self, db: Session, account: str, amount: int) -> None:
        balance = lock_or_create_balance(account, db)
        balance.available += amount
        db.flush()

    @transactional
    def withdraw(self, db: Session, account: str) -> int:
        """
        提領全部內部餘額

        順序很重要：先把餘額歸零（flush），再呼叫外部 transfer。
        外部轉帳失敗時拋出 TransferFailed，由 @transactional rollback，
        餘額會回到呼叫前的值。

        返回：
            提領的數量

        異常：
            ZeroBalance: 餘額為 0
            TransferFailed: 外部轉帳失敗
        """
        balance = with_balance_lock(account, db).first()
        if balance is None or balance.available == 0:
            raise ZeroBalance(account)

        amount = balance.available
        balance.available = 0
        db.flush()

        if not self.token_ledger.transfer(account, amount):
            raise TransferFailed("transfer", amount)

        logger.info(f"Withdrew {amount} to {account}")
        return amount
