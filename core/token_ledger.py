"""
外部 Token Ledger 介面

Engine 只透過兩個同步呼叫使用外部 ledger：
- transfer_from(from, to, amount)：把玩家的 token 轉進 engine 的託管帳號
- transfer(to, amount)：從託管帳號轉出給玩家

兩者都是全有或全無：回傳 True 代表完整轉帳，False 代表完全沒有轉帳。
Engine 不會自動重試。
"""
from typing import Dict, List, Optional, Protocol, Tuple
import logging

logger = logging.getLogger(__name__)


class TokenLedger(Protocol):
    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool:
        ...

    def transfer(self, recipient: str, amount: int) -> bool:
        ...


class InMemoryTokenLedger:
    """
    In-process 的 token ledger（本機執行與測試用）

    - holdings：每個帳號持有的 token
    - allowances：玩家授權給託管帳號可以動用的額度
    - calls：所有轉帳請求的紀錄（不論成功或失敗）
    - failing：設為 True 時所有轉帳都回報失敗，用來驗證 rollback
    """

    def __init__(self, custody_account: str, holdings: Optional[Dict[str, int]] = None):
        self.custody_account = custody_account
        self.holdings: Dict[str, int] = dict(holdings or {})
        self.allowances: Dict[str, int] = {}
        self.calls: List[Tuple] = []
        self.failing = False

    def approve(self, owner: str, amount: int) -> None:
        self.allowances[owner] = amount

    def balance_of(self, account: str) -> int:
        return self.holdings.get(account, 0)

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool:
        self.calls.append(("transfer_from", sender, recipient, amount))
        if self.failing:
            return False
        if self.allowances.get(sender, 0) < amount or self.balance_of(sender) < amount:
            logger.info(f"transfer_from {sender} -> {recipient} of {amount} refused")
            return False

        self.allowances[sender] -= amount
        self._move(sender, recipient, amount)
        return True

    def transfer(self, recipient: str, amount: int) -> bool:
        self.calls.append(("transfer", recipient, amount))
        if self.failing or self.balance_of(self.custody_account) < amount:
            logger.info(f"transfer to {recipient} of {amount} refused")
            return False

        self._move(self.custody_account, recipient, amount)
        return True

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        self.holdings[sender] = self.balance_of(sender) - amount
        self.holdings[recipient] = self.balance_of(recipient) + amount
