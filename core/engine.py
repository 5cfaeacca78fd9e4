"""
RpsEngine：把 GameRegistry 與 EscrowLedger 綁在同一個外部 ledger 和時鐘上

呼叫端（API 層、測試）明確持有這個物件，不使用全域狀態。
"""
from typing import Optional

from core.escrow_ledger import EscrowLedger
from core.game_registry import Clock, GameRegistry, system_clock
from core.token_ledger import TokenLedger
from database import Settings, get_settings


class RpsEngine:
    def __init__(
        self,
        token_ledger: TokenLedger,
        clock: Clock = system_clock,
        settings: Optional[Settings] = None
    ):
        settings = settings or get_settings()
        self.token_ledger = token_ledger
        self.escrow = EscrowLedger(token_ledger, settings.custody_account)
        self.registry = GameRegistry(
            self.escrow,
            clock=clock,
            claim_timeout_sec=settings.claim_timeout_sec
        )
