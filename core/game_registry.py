"""
Game Registry：管理遊戲的完整生命週期

狀態機：
    OPEN ──join──> AWAITING_SETTLEMENT ──settle / claim──> SETTLED
      └────────────────cancel─────────────────────────────────┘

職責：
1. 建立遊戲（maker 提交 commitment 並下注）
2. 加入遊戲（taker 出拳並下注）
3. 取消 / 結算 / 逾時 claim
4. 查詢遊戲資訊

原則：
- 每個操作都是一個 transaction，任何異常都 rollback，不留下部分狀態
- 先驗證，再修改；資金移動一律交給 EscrowLedger
- 沒有自動過期：taker 必須主動呼叫 claim_game
"""
from sqlalchemy.orm import Session
from typing import Callable, List
import logging
import time

from models import MAX_WAGER, Game, GameCounter
from core.locks import COUNTER_ID, lock_or_create_counter, with_game_lock
from core.escrow_ledger import EscrowLedger
from core.exceptions import (
    UnknownGame,
    InvalidCommitment,
    InvalidWager,
    SameAsMaker,
    AlreadyFinished,
    NotMaker,
    NotTaker,
    AlreadySettled,
    NotFinished,
    NotExpired,
    CommitmentMismatch
)
from services.commitment_service import is_empty_commitment, verify_reveal
from services.payoff_service import (
    calculate_payoff,
    determine_outcome,
    maker_play_from_reveal,
    winner_of
)
from services import event_service
from database import transactional

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    return int(time.time())


class GameRegistry:
    """遊戲生命週期管理器"""

    def __init__(self, escrow: EscrowLedger, clock: Clock = system_clock, claim_timeout_sec: int = 3600):
        self.escrow = escrow
        self.clock = clock
        self.claim_timeout_sec = claim_timeout_sec

    def _locked_game(self, db: Session, game_id: int) -> Game:
        game = with_game_lock(game_id, db).first() if game_id >= 0 else None
        if not game:
            raise UnknownGame(game_id)
        return game

    @transactional
    def create_game(self, db: Session, caller: str, commitment: bytes, wager: int) -> Game:
        """
        建立新遊戲

        流程：
        1. 檢查 commitment 不是空值
        2. 鎖定計數器並分配 game id（從 0 開始）
        3. 建立 OPEN 狀態的 Game，記錄 GameCreated
        4. 從 maker 扣除賭注（內部餘額優先，不足再外部轉入）

        異常：
            InvalidCommitment: commitment 為空
            InvalidWager: 賭注超過 MAX_WAGER（彩池會超出 uint256）
            TransferFailed: 外部轉帳失敗（整個建立動作 rollback）
        """
        if is_empty_commitment(commitment):
            raise InvalidCommitment("Commitment must be a non-zero 32-byte hash")

        if not 0 <= wager <= MAX_WAGER:
            raise InvalidWager(wager)

        counter = lock_or_create_counter(db)

        game_id = counter.next_id
        counter.next_id = game_id + 1
        now = self.clock()

        game = Game(
            id=game_id,
            maker=caller,
            taker=None,
            wager=wager,
            created_at=now,
            maker_commitment=bytes(commitment),
            taker_play=0,
            finished=False,
            settled=False
        )
        db.add(game)
        db.flush()

        event_service.record_event(
            db, game_id, event_service.GAME_CREATED,
            {"maker": caller, "wager": wager}, now
        )
        self.escrow.debit_for_wager(db, caller, wager)

        logger.info(f"Created game {game_id} by {caller} with wager {wager}")
        return game

    @transactional
    def join_game(self, db: Session, caller: str, game_id: int, play: int) -> Game:
        """
        加入遊戲（OPEN -> AWAITING_SETTLEMENT）

        注意：
            play 原樣儲存，不檢查是否在 ROCK / PAPER / SCISSORS 範圍內

        異常：
            UnknownGame, SameAsMaker, AlreadyFinished, TransferFailed
        """
        game = self._locked_game(db, game_id)
        if caller == game.maker:
            raise SameAsMaker(f"{caller} created game {game_id}")
        if game.finished:
            raise AlreadyFinished(f"Game {game_id} already finished")

        game.taker = caller
        game.taker_play = int(play)
        game.finished = True

        event_service.record_event(
            db, game_id, event_service.GAME_FINISHED,
            {"taker": caller}, self.clock()
        )
        self.escrow.debit_for_wager(db, caller, game.wager)

        logger.info(f"{caller} joined game {game_id}")
        return game

    @transactional
    def cancel_game(self, db: Session, caller: str, game_id: int) -> Game:
        """
        取消還沒有人加入的遊戲（OPEN -> SETTLED），賭注退回 maker 的內部餘額

        異常：
            UnknownGame, NotMaker, AlreadyFinished
        """
        game = self._locked_game(db, game_id)
        if caller != game.maker:
            raise NotMaker(f"Only the maker can cancel game {game_id}")
        if game.finished:
            raise AlreadyFinished(f"Game {game_id} already finished")

        game.finished = True
        game.settled = True
        self.escrow.credit(db, game.maker, game.wager)

        event_service.record_event(db, game_id, event_service.GAME_CANCELED, {}, self.clock())
        logger.info(f"Canceled game {game_id}, refunded {game.wager} to {game.maker}")
        return game

    @transactional
    def settle_game(self, db: Session, caller: str, game_id: int, revealed_value: int) -> Game:
        """
        Maker 公開 commitment 的原值並結算（AWAITING_SETTLEMENT -> SETTLED）

        流程：
        1. 驗證身分與狀態
        2. 驗證 hash(revealed_value) == commitment
        3. maker 的拳 = revealed_value mod 3，與 taker 的拳比較
        4. 平手：雙方各拿回 wager；否則贏家拿 2 * wager

        異常：
            UnknownGame, NotMaker, NotFinished, AlreadySettled, CommitmentMismatch
        """
        game = self._locked_game(db, game_id)
        if caller != game.maker:
            raise NotMaker(f"Only the maker can settle game {game_id}")
        if not game.finished:
            raise NotFinished(f"Game {game_id} has no taker yet")
        if game.settled:
            raise AlreadySettled(f"Game {game_id} already settled")
        if not verify_reveal(game.maker_commitment, revealed_value):
            raise CommitmentMismatch(f"Revealed value does not match commitment of game {game_id}")

        maker_play = maker_play_from_reveal(revealed_value)
        outcome = determine_outcome(maker_play, game.taker_play)
        maker_credit, taker_credit = calculate_payoff(outcome, game.wager)

        if maker_credit:
            self.escrow.credit(db, game.maker, maker_credit)
        if taker_credit:
            self.escrow.credit(db, game.taker, taker_credit)
        game.settled = True

        winner = winner_of(outcome, game.maker, game.taker)
        event_service.record_event(
            db, game_id, event_service.GAME_SETTLED,
            {"winner": winner}, self.clock()
        )
        logger.info(
            f"Settled game {game_id}: maker={maker_play.name} "
            f"taker={game.taker_play} outcome={outcome.value}"
        )
        return game

    @transactional
    def claim_game(self, db: Session, caller: str, game_id: int) -> Game:
        """
        Maker 逾時未公開時，taker 取走整個彩池

        逾時以遊戲「建立」時間起算，不是加入時間。

        異常：
            UnknownGame, NotTaker, AlreadySettled, NotExpired
        """
        game = self._locked_game(db, game_id)
        if game.taker is None or caller != game.taker:
            raise NotTaker(f"Only the taker can claim game {game_id}")
        if game.settled:
            raise AlreadySettled(f"Game {game_id} already settled")

        now = self.clock()
        expires_at = game.created_at + self.claim_timeout_sec
        if now < expires_at:
            raise NotExpired(game_id, expires_at)

        self.escrow.credit(db, game.taker, 2 * game.wager)
        game.settled = True

        event_service.record_event(db, game_id, event_service.GAME_CLAIMED, {}, now)
        logger.info(f"{caller} claimed game {game_id} after timeout")
        return game

    # ============ 查詢 ============

    def get_game(self, db: Session, game_id: int) -> Game:
        game = db.query(Game).filter(Game.id == game_id).first()
        if not game:
            raise UnknownGame(game_id)
        return game

    def list_games(self, db: Session, offset: int = 0, limit: int = 100) -> List[Game]:
        return db.query(Game).order_by(Game.id).offset(offset).limit(limit).all()

    def next_game_id(self, db: Session) -> int:
        counter = db.query(GameCounter).filter(GameCounter.id == COUNTER_ID).first()
        return counter.next_id if counter else 0

    def list_events(self, db: Session, game_id: int):
        self.get_game(db, game_id)
        return event_service.list_game_events(db, game_id)
