"""
計分服務：猜拳的勝負判定與獎金分配

純計算邏輯，不碰資料庫
"""
import enum
from typing import Optional, Tuple

from models import Play


class Outcome(str, enum.Enum):
    TIE = "TIE"
    MAKER_WINS = "MAKER_WINS"
    TAKER_WINS = "TAKER_WINS"


# (贏家出的拳, 輸家出的拳)
BEATS = {
    (Play.ROCK, Play.SCISSORS),
    (Play.PAPER, Play.ROCK),
    (Play.SCISSORS, Play.PAPER),
}


def maker_play_from_reveal(revealed_value: int) -> Play:
    """Maker 公開的值取 mod 3 才是真正出的拳"""
    return Play(revealed_value % 3)


def determine_outcome(maker_play: int, taker_play: int) -> Outcome:
    """
    判定勝負

    Payoff Matrix（列：maker，欄：taker）：
    ┌──────────┬──────────┬──────────┬──────────┐
    │          │ ROCK     │ PAPER    │ SCISSORS │
    ├──────────┼──────────┼──────────┼──────────┤
    │ ROCK     │ TIE      │ TAKER    │ MAKER    │
    │ PAPER    │ MAKER    │ TIE      │ TAKER    │
    │ SCISSORS │ TAKER    │ MAKER    │ TIE      │
    └──────────┴──────────┴──────────┴──────────┘

    注意：
    - taker_play 是 join 時原樣儲存的值，不會取 mod 3。
      超出 0..2 的值不會等於 maker 的拳，也不在 BEATS 裡，所以算 taker 贏。
    """
    if maker_play == taker_play:
        return Outcome.TIE
    if (maker_play, taker_play) in BEATS:
        return Outcome.MAKER_WINS
    return Outcome.TAKER_WINS


def calculate_payoff(outcome: Outcome, wager: int) -> Tuple[int, int]:
    """
    計算入帳金額

    返回：
        (maker 入帳, taker 入帳)，兩者相加永遠等於 2 * wager
    """
    if outcome == Outcome.TIE:
        return (wager, wager)
    elif outcome == Outcome.MAKER_WINS:
        return (2 * wager, 0)
    else:
        return (0, 2 * wager)


def winner_of(outcome: Outcome, maker: str, taker: str) -> Optional[str]:
    """平手時回傳 None"""
    if outcome == Outcome.MAKER_WINS:
        return maker
    if outcome == Outcome.TAKER_WINS:
        return taker
    return None
