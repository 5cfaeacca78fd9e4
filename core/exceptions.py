"""
自定義異常類別

集中管理所有遊戲與託管帳務的異常，方便 API 層統一處理。
所有異常都是同步拋出、不會自動重試，而且觸發的操作會整個 rollback。
"""


class RpsGameException(Exception):
    """所有遊戲異常的基類"""
    pass


# ============ Game 相關異常 ============

class UnknownGame(RpsGameException):
    """遊戲不存在（game_id 超出範圍）"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} does not exist")


class InvalidCommitment(RpsGameException):
    """Commitment 是空值（全為 0）或長度不是 32 bytes"""
    pass


class InvalidWager(RpsGameException):
    """賭注超出範圍（彩池 2 * wager 必須仍是 uint256）"""
    def __init__(self, wager):
        self.wager = wager
        super().__init__(f"Wager {wager} is out of range")


# ============ 身分相關異常 ============

class SameAsMaker(RpsGameException):
    """Maker 不能加入自己建立的遊戲"""
    pass


class NotMaker(RpsGameException):
    """只有 maker 可以執行此操作"""
    pass


class NotTaker(RpsGameException):
    """只有 taker 可以執行此操作"""
    pass


# ============ 狀態相關異常 ============

class AlreadyFinished(RpsGameException):
    """遊戲已經有人加入或已被取消"""
    pass


class NotFinished(RpsGameException):
    """遊戲還沒有 taker 加入"""
    pass


class AlreadySettled(RpsGameException):
    """遊戲已結算（settle / cancel / claim 其中之一已發生）"""
    pass


class NotExpired(RpsGameException):
    """尚未超過 claim 的逾時時間"""
    def __init__(self, game_id, expires_at):
        self.game_id = game_id
        self.expires_at = expires_at
        super().__init__(f"Game {game_id} cannot be claimed before {expires_at}")


# ============ Commit-Reveal 相關異常 ============

class CommitmentMismatch(RpsGameException):
    """公開的值與 commitment 的 hash 不符"""
    pass


# ============ 帳務相關異常 ============

class ZeroBalance(RpsGameException):
    """內部餘額為 0，無法提款"""
    def __init__(self, account):
        self.account = account
        super().__init__(f"Balance of {account} is 0")


class TransferFailed(RpsGameException):
    """外部 token ledger 回報轉帳失敗"""
    def __init__(self, operation, amount):
        self.operation = operation
        self.amount = amount
        super().__init__(f"Token {operation} of {amount} failed")
