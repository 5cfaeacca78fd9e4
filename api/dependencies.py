"""
API 共用 dependencies 與錯誤對應

呼叫者身分由前面的認證層放在 X-Caller header，這裡直接信任。
"""
from fastapi import Header, HTTPException, Request

from core.engine import RpsEngine
from core.exceptions import (
    RpsGameException,
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
    CommitmentMismatch,
    ZeroBalance,
    TransferFailed
)

ERROR_STATUS = {
    UnknownGame: 404,
    SameAsMaker: 403,
    NotMaker: 403,
    NotTaker: 403,
    AlreadyFinished: 409,
    AlreadySettled: 409,
    NotFinished: 409,
    NotExpired: 409,
    InvalidCommitment: 400,
    InvalidWager: 400,
    CommitmentMismatch: 400,
    ZeroBalance: 400,
    TransferFailed: 402,
}


def get_engine(request: Request) -> RpsEngine:
    return request.app.state.engine


def get_caller(x_caller: str = Header(..., min_length=1, max_length=128)) -> str:
    return x_caller


def to_http_exception(e: RpsGameException) -> HTTPException:
    status_code = ERROR_STATUS.get(type(e), 400)
    return HTTPException(
        status_code=status_code,
        detail={"error": type(e).__name__, "message": str(e)}
    )
