"""
Commit-Reveal 服務：commitment 的 hash 與公開值驗證

Commitment = keccak256(把原值以 uint256 做 ABI 編碼)，
與 Solidity 的 keccak256(abi.encodePacked(uint256)) 完全相同。
"""
from eth_abi import encode
from eth_utils import keccak

from models import UINT256_MAX

COMMITMENT_SIZE = 32


def hash_play(value: int) -> bytes:
    """
    計算原值的 commitment

    參數：
        value: maker 隱藏的原值（0 <= value <= UINT256_MAX）

    返回：
        32 bytes 的 keccak256 hash
    """
    return keccak(encode(["uint256"], [value]))


def is_empty_commitment(commitment: bytes) -> bool:
    """長度不是 32 bytes 或全為 0 都視為空值"""
    return len(commitment) != COMMITMENT_SIZE or not any(commitment)


def verify_reveal(commitment: bytes, revealed_value: int) -> bool:
    # 超出 uint256 的值不可能是 commit 過的原值
    if not 0 <= revealed_value <= UINT256_MAX:
        return False
    return hash_play(revealed_value) == commitment
