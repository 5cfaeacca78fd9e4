"""
Unit tests for internal balances, wager debits and withdrawals.
"""
import pytest
from sqlalchemy.exc import StatementError

from models import UINT256_MAX, Balance
from core.exceptions import TransferFailed, ZeroBalance
from core.locks import lock_or_create_balance

CUSTODY = "rps-escrow"


class TestDebitForWager:
    def test_zero_amount_is_noop(self, escrow, db, token_ledger):
        escrow.debit_for_wager(db, "alice", 0)
        db.commit()

        assert token_ledger.calls == []
        assert escrow.balance_of(db, "alice") == 0

    def test_covered_by_internal_balance(self, escrow, db, token_ledger):
        escrow.credit(db, "alice", 3)
        escrow.debit_for_wager(db, "alice", 2)
        db.commit()

        assert escrow.balance_of(db, "alice") == 1
        assert token_ledger.calls == []

    def test_shortfall_pulled_from_token_ledger(self, escrow, db, token_ledger):
        escrow.credit(db, "alice", 1)
        escrow.debit_for_wager(db, "alice", 3)
        db.commit()

        assert escrow.balance_of(db, "alice") == 0
        assert token_ledger.calls == [("transfer_from", "alice", CUSTODY, 2)]
        assert token_ledger.balance_of("alice") == 997
        assert token_ledger.balance_of(CUSTODY) == 2

    def test_failed_transfer_relies_on_caller_rollback(self, escrow, db, token_ledger):
        escrow.credit(db, "alice", 1)
        db.commit()
        token_ledger.failing = True

        with pytest.raises(TransferFailed):
            escrow.debit_for_wager(db, "alice", 3)
        # debit_for_wager 已把餘額歸零，由呼叫端的 transaction 還原
        db.rollback()

        assert escrow.balance_of(db, "alice") == 1
        assert token_ledger.calls == [("transfer_from", "alice", CUSTODY, 2)]


class TestCredit:
    def test_credit_creates_and_increments(self, escrow, db, token_ledger):
        escrow.credit(db, "bob", 2)
        escrow.credit(db, "bob", 3)
        db.commit()

        assert escrow.balance_of(db, "bob") == 5
        assert token_ledger.calls == []

    def test_unknown_account_has_zero_balance(self, escrow, db):
        assert escrow.balance_of(db, "nobody") == 0

    def test_amounts_beyond_64_bits(self, escrow, db):
        escrow.credit(db, "alice", 2 ** 63)
        escrow.credit(db, "alice", 2 ** 63)
        db.commit()

        assert escrow.balance_of(db, "alice") == 2 ** 64

    def test_amount_above_uint256_is_rejected(self, escrow, db):
        escrow.credit(db, "alice", UINT256_MAX)

        with pytest.raises(StatementError) as exc_info:
            escrow.credit(db, "alice", 1)

        assert isinstance(exc_info.value.orig, ValueError)


class TestBalanceRowCreation:
    def test_row_created_by_another_session_is_reused(self, escrow, db, session_factory):
        other = session_factory()
        other.add(Balance(account="carol", available=5))
        other.commit()
        other.close()

        escrow.credit(db, "carol", 2)
        db.commit()

        assert escrow.balance_of(db, "carol") == 7
        assert db.query(Balance).filter(Balance.account == "carol").count() == 1

    def test_lock_or_create_is_idempotent(self, db):
        first = lock_or_create_balance("dave", db)
        second = lock_or_create_balance("dave", db)

        assert first is second
        assert first.available == 0
        assert db.query(Balance).filter(Balance.account == "dave").count() == 1


class TestWithdraw:
    def test_zero_balance(self, escrow, db):
        with pytest.raises(ZeroBalance):
            escrow.withdraw(db, "alice")

    def test_transfers_and_zeroes_balance(self, escrow, db, token_ledger):
        token_ledger.holdings[CUSTODY] = 4
        escrow.credit(db, "alice", 4)
        db.commit()

        assert escrow.withdraw(db, "alice") == 4

        assert escrow.balance_of(db, "alice") == 0
        assert token_ledger.balance_of("alice") == 1003
        assert token_ledger.balance_of(CUSTODY) == 0

    def test_second_withdraw_fails(self, escrow, db, token_ledger):
        token_ledger.holdings[CUSTODY] = 1
        escrow.credit(db, "alice", 1)
        db.commit()
        escrow.withdraw(db, "alice")

        with pytest.raises(ZeroBalance):
            escrow.withdraw(db, "alice")

    def test_balance_zeroed_before_transfer(self, escrow, db, token_ledger):
        token_ledger.holdings[CUSTODY] = 4
        escrow.credit(db, "alice", 4)
        db.commit()

        seen = []
        transfer = token_ledger.transfer

        def recording_transfer(recipient, amount):
            seen.append(escrow.balance_of(db, recipient))
            return transfer(recipient, amount)

        token_ledger.transfer = recording_transfer
        escrow.withdraw(db, "alice")

        assert seen == [0]

    def test_failed_transfer_rolls_back(self, escrow, db, token_ledger):
        escrow.credit(db, "alice", 4)
        db.commit()
        token_ledger.failing = True

        with pytest.raises(TransferFailed):
            escrow.withdraw(db, "alice")

        assert escrow.balance_of(db, "alice") == 4
        assert token_ledger.calls == [("transfer", "alice", 4)]
