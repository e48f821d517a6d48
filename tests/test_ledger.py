from decimal import Decimal

import pytest

from ledgerbook.ledger import (
    AccountNotFound,
    DuplicateAccount,
    Entry,
    InvalidAccount,
    InvalidAmount,
    InvalidReference,
    InvalidTransfer,
    Ledger,
    LedgerError,
)


def make_ledger(**kwargs) -> Ledger:
    led = Ledger(**kwargs)
    led.add_account("cash", "Cash")
    led.add_account("recv", "Receivable")
    return led


def test_post_moves_amount_between_accounts():
    led = make_ledger()
    entry = led.post("T-1", "cash", "recv", 100)
    assert isinstance(entry, Entry)
    assert entry.amount == 100
    assert entry.ref == "T-1"
    assert entry.debit_account_id == "cash" and entry.credit_account_id == "recv"
    assert led.get_account("cash").balance == 100
    assert led.get_account("recv").balance == -100
    assert len(led.list_entries()) == 1


def test_post_to_unknown_account_changes_nothing():
    led = make_ledger()
    led.post("T-1", "cash", "recv", 100)
    with pytest.raises(AccountNotFound) as exc:
        led.post("T-2", "cash", "ghost", 50)
    assert exc.value.details == {"id": "ghost"}
    assert "ghost" in str(exc.value)
    assert led.get_account("cash").balance == 100
    assert len(led.list_entries()) == 1


@pytest.mark.parametrize("amount", [-5, 0, 0.0, float("nan"), float("inf"), Decimal("NaN"), Decimal("-Infinity"), "10", None, True])
def test_post_rejects_bad_amounts(amount):
    led = make_ledger()
    with pytest.raises(InvalidAmount):
        led.post("T-3", "cash", "recv", amount)
    assert led.balances() == {"cash": 0, "recv": 0}
    assert led.list_entries() == []


def test_amount_checked_before_accounts():
    led = make_ledger()
    with pytest.raises(InvalidAmount):
        led.post("T-4", "ghost", "phantom", -1)


def test_debit_checked_before_credit():
    led = make_ledger()
    with pytest.raises(AccountNotFound) as exc:
        led.post("T-5", "ghost", "phantom", 1)
    assert exc.value.details["id"] == "ghost"
    assert "debit" in exc.value.message


def test_self_transfer_rejected():
    led = make_ledger()
    with pytest.raises(InvalidTransfer):
        led.post("T-6", "cash", "cash", 10)
    assert led.get_account("cash").balance == 0
    assert led.list_entries() == []


def test_missing_account_wins_over_self_transfer():
    led = make_ledger()
    with pytest.raises(AccountNotFound):
        led.post("T-7", "ghost", "ghost", 10)


def test_errors_share_base_class():
    led = make_ledger()
    for args in (("r", "cash", "recv", 0), ("r", "cash", "nope", 1), ("r", "cash", "cash", 1)):
        with pytest.raises(LedgerError):
            led.post(*args)


def test_duplicate_account_leaves_existing_untouched():
    led = make_ledger()
    led.post("T-1", "cash", "recv", 25)
    with pytest.raises(DuplicateAccount):
        led.add_account("cash", "Other Cash")
    acc = led.get_account("cash")
    assert acc.name == "Cash"
    assert acc.balance == 25
    assert [a.id for a in led.list_accounts()] == ["cash", "recv"]


@pytest.mark.parametrize("acc_id,name", [("", "Empty"), ("x", ""), (None, "None"), (5, "Five")])
def test_add_account_requires_non_empty_strings(acc_id, name):
    led = Ledger()
    with pytest.raises(InvalidAccount):
        led.add_account(acc_id, name)
    assert led.list_accounts() == []


def test_get_account_unknown():
    led = Ledger()
    with pytest.raises(AccountNotFound):
        led.get_account("nope")
    assert led.has_account("nope") is False


def test_new_account_starts_at_zero():
    led = Ledger()
    acc = led.add_account("fees", "Fees")
    assert acc.balance == 0
    assert led.get_account("fees") is acc
    assert len(led) == 1


def test_list_accounts_returns_copies_in_insertion_order():
    led = Ledger()
    for acc_id in ("z", "a", "m"):
        led.add_account(acc_id, acc_id.upper())
    led.post("T-1", "z", "a", 5)
    snapshot = led.list_accounts()
    assert [a.id for a in snapshot] == ["z", "a", "m"]
    snapshot[0].balance = Decimal("1000")
    snapshot.clear()
    assert led.get_account("z").balance == 5
    assert len(led.list_accounts()) == 3


def test_list_entries_returns_copy():
    led = make_ledger()
    led.post("T-1", "cash", "recv", 1)
    entries = led.list_entries()
    entries.append(entries[0])
    entries.clear()
    assert len(led.list_entries()) == 1


def test_entries_are_immutable():
    led = make_ledger()
    entry = led.post("T-1", "cash", "recv", 1)
    with pytest.raises(Exception):
        entry.amount = Decimal("99")  # type: ignore[misc]
    assert led.list_entries()[0].amount == 1


def test_entry_timestamp_and_sequence_follow_posting_order():
    times = iter([1_000, 900, 1_500])
    led = make_ledger(clock=lambda: next(times))
    e1 = led.post("A", "cash", "recv", 1)
    e2 = led.post("B", "recv", "cash", 2)
    e3 = led.post("C", "cash", "recv", 3)
    # wall clock may go backwards; each entry keeps its own capture time
    assert [e.ts for e in (e1, e2, e3)] == [1_000, 900, 1_500]
    assert [e.seq for e in led.list_entries()] == [1, 2, 3]
    assert [e.ref for e in led.list_entries()] == ["A", "B", "C"]


def test_refs_need_not_be_unique():
    led = make_ledger()
    led.post("dup", "cash", "recv", 1)
    led.post("dup", "cash", "recv", 2)
    assert led.get_account("cash").balance == 3


def test_float_amounts_are_exact():
    led = make_ledger()
    led.add_account("fees", "Fees")
    led.post("a", "cash", "recv", 0.1)
    led.post("b", "cash", "fees", 0.2)
    assert led.get_account("cash").balance == Decimal("0.3")
    assert led.total() == 0


def test_entries_for_filters_by_account():
    led = make_ledger()
    led.add_account("fees", "Fees")
    led.post("a", "cash", "recv", 1)
    led.post("b", "fees", "cash", 2)
    led.post("c", "recv", "fees", 3)
    assert [e.ref for e in led.entries_for("cash")] == ["a", "b"]
    assert [e.ref for e in led.entries_for("fees")] == ["b", "c"]
    with pytest.raises(AccountNotFound):
        led.entries_for("ghost")


@pytest.mark.parametrize("ref", [42, None, ("T", 1)])
def test_non_string_ref_rejected_before_any_change(ref):
    published = []
    for led in (make_ledger(), make_ledger(publisher=published.append)):
        with pytest.raises(InvalidReference):
            led.post(ref, "cash", "recv", 10)
        assert led.balances() == {"cash": 0, "recv": 0}
        assert led.list_entries() == []
    assert [env.event.event_type for env in published][-1] == "post_rejected"


def test_huge_int_amount_posts_exactly():
    led = make_ledger()
    big = 10 ** 5000
    entry = led.post("big", "cash", "recv", big)
    assert entry.amount == Decimal(big)
    assert led.get_account("recv").balance == -Decimal(big)
    led.verify()


def test_huge_negative_int_amount_is_invalid():
    led = make_ledger()
    with pytest.raises(InvalidAmount) as exc:
        led.post("big", "cash", "recv", -(10 ** 5000))
    assert "amount must be > 0" in str(exc.value)
    assert led.list_entries() == []


def test_account_id_and_name_are_read_only():
    led = make_ledger()
    acc = led.get_account("cash")
    with pytest.raises(AttributeError):
        acc.id = "other"  # type: ignore[misc]
    with pytest.raises(AttributeError):
        acc.name = "Other"  # type: ignore[misc]
    assert [a.id for a in led.list_accounts()] == ["cash", "recv"]
    assert led.get_account("cash").name == "Cash"


def test_snapshot_pairs_accounts_with_entries():
    led = make_ledger()
    led.post("T-1", "cash", "recv", 7)
    accounts, entries = led.snapshot()
    accounts[0].balance = Decimal("0")
    entries.clear()
    assert [a.balance for a in led.snapshot()[0]] == [7, -7]
    assert len(led.snapshot()[1]) == 1
