from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from equity_ledger.errors import (
    FieldError,
    InvalidDate,
    InvalidNumber,
    InvalidTransactionType,
    MissingField,
)
from equity_ledger.fields import (
    VALID_TYPES,
    parse_date,
    parse_decimal,
    parse_type,
    split_delimited_line,
    transaction_from_form,
)
from equity_ledger.models import TxnType


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("5/1/24", date(2024, 1, 5)),
        ("15/01/2024", date(2024, 1, 15)),
        ("5/1/2024", date(2024, 1, 5)),
        ("15/1/2024", date(2024, 1, 15)),
        ("15/01/24", date(2024, 1, 15)),
        ("2024/1/5", date(2024, 1, 5)),
        ("2024/01/15", date(2024, 1, 15)),
        ("  03/04/2023 ", date(2023, 4, 3)),
        ("29/02/2024", date(2024, 2, 29)),
        ("31/12/99", date(2099, 12, 31)),
    ],
)
def test_parse_date_accepts_supported_patterns(text: str, expected: date):
    assert parse_date(text) == expected


@pytest.mark.parametrize(
    "text",
    ["not-a-date", "", "   ", "2024-01-15", "15.01.2024", "32/01/2024", "29/02/2023", "31/02/2024", "1/13/2024", "15/01/224"],
)
def test_parse_date_rejects_everything_else(text: str):
    with pytest.raises(InvalidDate) as ei:
        parse_date(text)
    assert "DD/MM/YYYY" in str(ei.value)


def test_parse_date_none_is_invalid():
    with pytest.raises(InvalidDate):
        parse_date(None)


def test_parse_type_is_case_and_space_insensitive():
    assert parse_type(" buy ") is TxnType.BUY
    assert parse_type("Add_Funds") is TxnType.ADD_FUNDS
    assert parse_type("ADD FUNDS") is TxnType.ADD_FUNDS
    assert parse_type("withdrawal") is TxnType.WITHDRAWAL


@pytest.mark.parametrize("text", ["DIVIDEND", "", "   ", None])
def test_parse_type_rejects_unknown(text):
    with pytest.raises(InvalidTransactionType) as ei:
        parse_type(text)
    for name in VALID_TYPES:
        assert name in str(ei.value)
    assert ei.value.valid == VALID_TYPES


def test_parse_decimal_blank_is_zero_and_values_are_exact():
    assert parse_decimal("", "Qty") == Decimal(0)
    assert parse_decimal("   ", "Qty") == Decimal(0)
    assert parse_decimal(None, "Qty") == Decimal(0)
    assert parse_decimal(" 0.1 ", "Rate") + parse_decimal("0.2", "Rate") == Decimal("0.3")
    assert parse_decimal("1000.00", "Amount") == Decimal("1000.00")


@pytest.mark.parametrize("text", ["abc", "1,000", "NaN", "Infinity", "-inf", "1.2.3"])
def test_parse_decimal_rejects_bad_numbers(text: str):
    with pytest.raises(InvalidNumber) as ei:
        parse_decimal(text, "Amount")
    assert ei.value.field == "Amount"
    assert isinstance(ei.value, ValueError)


def test_split_delimited_line_handles_quotes():
    assert split_delimited_line('15/01/2024,BUY,ACME,10,100,"1,000.00",0') == [
        "15/01/2024",
        "BUY",
        "ACME",
        "10",
        "100",
        "1,000.00",
        "0",
    ]
    assert split_delimited_line("") == [""]
    assert split_delimited_line("a,,b") == ["a", "", "b"]
    assert split_delimited_line('"a""b",c') == ["ab", "c"]


def test_transaction_from_form_places_amount_by_type():
    buy = transaction_from_form(
        date_text="15/01/2024",
        type_text="buy",
        symbol=" ACME ",
        quantity_text="10",
        price_text="100",
        amount_text="1000",
    )
    assert buy.type is TxnType.BUY
    assert buy.symbol == "ACME"
    assert (buy.credit, buy.debit) == (Decimal(0), Decimal(1000))

    funds = transaction_from_form(
        date_text="2024/01/01",
        type_text="ADD_FUNDS",
        symbol="IGNORED",
        quantity_text="",
        price_text="",
        amount_text="5000",
    )
    assert funds.symbol == ""
    assert (funds.credit, funds.debit) == (Decimal(5000), Decimal(0))
    assert funds.quantity == Decimal(0)


def test_transaction_from_form_requires_symbol_for_trades():
    with pytest.raises(MissingField) as ei:
        transaction_from_form(
            date_text="15/01/2024",
            type_text="SELL",
            symbol="  ",
            quantity_text="4",
            price_text="120",
            amount_text="480",
        )
    assert ei.value.field == "symbol"
    assert isinstance(ei.value, FieldError)


def test_transaction_from_form_rejects_negative_amount():
    with pytest.raises(InvalidNumber):
        transaction_from_form(
            date_text="15/01/2024",
            type_text="CHARGES",
            symbol="",
            quantity_text="",
            price_text="",
            amount_text="-5",
        )
