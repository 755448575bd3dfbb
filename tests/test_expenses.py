from __future__ import annotations

import pytest

from freelance_plan.expenses import (
    ExpenseFrequency,
    ExpenseItem,
    annualized_amount,
    expense_accrual,
    parse_expense_line,
    parse_expense_lines,
    total_by_frequency,
    validate_expenses,
)


@pytest.mark.parametrize(
    "line, name, amount, frequency",
    [
        ("Coworking: 250€/mois", "Coworking", 250.0, ExpenseFrequency.MONTHLY),
        ("Assurance RC Pro: 400€/an", "Assurance RC Pro", 400.0, ExpenseFrequency.ANNUAL),
        ("Comptable: 300€/trimestre", "Comptable", 300.0, ExpenseFrequency.QUARTERLY),
        ("Hosting: 12.50 eur / month", "Hosting", 12.5, ExpenseFrequency.MONTHLY),
        ("Domain: 15,99$/year", "Domain", 15.99, ExpenseFrequency.ANNUAL),
        ("Bookkeeping: 90/quarter", "Bookkeeping", 90.0, ExpenseFrequency.QUARTERLY),
    ],
)
def test_parse_expense_line_reads_amount_and_frequency(line, name, amount, frequency):
    item = parse_expense_line(line)
    assert item.name == name
    assert item.amount == pytest.approx(amount)
    assert item.frequency == frequency


def test_parse_expense_line_without_amount_defaults_to_zero_monthly():
    item = parse_expense_line("Misc: to be decided")
    assert item == ExpenseItem("Misc", 0.0, ExpenseFrequency.MONTHLY)


def test_parse_expense_lines_skips_blank_lines():
    items = parse_expense_lines(["Coworking: 250€/mois", "", "   ", "Assurance: 400€/an"])
    assert [i.name for i in items] == ["Coworking", "Assurance"]


def test_totals_and_annualization():
    items = [
        ExpenseItem("a", 100.0),
        ExpenseItem("b", 50.0),
        ExpenseItem("c", 300.0, ExpenseFrequency.QUARTERLY),
        ExpenseItem("d", 400.0, ExpenseFrequency.ANNUAL),
    ]
    assert total_by_frequency(items, ExpenseFrequency.MONTHLY) == 150.0
    assert total_by_frequency(items, ExpenseFrequency.QUARTERLY) == 300.0
    assert [annualized_amount(i) for i in items] == [1200.0, 600.0, 1200.0, 400.0]


def test_expense_accrual_timing():
    items = [
        ExpenseItem("m", 10.0),
        ExpenseItem("q", 100.0, ExpenseFrequency.QUARTERLY),
        ExpenseItem("y", 1000.0, ExpenseFrequency.ANNUAL),
    ]
    assert expense_accrual(items, calendar_month=0, step=0, initial_investment=5.0) == 1115.0
    assert expense_accrual(items, calendar_month=3, step=3) == 110.0
    assert expense_accrual(items, calendar_month=4, step=4) == 10.0
    assert expense_accrual(items, calendar_month=4, step=4, quarter_start_offset=1) == 110.0


def test_validate_expenses_flags_negative_and_nan_amounts():
    errors = validate_expenses([ExpenseItem("Rent", -1.0), ExpenseItem("", float("nan")), ExpenseItem("Ok", 1.0)])
    assert errors == ["Rent: amount must be non-negative.", "expenses[1]: amount must be non-negative."]


def test_overflowing_amount_parses_to_infinity_and_is_rejected():
    item = parse_expense_line("Big: " + "9" * 400 + "€/mois")
    assert item.amount == float("inf")
    assert validate_expenses([item, ExpenseItem("Neg inf", float("-inf"))]) == [
        "Big: amount must be non-negative.",
        "Neg inf: amount must be non-negative.",
    ]
