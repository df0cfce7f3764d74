from datetime import date

import pytest

from finance_tracker.query import SortSpec, ViewFilters, categories_in, view


@pytest.fixture
def records(make_tx):
    return [
        make_tx("expense", "500", title="Starbucks", category="Other", on=date(2025, 11, 5)),
        make_tx("income", "1000", title="Salary", category="Salary", on=date(2025, 11, 1)),
        make_tx("expense", "250", title="Swiggy", category="Food", on=date(2025, 10, 20)),
        make_tx("expense", "120.50", title="Zomato", category="Food", on=date(2025, 11, 5)),
    ]


def _titles(rows):
    return [tx.title for tx in rows]


def test_default_view_is_newest_first_and_stable(records):
    assert _titles(view(records)) == ["Starbucks", "Zomato", "Salary", "Swiggy"]


def test_search_matches_title_category_and_amount(records):
    assert _titles(view(records, "food")) == ["Zomato", "Swiggy"]
    assert _titles(view(records, "STAR")) == ["Starbucks"]
    assert _titles(view(records, "120.5")) == ["Zomato"]
    assert _titles(view(records, "1000")) == ["Salary"]


def test_filters(records):
    assert _titles(view(records, filters=ViewFilters(type="income"))) == ["Salary"]
    assert _titles(view(records, filters=ViewFilters(category="Food"))) == ["Zomato", "Swiggy"]
    in_range = view(records, filters=ViewFilters(start_date="2025-11-01", end_date="2025-11-05"))
    assert _titles(in_range) == ["Starbucks", "Zomato", "Salary"]


def test_sort_by_amount_ascending(records):
    assert _titles(view(records, sort=SortSpec("amount", "asc"))) == ["Zomato", "Swiggy", "Starbucks", "Salary"]


def test_view_does_not_mutate_input(records):
    before = list(records)
    view(records, "food", ViewFilters(type="expense"), SortSpec("title", "asc"))
    assert records == before


def test_view_is_idempotent(records):
    filters = ViewFilters(type="expense")
    sort = SortSpec("category", "asc")
    assert view(records, "", filters, sort) == view(records, "", filters, sort)
    assert _titles(view(records, "", filters, sort)) == ["Swiggy", "Zomato", "Starbucks"]


def test_sort_spec_validation():
    with pytest.raises(ValueError):
        SortSpec("bogus")
    with pytest.raises(ValueError):
        SortSpec("date", "up")


def test_search_on_very_large_amount(make_tx):
    huge = make_tx("income", "1E+30", title="Windfall")
    assert _titles(view([huge], "1000000")) == ["Windfall"]
    assert view([huge], "coffee") == []


def test_categories_in(records):
    assert categories_in(records) == ["Other", "Salary", "Food"]
