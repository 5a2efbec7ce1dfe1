import math

import pytest

from qbank_admin.api.subjects import SUBJECTS
from qbank_admin.core.database import Store
from qbank_admin.core.numbers import SQL_INT_MAX
from qbank_admin.services.pagination import NOT_READY_WARNING, PageParams, paginate, total_pages


@pytest.mark.parametrize("raw,expected", [(None, 1), ("0", 1), ("-4", 1), ("3", 3), ("abc", 1), (" 2 ", 2)])
def test_page_is_clamped_to_at_least_one(raw, expected):
    assert PageParams.coerce(page=raw).page == expected


@pytest.mark.parametrize("raw,expected", [(None, 10), ("500", 100), ("100", 100), ("0", 1), ("-1", 1), ("x", 10), ("25", 25)])
def test_page_size_is_clamped_into_bounds(raw, expected):
    assert PageParams.coerce(page_size=raw).page_size == expected


def test_search_is_trimmed_and_blank_dropped():
    assert PageParams.coerce(search="  meteo ").search == "meteo"
    assert PageParams.coerce(search="   ").search is None
    assert PageParams.coerce().search is None


def test_offset():
    assert PageParams(page=3, page_size=20).offset == 40


@pytest.mark.parametrize("total,size,expected", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (15, 10, 2), (101, 100, 2)])
def test_total_pages(total, size, expected):
    assert total_pages(total, size) == expected


def test_second_page_of_fifteen(store, make):
    for i in range(15):
        make.subject(f"Subject {i}")
    result = paginate(store, SUBJECTS, PageParams.coerce(page="2", page_size="10"))
    assert len(result.data) == 5
    assert (result.page, result.page_size, result.total, result.total_pages) == (2, 10, 15, 2)
    assert result.warning is None


def test_window_bounds_hold_for_every_page(store, make):
    for i in range(23):
        make.subject(f"Subject {i}")
    for size in (1, 4, 10, 23, 100):
        for page in range(1, math.ceil(23 / size) + 2):
            result = paginate(store, SUBJECTS, PageParams(page=page, page_size=size))
            assert len(result.data) <= size
            assert result.total_pages == math.ceil(23 / size)
            if result.data:
                assert page * size - size < result.total
            else:
                assert page > result.total_pages


def test_newest_first(store, make):
    first = make.subject("first")
    second = make.subject("second")
    result = paginate(store, SUBJECTS, PageParams())
    assert [s.id for s in result.data] == [second, first]


def test_empty_store_reports_zero_pages(store):
    result = paginate(store, SUBJECTS, PageParams())
    assert result.total == 0 and result.total_pages == 0 and result.data == []


def test_unprovisioned_tables_give_advisory_page():
    bare = Store("sqlite://")
    try:
        result = paginate(bare, SUBJECTS, PageParams(page=3, page_size=50))
    finally:
        bare.dispose()
    assert result.data == []
    assert (result.page, result.page_size, result.total, result.total_pages) == (1, 10, 0, 0)
    assert result.warning == NOT_READY_WARNING


def test_missing_database_url_gives_advisory_page():
    result = paginate(Store(None), SUBJECTS, PageParams())
    assert result.total == 0
    assert result.warning == NOT_READY_WARNING


def test_huge_page_keeps_offset_in_sql_range():
    params = PageParams.coerce(page="99999999999999999999", page_size="10")
    assert params.offset <= SQL_INT_MAX
    assert params.page > 10**17


def test_huge_page_is_an_empty_window(store, make):
    for i in range(3):
        make.subject(f"Subject {i}")
    result = paginate(store, SUBJECTS, PageParams.coerce(page=str(10**30), page_size="100"))
    assert result.data == []
    assert (result.total, result.total_pages) == (3, 1)


@pytest.mark.parametrize("raw", ["1_0", "٣", "+2", "2.0"])
def test_only_plain_decimal_pages_are_read(raw):
    assert PageParams.coerce(page=raw).page == 1
