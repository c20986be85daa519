import pytest

from src.app.query.pagination import assemble


@pytest.mark.parametrize(
    "total,page_size,expected",
    [
        (0, 10, 0),
        (1, 10, 1),
        (10, 10, 1),
        (11, 10, 2),
        (50, 20, 3),
        (42, 10, 5),
        (25, 10, 3),
    ],
)
def test_total_pages_rounds_up(total, page_size, expected):
    result = assemble([], total, 1, page_size)
    assert result.total_pages == expected


def test_envelope_serializes_with_camel_case_keys():
    result = assemble([{"id": 1}], 1, 1, 10)
    assert result.model_dump(by_alias=True) == {
        "data": [{"id": 1}],
        "total": 1,
        "page": 1,
        "pageSize": 10,
        "totalPages": 1,
    }


def test_page_beyond_last_keeps_requested_page():
    result = assemble([], 5, 3, 10)
    assert result.page == 3
    assert result.total_pages == 1
    assert result.data == []
