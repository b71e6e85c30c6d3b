import pytest

from apps.api.core.deps import MAX_ID, MIN_ID, parse_user_id


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("7", 7),
        ("+3", 3),
        ("-5", -5),
        (str(MAX_ID), MAX_ID),
        (str(MIN_ID), MIN_ID),
    ],
)
def test_parse_user_id_accepts_decimal_int64(raw, expected):
    assert parse_user_id(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "1_0", " 7", "7 ", "1.0", "0x10", str(MAX_ID + 1), str(MIN_ID - 1)])
def test_parse_user_id_rejects_everything_else(raw):
    assert parse_user_id(raw) is None
