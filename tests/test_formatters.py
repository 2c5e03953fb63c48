import pytest

from bbmp_launcher.cli.formatters import format_session_length


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, "0:00:00"),
        (4.9, "0:00:04"),
        (247, "0:04:07"),
        (93600, "26:00:00"),
        (-3, "0:00:00"),
    ],
)
def test_format_session_length(seconds, expected):
    assert format_session_length(seconds) == expected
