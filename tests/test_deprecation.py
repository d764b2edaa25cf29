import pytest

from gqlbind.deprecation import DeprecationStatus, DeprecationStrategy


@pytest.mark.parametrize(
    "text, expected",
    [
        ("allow", DeprecationStrategy.ALLOW),
        ("deny", DeprecationStrategy.DENY),
        ("warn", DeprecationStrategy.WARN),
    ],
)
def test_parse_known_strategies(text, expected):
    assert DeprecationStrategy.parse(text) is expected


def test_parse_trims_whitespace():
    assert DeprecationStrategy.parse("  deny \n") is DeprecationStrategy.DENY


@pytest.mark.parametrize("text", ["foo", "", "Warn", "DENY"])
def test_parse_rejects_unknown_or_miscased(text):
    with pytest.raises(ValueError):
        DeprecationStrategy.parse(text)


def test_parse_round_trips_values():
    for strategy in DeprecationStrategy:
        assert DeprecationStrategy.parse(strategy.value) is strategy


def test_status_defaults_to_current():
    status = DeprecationStatus()
    assert status.deprecated is False
    assert status.reason is None


def test_status_equality_and_hash():
    a = DeprecationStatus(deprecated=True, reason="old")
    b = DeprecationStatus(deprecated=True, reason="old")
    c = DeprecationStatus(deprecated=True)
    assert a == b
    assert len({a, b, c, DeprecationStatus()}) == 3