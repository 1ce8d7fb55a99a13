import pytest

from src.validation.currency import is_valid_currency


@pytest.mark.parametrize("code", ["USD", "EUR", "GBP", "JPY", "CHF"])
def test_known_codes(code):
    assert is_valid_currency(code)


@pytest.mark.parametrize("code", ["QQQ", "usd", "Usd", "US", "USDX", "", None, "12A"])
def test_unknown_or_malformed_codes(code):
    assert not is_valid_currency(code)
