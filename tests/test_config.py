import pytest

from src.validation.config import ValidatorConfig, config
from src.validation.enforcement import BidValidationEnforcement


def test_defaults():
    assert config.banner_max_size_enforcement is BidValidationEnforcement.skip
    assert config.secure_markup_enforcement is BidValidationEnforcement.skip
    assert config.unmatched_bid_log_probability == 0.01
    assert config.insecure_markup_markers == ("http:", "http%3A")
    assert config.secure_markup_markers == ("https:", "https%3A")


def test_from_env(monkeypatch):
    monkeypatch.setenv("BID_VALIDATION_BANNER_MAX_SIZE", "enforce")
    monkeypatch.setenv("BID_VALIDATION_SECURE_MARKUP", "Warn")
    settings = ValidatorConfig.from_env()
    assert settings.banner_max_size_enforcement is BidValidationEnforcement.enforce
    assert settings.secure_markup_enforcement is BidValidationEnforcement.warn


def test_from_env_falls_back_to_defaults(monkeypatch):
    monkeypatch.delenv("BID_VALIDATION_BANNER_MAX_SIZE", raising=False)
    monkeypatch.delenv("BID_VALIDATION_SECURE_MARKUP", raising=False)
    assert ValidatorConfig.from_env() == ValidatorConfig()


def test_from_env_rejects_unknown_level(monkeypatch):
    monkeypatch.setenv("BID_VALIDATION_BANNER_MAX_SIZE", "block")
    with pytest.raises(ValueError):
        ValidatorConfig.from_env()
