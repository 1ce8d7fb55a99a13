import os
from dataclasses import dataclass
from typing import Tuple

from src.validation.enforcement import BidValidationEnforcement


@dataclass(frozen=True)
class ValidatorConfig:
    """Host-level defaults for response bid validation."""

    # Default enforcement per policy category (accounts may override)
    banner_max_size_enforcement: BidValidationEnforcement = BidValidationEnforcement.skip
    secure_markup_enforcement: BidValidationEnforcement = BidValidationEnforcement.skip

    # Bids without a matching imp are usually bidder bugs; log ~1% of them
    unmatched_bid_log_probability: float = 0.01

    # Scheme markers scanned for in creative markup (plain and URL-encoded)
    insecure_markup_markers: Tuple[str, ...] = ("http:", "http%3A")
    secure_markup_markers: Tuple[str, ...] = ("https:", "https%3A")

    @classmethod
    def from_env(cls) -> "ValidatorConfig":
        """
        Build a config from environment variables, falling back to defaults.

            BID_VALIDATION_BANNER_MAX_SIZE  enforce | warn | skip
            BID_VALIDATION_SECURE_MARKUP    enforce | warn | skip
        """
        defaults = cls()
        banner = os.environ.get("BID_VALIDATION_BANNER_MAX_SIZE")
        secure = os.environ.get("BID_VALIDATION_SECURE_MARKUP")
        return cls(
            banner_max_size_enforcement=(
                BidValidationEnforcement.parse(banner) if banner else defaults.banner_max_size_enforcement
            ),
            secure_markup_enforcement=(
                BidValidationEnforcement.parse(secure) if secure else defaults.secure_markup_enforcement
            ),
        )


# Global singleton config instance
config = ValidatorConfig()
