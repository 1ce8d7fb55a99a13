from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BidValidationEnforcement(str, Enum):
    """Policy applied when a policy-governed check finds a violation."""

    enforce = "enforce"
    warn = "warn"
    skip = "skip"

    @classmethod
    def parse(cls, value: str) -> "BidValidationEnforcement":
        """
        Parse a configuration value (case-insensitive).

        Raises:
            ValueError: if the value is not one of enforce, warn, skip.
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown bid validation enforcement: {value!r}") from None


class PolicyAction(str, Enum):
    FAIL = "fail"
    WARN = "warn"
    PASS = "pass"


class UnexpectedEnforcementError(RuntimeError):
    """
    Raised for an enforcement value outside the closed set.
    This is a configuration defect, never a validation outcome.
    """


@dataclass(frozen=True)
class PolicyDecision:
    action: PolicyAction
    warning: Optional[str] = None


PASS = PolicyDecision(PolicyAction.PASS)


def resolve_enforcement(
    account_level: Optional[BidValidationEnforcement],
    default_level: BidValidationEnforcement,
) -> BidValidationEnforcement:
    """Account-level override wins; otherwise the validator default."""
    return account_level if account_level is not None else default_level


def apply_policy(enforcement: BidValidationEnforcement, message: str) -> PolicyDecision:
    """
    Map an enforcement level and a violation message to a decision.

    Shared by the banner size and secure markup checks so both categories
    behave identically:
        enforce -> FAIL (message becomes the failure)
        warn    -> WARN (message becomes a warning)
        skip    -> PASS

    Raises:
        UnexpectedEnforcementError: for anything outside the enum.
    """
    if enforcement is BidValidationEnforcement.enforce:
        return PolicyDecision(PolicyAction.FAIL, message)
    if enforcement is BidValidationEnforcement.warn:
        return PolicyDecision(PolicyAction.WARN, message)
    if enforcement is BidValidationEnforcement.skip:
        return PASS
    raise UnexpectedEnforcementError(f"Unexpected enforcement: {enforcement}")
