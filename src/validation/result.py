from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one bid.

    A failed result carries exactly one error message plus the warnings
    collected by checks that ran before the failing one.
    """

    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, warnings: List[str] = None) -> "ValidationResult":
        return cls(warnings=list(warnings or []), errors=[])

    @classmethod
    def error(cls, warnings: List[str], message: str) -> "ValidationResult":
        return cls(warnings=list(warnings or []), errors=[message])

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
