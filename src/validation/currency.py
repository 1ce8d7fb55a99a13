from functools import lru_cache
from typing import Optional

import pycountry


@lru_cache(maxsize=512)
def is_valid_currency(code: Optional[str]) -> bool:
    """
    Check that `code` is a known ISO 4217 alphabetic currency code.

    Matching is exact: codes must be three upper-case letters ("usd" is
    rejected even though it names a real currency).
    """
    if not code or len(code) != 3 or not code.isalpha() or not code.isupper():
        return False
    return pycountry.currencies.get(alpha_3=code) is not None
