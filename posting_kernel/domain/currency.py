"""Currency -- ISO 4217 alphabetic code normalisation.

The kernel never converts or rounds amounts, so it needs no per-currency
metadata. A code is accepted when it has the ISO 4217 alphabetic shape:
three Latin letters, upper-cased after surrounding whitespace is removed.
Membership in the published code list is the event store's concern.
"""

import re

from posting_kernel.exceptions import InvalidCurrencyError

_ISO_4217_ALPHA = re.compile(r"[A-Z]{3}")


def normalize_currency_code(code: str) -> str:
    """Upper-case and strip ``code``, then check its ISO 4217 shape.

    Raises:
        InvalidCurrencyError: If the code is not three Latin letters.
    """
    if not isinstance(code, str):
        raise InvalidCurrencyError(str(code))

    normalized = code.strip().upper()
    if not _ISO_4217_ALPHA.fullmatch(normalized):
        raise InvalidCurrencyError(code)
    return normalized
