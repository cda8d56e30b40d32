"""Provider error inspection shared by synthesis and feedback clients."""

from __future__ import annotations

import re
from typing import Iterable

from fivestep.exceptions import QuotaExceededError

QUOTA_STATUS_CODES = {429}
QUOTA_STATUS_NAMES = {"RESOURCE_EXHAUSTED"}
QUOTA_MESSAGE_PATTERN = re.compile(
    r"\b429\b|quota|exhausted|rate.?limit", re.IGNORECASE
)


def iter_exception_chain(exc: BaseException) -> Iterable[BaseException]:
    """Yield exc and its causes/contexts, each once."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        yield current
        seen.add(id(current))
        current = current.__cause__ or current.__context__


def is_quota_error(exc: BaseException) -> bool:
    """True if anything in the chain signals rate or quota exhaustion.

    Looks at provider status codes (``code`` on google-genai errors,
    ``status_code`` on anthropic/httpx errors), provider status names,
    and finally the message of every exception in the chain.
    """
    for item in iter_exception_chain(exc):
        if isinstance(item, QuotaExceededError):
            return True
        for attr in ("code", "status_code"):
            if getattr(item, attr, None) in QUOTA_STATUS_CODES:
                return True
        if str(getattr(item, "status", "") or "").upper() in QUOTA_STATUS_NAMES:
            return True
        if QUOTA_MESSAGE_PATTERN.search(str(item)):
            return True
    return False
