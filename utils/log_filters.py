import logging
import re
from typing import Sequence


class CredentialFilter(logging.Filter):
    """Mask API credentials that end up in log records.

    Bearer tokens and OpenAI style `sk-...` keys are replaced with `***`
    in the formatted message. The record is never dropped.
    """

    MASK = "***"

    def __init__(self, patterns: Sequence[str] | None = None):
        super().__init__()
        if patterns is None:
            patterns = (
                r"(?<=Bearer )[^\s'\"]+",
                r"sk-[A-Za-z0-9_\-]{8,}",
            )
        self.patterns = tuple(re.compile(p) for p in patterns)

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = record.getMessage()
        except Exception:
            return True

        masked = msg
        for p in self.patterns:
            masked = p.sub(self.MASK, masked)
        if masked != msg:
            record.msg = masked
            record.args = None
        return True
