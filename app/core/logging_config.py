"""
Process-wide logging setup: one stream handler, plain text, credentials masked.
"""
from __future__ import annotations

import logging
import re
import sys

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class SensitiveDataFilter(logging.Filter):
    """Mask API keys before a record is emitted."""

    SENSITIVE_PATTERNS = [
        (re.compile(r"([?&]key=)[^&\s\"']+", re.IGNORECASE), r"\1***"),
        (re.compile(r"(api[_-]?key[\"']?\s*[:=]\s*[\"']?)[^\"'\s&,]+", re.IGNORECASE), r"\1***"),
    ]

    def _mask(self, value: str) -> str:
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            value = pattern.sub(replacement, value)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(self._mask(a) if isinstance(a, str) else a for a in record.args)
        return True


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in root.handlers:
        if getattr(handler, "_analysis_handler", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler.addFilter(SensitiveDataFilter())
    handler._analysis_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
