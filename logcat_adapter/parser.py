"""Metadata header decoder for logcat "monotonic long" output.

Expected header format:
    [ 6252.287  443:  530 E/WifiVendorHal ]
"""

import re

from logcat_adapter.models import Metadata

_WHITESPACE_RE = re.compile(r"\s+")


def tokenize(line: str) -> tuple[str, ...]:
    """Split on whitespace runs. A leading separator yields an empty first token."""
    tokens = _WHITESPACE_RE.split(line)
    if tokens and tokens[-1] == "":
        tokens.pop()
    return tuple(tokens)


def parse_metadata(line: str) -> Metadata | None:
    """Decode a header line. Returns None for anything that is not a valid header."""
    metadata = Metadata(tokenize(line))
    if metadata.is_valid():
        return metadata
    return None
