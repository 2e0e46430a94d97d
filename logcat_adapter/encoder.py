"""Short channel identifier allocation.

Source names are abbreviated to at most ID_LENGTH uppercase characters.
Long names are shrunk by sampling every (len // ID_LENGTH)-th character, so
"WifiVendorHal" becomes "WINR". When an abbreviation is already taken, a
letter suffix derived from a CRC-32 seeded counter is appended, replacing
trailing characters of the abbreviation, until an unused identifier is found.
"""

import logging
import string
import zlib

logger = logging.getLogger(__name__)

ID_LENGTH = 4
EMPTY_NAME_ID = "Z"

_ALNUM = frozenset(string.ascii_letters + string.digits)
_LETTERS = string.ascii_uppercase


class IdSpaceExhaustedError(RuntimeError):
    """No unique identifier can be derived for a base name."""


def sanitize_name(name: str) -> str:
    """Keep ASCII letters and digits only, in their input order."""
    return "".join(c for c in name if c in _ALNUM)


def shrink_by_stride(name: str, length: int = ID_LENGTH) -> str:
    """Sample `length` characters at a fixed stride starting from index 0.

    Names no longer than `length` are returned unchanged. The stride is
    floored, so the tail of the name may never be sampled.
    """
    if len(name) <= length:
        return name
    interval = len(name) // length
    return "".join(name[i * interval] for i in range(length))


def int_to_letters(value: int) -> str:
    """Positional base-26 over A-Z: 0 -> "A", 25 -> "Z", 26 -> "BA"."""
    if value < 0:
        raise ValueError(f"Cannot encode negative value {value}")
    base = len(_LETTERS)
    digits = [_LETTERS[value % base]]
    value //= base
    while value:
        digits.append(_LETTERS[value % base])
        value //= base
    return "".join(reversed(digits))


def hash_counter(candidate: str) -> int:
    """Deterministic suffix seed in the range [1, 9]."""
    return zlib.crc32(candidate.encode("utf-8")) % 9 + 1


def with_suffix(base: str, counter: int, length: int = ID_LENGTH) -> str:
    """Append the letter code of `counter`, dropping trailing base characters to fit.

    Raises IdSpaceExhaustedError once the letter code alone exceeds `length`.
    """
    suffix = int_to_letters(counter)
    if len(base) + len(suffix) <= length:
        return base + suffix

    keep = length - len(suffix)
    if keep < 0:
        raise IdSpaceExhaustedError(
            f"Out of identifier range for {base!r}: suffix {suffix!r} is longer than {length}"
        )
    return base[:keep] + suffix


class ContextIdEncoder:
    """Issues identifiers that are unique for the lifetime of the encoder."""

    def __init__(self, length: int = ID_LENGTH):
        self._length = length
        self._issued: set[str] = set()

    @property
    def issued(self) -> frozenset[str]:
        return frozenset(self._issued)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._issued

    def __len__(self) -> int:
        return len(self._issued)

    def reserve(self, identifier: str):
        """Mark an identifier as taken without deriving it from a name."""
        self._issued.add(identifier)

    def allocate(self, name: str) -> str:
        """Return a new unique identifier for `name` and record it as issued."""
        base = sanitize_name(name).upper() or EMPTY_NAME_ID
        base = shrink_by_stride(base, self._length)

        candidate = base
        if candidate in self._issued:
            counter = hash_counter(base)
            candidate = with_suffix(base, counter, self._length)
            while candidate in self._issued:
                counter += 1
                candidate = with_suffix(base, counter, self._length)
            logger.debug("Identifier %s taken, resolved %r to %s", base, name, candidate)

        self._issued.add(candidate)
        return candidate
