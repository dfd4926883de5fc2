"""
Document change detection.

A fingerprint is a polynomial rolling hash over the code points of a
text, base 31, kept to 64 bits. The seed is non-zero so that the empty
string and strings of leading NUL characters get distinct values, and the
odd base makes every single-character substitution change the value.

Fingerprints only feed logs and run reports; edits are always computed
from the texts themselves.
"""

FINGERPRINT_BASE = 31
FINGERPRINT_SEED = 0xcbf29ce484222325
_MASK = (1 << 64) - 1


def fingerprint(text: str) -> int:
    """Fingerprint of text as an unsigned 64-bit int."""
    value = FINGERPRINT_SEED
    for char in text:
        value = (value * FINGERPRINT_BASE + ord(char)) & _MASK
    return value


def changed(before: int, after: int) -> bool:
    """Whether the text behind two fingerprints differs."""
    return before != after
