"""
Name normalizer — turns a raw name into canonical forms for fuzzy matching.

Pipeline (order matters, each step feeds the next):
  1. ASCII lowercase (non-ASCII characters are left alone here)
  2. Drop every character that is not an ASCII letter, digit or whitespace
  3. Trim leading/trailing whitespace
  4. Collapse whitespace runs to a single space
  5. Split into tokens, drop tokens shorter than MIN_TOKEN_LENGTH
  6. Join survivors with spaces (spaced form) and without (concatenated form)

Empty input, or input with no surviving tokens, gives two empty forms.

Public API:
    normalize(raw) → NormalizedName
"""

import logging
import re
import string
from dataclasses import dataclass, field

from config.scoring import MIN_TOKEN_LENGTH

logger = logging.getLogger(__name__)

_ASCII_LOWER_TABLE = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

# ASCII whitespace only, same set as C isspace().
_WHITESPACE = " \t\n\r\v\f"
_PUNCTUATION_RE = re.compile(rf"[^A-Za-z0-9{re.escape(_WHITESPACE)}]")
_WHITESPACE_RUN_RE = re.compile(rf"[{re.escape(_WHITESPACE)}]+")


# ═══════════════════════════════════════════════════════════════════════════
# Data class
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class NormalizedName:
    """The two canonical forms of one raw name."""

    spaced: str = ""
    concatenated: str = ""
    raw: str = field(default="", compare=False)

    @property
    def tokens(self) -> list[str]:
        return self.spaced.split(" ") if self.spaced else []

    def __bool__(self) -> bool:
        return bool(self.spaced)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def normalize(raw: str | None) -> NormalizedName:
    """
    Build the spaced and concatenated forms of *raw*.

    Args:
        raw: Any string. None is treated as an empty string.

    Returns:
        NormalizedName. Both forms are empty when no token survives.
    """
    if not raw:
        return NormalizedName(raw=raw or "")

    text = _lowercase_ascii(raw)
    text = _PUNCTUATION_RE.sub("", text)
    text = text.strip(_WHITESPACE)
    text = _WHITESPACE_RUN_RE.sub(" ", text)

    tokens = _filter_tokens(text.split(" ") if text else [])

    return NormalizedName(
        spaced=" ".join(tokens),
        concatenated="".join(tokens),
        raw=raw,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _lowercase_ascii(text: str) -> str:
    """Lowercase A-Z only; str.lower() would also fold non-ASCII letters."""
    return text.translate(_ASCII_LOWER_TABLE)


def _filter_tokens(tokens: list[str], min_length: int = MIN_TOKEN_LENGTH) -> list[str]:
    kept = [token for token in tokens if len(token) >= min_length]
    if len(kept) < len(tokens):
        logger.debug(f"Dropped {len(tokens) - len(kept)} short token(s) from {tokens}")
    return kept
