"""Search term parsing (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

QUOTES = ("\"", "'")
NEGATION = "-"


@dataclass(frozen=True)
class Terms:
    """Parsed terms, split by polarity and kept in input order."""

    positives: Tuple[str, ...]
    negatives: Tuple[str, ...]


def tokenize(query: str) -> List[str]:
    """Split a query on spaces, keeping quoted spans together.

    A span is opened by a single or double quote and closed only by the same
    character; the other quote inside it is literal. Closing a span ends the
    token. An unmatched opening quote is dropped and whatever followed it is
    still returned as a token.
    """

    tokens: List[str] = []
    current: List[str] = []
    quote_char = None

    def flush() -> None:
        if current:
            tokens.append("".join(current))
            current.clear()

    for ch in query:
        if ch in QUOTES:
            if quote_char is None:
                quote_char = ch
            elif ch == quote_char:
                flush()
                quote_char = None
            else:
                current.append(ch)
        elif ch == " " and quote_char is None:
            flush()
        else:
            current.append(ch)
    flush()
    return tokens


def parse_terms(query: str) -> Terms:
    """Return positive and negative terms for a raw command query.

    Tokens starting with ``-`` are exclusions with the marker stripped. Terms
    are returned as typed; case folding happens when the filter is compiled.
    """

    positives: List[str] = []
    negatives: List[str] = []
    for token in tokenize(query):
        if token.startswith(NEGATION):
            term = token[1:]
            # A lone "-" (or a quoted "- ") carries no term.
            if term.strip():
                negatives.append(term)
        elif token.strip():
            positives.append(token)
    return Terms(positives=tuple(positives), negatives=tuple(negatives))
