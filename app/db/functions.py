"""
==============================================================================
SQL Function Shims
==============================================================================

SQLite implementations of the PostgreSQL functions used by the catalog
search query, registered on every new SQLite connection:

- similarity(a, b): pg_trgm trigram similarity
- category_to_text(category): text rendering of a category label
- greatest(...): maximum of the non-NULL arguments

Trigram semantics follow pg_trgm:
- input is lower-cased and split into words on non-alphanumeric characters
- each word is padded with two leading blanks and one trailing blank
- similarity is |A ∩ B| / |A ∪ B| over the two trigram sets

PostgreSQL gets the real functions from the pg_trgm extension and the
schema bootstrap in init_db.

==============================================================================
"""

from __future__ import annotations

import re
from typing import Optional, Set

# Word characters for pg_trgm are alphanumerics
_WORD_RE = re.compile(r"[^\W_]+", re.UNICODE)


def trigrams(text: Optional[str]) -> Set[str]:
    """
    Build the pg_trgm trigram set of a string.

    Example:
        >>> sorted(trigrams("Toy"))
        ['  t', ' to', 'oy ', 'toy']
    """
    result: Set[str] = set()
    if not text:
        return result

    for word in _WORD_RE.findall(text.lower()):
        padded = f"  {word} "
        for i in range(len(padded) - 2):
            result.add(padded[i:i + 3])

    return result


def similarity(left: Optional[str], right: Optional[str]) -> Optional[float]:
    """
    Trigram similarity in [0, 1]; NULL in, NULL out.

    Example:
        >>> similarity("toy", "toys")
        0.5
    """
    if left is None or right is None:
        return None

    a = trigrams(left)
    b = trigrams(right)
    union = a | b
    if not union:
        return 0.0

    return len(a & b) / len(union)


def category_to_text(category: Optional[str]) -> Optional[str]:
    """Render a stored category label as text."""
    if category is None:
        return None
    return str(category)


def greatest(*values):
    """Maximum of the non-NULL arguments, NULL when all are NULL."""
    present = [v for v in values if v is not None]
    if not present:
        return None
    return max(present)


def register_sqlite_functions(dbapi_connection) -> None:
    """
    Register the shims on a raw sqlite3 connection.

    Args:
        dbapi_connection: sqlite3.Connection from a connect event
    """
    dbapi_connection.create_function("similarity", 2, similarity, deterministic=True)
    dbapi_connection.create_function("category_to_text", 1, category_to_text, deterministic=True)
    dbapi_connection.create_function("greatest", -1, greatest, deterministic=True)
