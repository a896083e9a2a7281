"""Pull a coordinate token out of free-form agent output."""
from __future__ import annotations

import re
from typing import Optional

from app.errors import ParsingError

# Any letter followed by any digit. Range is checked later so that "D4"
# reads as an off-board move rather than gibberish.
_TOKEN_PATTERN = re.compile(r"(?<![A-Z])([A-Z])([0-9])(?![0-9])")
COORDINATE_PATTERN = re.compile(r"^[A-C][1-3]$")


def extract_coordinate_token(raw: Optional[str]) -> str:
    """Return the coordinate token in ``raw``, upper-cased.

    Prose often mentions other cells ("C4 is blocked, play B2"), so the first
    on-board token wins. Without one, the first letter+digit token is
    returned and left for the range check to reject.

    Raises:
        ParsingError: when ``raw`` is empty or has no such token
    """
    if raw is None or not str(raw).strip():
        raise ParsingError("Agent response was empty", {"raw": raw})

    cleaned = str(raw).strip().upper()
    tokens = [first + second for first, second in _TOKEN_PATTERN.findall(cleaned)]
    if not tokens:
        raise ParsingError(
            f"No coordinate found in agent response: {raw!r}",
            {"raw": raw},
        )
    return next((token for token in tokens if is_coordinate(token)), tokens[0])


def is_coordinate(value: str) -> bool:
    return bool(COORDINATE_PATTERN.match(value))
