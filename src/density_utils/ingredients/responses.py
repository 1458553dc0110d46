"""Parsing of free-text model replies into match candidates."""

import re

from ..errors import ParseError
from .catalog import strip_decoration
from .models import Confidence, MatchCandidate

_LEADING_DECORATION = re.compile(r"^[\s:*]+")
_TRAILING_DECORATION = re.compile(r"[\s*.]+$")
_NO_MATCH_PATTERN = re.compile(r"\bNO[\s_-]*MATCH$", re.IGNORECASE)
_MATCH_PATTERN = re.compile(
    r"\s*:*\s*\**\s*\b(HIGH|MEDIUM|LOW)\b\s*\**\s*,\s*Match[ \t]*:*[ \t]*\**([^\n]+?)\**[ \t]*(?:\n|$)",
    re.IGNORECASE,
)


def trim_decoration(text: str) -> str:
    """Strip leading colons/asterisks and trailing asterisks/full stops."""
    text = _LEADING_DECORATION.sub("", text)
    return _TRAILING_DECORATION.sub("", text)


def parse_response(text: str) -> MatchCandidate:
    """Turn one model reply into a ``MatchCandidate``.

    Accepts ``"<confidence>, Match <ingredient>"`` (the reply usually
    continues a primed ``Confidence:``) or a reply ending in ``NO MATCH``.
    Token case and stray colons or asterisks are tolerated. Only the first
    line after ``Match`` is the ingredient; later lines are ignored.

    Examples:
        >>> parse_response(" HIGH, Match **flour**")
        MatchCandidate(confidence=<Confidence.HIGH: 'HIGH'>, match_to='flour')
        >>> parse_response("NO MATCH").confidence
        <Confidence.NO_MATCH: 'NO MATCH'>

    Raises:
        ParseError: If the reply matches neither format.
    """
    trimmed = trim_decoration(text or "")

    if _NO_MATCH_PATTERN.search(trimmed):
        return MatchCandidate(Confidence.NO_MATCH)

    match = _MATCH_PATTERN.search(trimmed)
    if match:
        match_to = trim_decoration(strip_decoration(match.group(2)))
        if match_to:
            return MatchCandidate(Confidence(match.group(1).upper()), match_to)

    raise ParseError(text)
