"""Ingredient matching against a density reference list."""

from .catalog import ReferenceCatalog, strip_decoration
from .density import parse_density_value
from .matching import CompletionService, MatchSettings, initial_turns, resolve
from .models import (
    Action,
    AttemptEvent,
    Completion,
    CompletionParams,
    Confidence,
    ConversationResult,
    ConversationTurn,
    MatchCandidate,
    MissingIngredient,
    ReferenceIngredient,
    Resolution,
    ResolvedOutcome,
    Usage,
)
from .prompts import build_base_prompt, build_question
from .resolution import apply_outcome, resolve_missing_densities
from .responses import parse_response

__all__ = [
    "Action",
    "AttemptEvent",
    "Completion",
    "CompletionParams",
    "CompletionService",
    "Confidence",
    "ConversationResult",
    "ConversationTurn",
    "MatchCandidate",
    "MatchSettings",
    "MissingIngredient",
    "ReferenceCatalog",
    "ReferenceIngredient",
    "Resolution",
    "ResolvedOutcome",
    "Usage",
    "apply_outcome",
    "build_base_prompt",
    "build_question",
    "initial_turns",
    "parse_density_value",
    "parse_response",
    "resolve",
    "resolve_missing_densities",
    "strip_decoration",
]
