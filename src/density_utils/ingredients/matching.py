"""Multi-turn matching conversation for a single missing ingredient."""

import dataclasses
import threading
from typing import List, Optional, Protocol

from ..errors import ParseError, TransportError
from . import prompts
from .catalog import ReferenceCatalog
from .models import (
    ROLE_ASSISTANT,
    ROLE_USER,
    AttemptEvent,
    Completion,
    CompletionParams,
    Confidence,
    ConversationResult,
    ConversationTurn,
    MissingIngredient,
    ResolvedOutcome,
    Usage,
)
from .responses import parse_response

PRIMING_TEXT = "Confidence:"


class CompletionService(Protocol):
    def invoke(
        self, turns: List[ConversationTurn], params: CompletionParams
    ) -> Completion:
        ...


@dataclasses.dataclass(frozen=True)
class MatchSettings:
    max_attempts: int = 5
    max_tokens: int = 10000
    temperature: float = 0.3

    @property
    def params(self) -> CompletionParams:
        return CompletionParams(self.max_tokens, self.temperature)


def initial_turns(base_prompt: str, ingredient_name: str) -> List[ConversationTurn]:
    """Opening turns: cached instructions, the question, and a primed reply."""
    return [
        ConversationTurn(ROLE_USER, base_prompt, cache_breakpoint=True),
        ConversationTurn(ROLE_USER, prompts.build_question(ingredient_name)),
        ConversationTurn(ROLE_ASSISTANT, PRIMING_TEXT),
    ]


def resolve(
    record: MissingIngredient,
    base_prompt: str,
    catalog: ReferenceCatalog,
    service: CompletionService,
    settings: MatchSettings = MatchSettings(),
    cancel_event: Optional[threading.Event] = None,
) -> ConversationResult:
    """Ask the model to match ``record`` to an entry of ``catalog``.

    Each attempt sends the whole conversation and handles the reply:

    - unparsable reply or a match missing from the catalog: the reply and a
      correction are appended and the next attempt is made;
    - LOW confidence: kept as the fallback and the model is asked for a more
      generic entry;
    - MEDIUM or HIGH: accepted, the conversation ends;
    - NO MATCH or a transport error: the conversation ends.

    Afterwards a LOW fallback replaces a missing or NO MATCH result. The
    result has no outcome when nothing was accepted or the conversation was
    cancelled. Nothing is logged here; callers log ``result.events``.
    """
    turns = initial_turns(base_prompt, record.ingredient)
    params = settings.params
    events: List[AttemptEvent] = []
    usage = Usage()

    current: Optional[ResolvedOutcome] = None
    fallback: Optional[ResolvedOutcome] = None
    attempts = 0

    def cancelled_result() -> ConversationResult:
        return ConversationResult(
            None, attempts, events, cancelled=True, usage=usage
        )

    while attempts < settings.max_attempts:
        if cancel_event is not None and cancel_event.is_set():
            return cancelled_result()

        attempts += 1
        try:
            completion = service.invoke(list(turns), params)
        except TransportError as e:
            events.append(AttemptEvent(attempts, "transport_error", str(e)))
            break

        if cancel_event is not None and cancel_event.is_set():
            return cancelled_result()
        usage = usage + completion.usage

        try:
            candidate = parse_response(completion.text)
        except ParseError as e:
            events.append(AttemptEvent(attempts, "parse_error", e.text))
            turns.append(ConversationTurn(ROLE_ASSISTANT, completion.text))
            turns.append(ConversationTurn(ROLE_USER, prompts.build_format_reminder()))
            continue

        if candidate.match_to is None:
            events.append(AttemptEvent(attempts, "no_match"))
            current = ResolvedOutcome(candidate, None)
            break

        reference = catalog.lookup(candidate.match_to)
        if reference is None:
            events.append(AttemptEvent(attempts, "not_in_reference", candidate.match_to))
            turns.append(ConversationTurn(ROLE_ASSISTANT, completion.text))
            turns.append(
                ConversationTurn(
                    ROLE_USER, prompts.build_not_in_reference(candidate.match_to)
                )
            )
            current = None
            continue

        if candidate.confidence is Confidence.LOW:
            events.append(AttemptEvent(attempts, "low", reference.normalised))
            fallback = ResolvedOutcome(candidate, reference)
            current = None
            turns.append(
                ConversationTurn(
                    ROLE_USER,
                    prompts.build_generic_check(record.ingredient, reference.normalised),
                )
            )
            continue

        events.append(AttemptEvent(attempts, "match", reference.normalised))
        current = ResolvedOutcome(candidate, reference)
        break

    used_fallback = False
    if fallback is not None and (
        current is None or current.confidence is Confidence.NO_MATCH
    ):
        current = fallback
        used_fallback = True

    return ConversationResult(current, attempts, events, used_fallback, usage=usage)
