"""Applying match outcomes to records and running whole batches."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from .catalog import ReferenceCatalog
from .matching import CompletionService, MatchSettings, resolve
from .models import (
    Action,
    Confidence,
    ConversationResult,
    MissingIngredient,
    Resolution,
    ResolvedOutcome,
    Usage,
)
from .prompts import build_base_prompt

logger = logging.getLogger(__name__)

ACTIONS: Dict[Confidence, Action] = {
    Confidence.LOW: Action.REVIEW,
    Confidence.NO_MATCH: Action.NO_MATCH,
    Confidence.MEDIUM: Action.AUTO_FILL,
    Confidence.HIGH: Action.AUTO_FILL,
}


def apply_outcome(
    record: MissingIngredient, outcome: ResolvedOutcome
) -> MissingIngredient:
    """Attach the resolution described by ``outcome`` to ``record``.

    The record keeps its identity; its ``resolution`` is replaced as a whole.
    Applying the same outcome again gives the same resolution.

    Args:
        record: The record that was matched.
        outcome: Final outcome of its conversation.

    Returns:
        The same record, for chaining.
    """
    reference = outcome.reference
    record.resolution = Resolution(
        action=ACTIONS.get(outcome.confidence),
        match_to=reference.normalised if reference else None,
        density=reference.density if reference else None,
        confidence=outcome.confidence.value,
    )
    return record


def log_conversation(index: int, record: MissingIngredient, result: ConversationResult):
    """Log what happened during one record's conversation."""
    label = f"Record {index + 1} ({record.ingredient})"
    for event in result.events:
        if event.kind == "transport_error":
            logger.error(f"{label}: error calling model on attempt {event.attempt}: {event.detail}")
        elif event.kind == "parse_error":
            logger.warning(f"{label}: could not parse response {event.detail!r}")
        elif event.kind == "not_in_reference":
            logger.warning(f"{label}: claimed match to {event.detail} not found in references")
        elif event.kind == "low":
            logger.info(f"{label}: low confidence match to {event.detail}, asking for a more generic match")
        elif event.kind == "match":
            logger.info(f"{label}: matched to {event.detail}")
        elif event.kind == "no_match":
            logger.info(f"{label}: no match found")

    if result.cancelled:
        logger.warning(f"{label}: cancelled after {result.attempts} attempts")
    elif result.outcome is None:
        logger.warning(f"{label}: unresolved after {result.attempts} attempts")
    else:
        if result.used_fallback:
            logger.info(f"{label}: using previous best match due to low confidence")
        logger.info(
            f"{label}: {record.action.value if record.action else '-'} {record.match_to or '-'} "
            f"density={record.density} (confidence: {record.confidence})"
        )


def resolve_missing_densities(
    missing: Sequence[MissingIngredient],
    catalog: ReferenceCatalog,
    service: CompletionService,
    limit: int = 0,
    writer=None,
    settings: MatchSettings = MatchSettings(),
    max_workers: int = 1,
    cancel_event: Optional[threading.Event] = None,
) -> List[MissingIngredient]:
    """Match missing ingredients against the reference catalog.

    Records are matched independently, optionally on a thread pool; the
    catalog and base prompt are shared read-only. Resolved records are
    passed to ``writer.write`` in input order as soon as every earlier
    record is done. Unresolved records are skipped.

    Args:
        missing: Records to resolve, in processing order.
        catalog: Reference ingredients with known densities.
        service: Completion service used for every conversation.
        limit: Maximum number of records to process; 0 means all.
        writer: Optional sink with a ``write(record)`` method.
        settings: Attempt budget and generation parameters.
        max_workers: Number of records matched concurrently.
        cancel_event: When set, no new records are started and in-flight
            conversations end unresolved.

    Returns:
        The resolved records, in input order.
    """
    if limit > 0:
        missing = missing[:limit]
    if cancel_event is None:
        cancel_event = threading.Event()

    base_prompt = build_base_prompt(catalog)
    resolved: List[MissingIngredient] = []
    total_usage = Usage()

    def match(record: MissingIngredient) -> ConversationResult:
        return resolve(record, base_prompt, catalog, service, settings, cancel_event)

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = [executor.submit(match, record) for record in missing]
        try:
            with tqdm(total=len(futures), desc="Matching densities") as pbar:
                # Collect in submission order so output rows keep input order
                for i, (record, future) in enumerate(zip(missing, futures)):
                    result = future.result()
                    total_usage = total_usage + result.usage
                    if result.outcome is not None:
                        apply_outcome(record, result.outcome)
                    log_conversation(i, record, result)
                    pbar.update(1)

                    if result.outcome is None:
                        continue
                    resolved.append(record)
                    if writer is not None:
                        writer.write(record)
                    else:
                        logger.info(f"No output writer provided, not writing record {i + 1}")
        except BaseException:
            cancel_event.set()
            raise
        finally:
            if cancel_event.is_set():
                for future in futures:
                    future.cancel()

    logger.info(
        f"Resolved {len(resolved)}/{len(missing)} records "
        f"(input tokens: {total_usage.input_tokens}, "
        f"output tokens: {total_usage.output_tokens}, "
        f"cache write: {total_usage.cache_creation_tokens}, "
        f"cache read: {total_usage.cache_read_tokens})"
    )
    return resolved
