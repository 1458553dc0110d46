"""Prompt text for matching ingredients against the reference list."""

from .catalog import ReferenceCatalog

RESPONSE_FORMAT = "Confidence: <confidence>, Match <ingredient>"
NO_MATCH_TEXT = "NO MATCH"

MATCHING_INSTRUCTIONS = f"""\
Your job is to cross-reference ingredients between two lists. We are trying to perform weight->volume
conversions, so the purpose of matching is not to find a valid substitute per se but something of the same
density and consistency. Flavour profile is irrelevant.

You will be presented with an unknown ingredient and you must choose the best matching ingredient from the
reference list. If there is no good match, you should respond with "{NO_MATCH_TEXT}".

When choosing a match, consider that ingredients may be described in different ways. For example,
"chopped tomatoes" and "tomato, chopped" should be considered a match. However, "tomato sauce" and
"tomato paste" are different ingredients and should not be considered a match for "tomatoes".

Do not confuse fresh and dried ingredients. For example, "dried basil" and "fresh basil" are different
ingredients; as are dried fruits and fresh fruits. Also, "dried potato flake" and "potato" are different
ingredients as are "potato powder" and "potato".

Use the following guidelines when determining your confidence level:
- HIGH: The ingredients are clearly the same, just worded differently (e.g., "chopped tomatoes" vs
  "tomato, chopped").
- MEDIUM: The ingredients are similar but there are slight differences that may or may not be significant
  (e.g., "whole milk" vs "2% milk").
- LOW: The ingredients have some similarities but also notable differences that could affect their
  densities (e.g., "tomato sauce" vs "tomatoes", "mashed potato" vs "potatoes").

You must ONLY use the ingredients in the reference list to make your match. Do NOT attempt to use any
external knowledge.

Your response should be in the form "{RESPONSE_FORMAT}" where <confidence> is one of "HIGH", "MEDIUM",
or "LOW". If there is no good match, respond with "{NO_MATCH_TEXT}"."""


def build_base_prompt(catalog: ReferenceCatalog) -> str:
    """Build the instructions plus the full reference list.

    The result depends only on the catalog, so it is built once per batch
    and sent as the first, cacheable turn of every conversation.
    """
    lines = [MATCHING_INSTRUCTIONS, "", "Here is the reference list:"]
    lines.extend(f"- {reference.normalised}" for reference in catalog)
    return "\n".join(lines) + "\n"


def build_question(ingredient_name: str) -> str:
    return f"What is the best match for the ingredient: {ingredient_name}?"


def build_format_reminder() -> str:
    return (
        "Your response could not be parsed. Please respond in the format "
        f"'{RESPONSE_FORMAT}' or '{NO_MATCH_TEXT}'."
    )


def build_not_in_reference(match_to: str) -> str:
    return (
        f"The ingredient '{match_to}' does not appear in the reference list. "
        "Please try again."
    )


def build_generic_check(ingredient_name: str, match_to: str) -> str:
    return (
        f"Check if there are not any more generic matches for '{ingredient_name}' "
        f"that might fit better than '{match_to}'"
    )
