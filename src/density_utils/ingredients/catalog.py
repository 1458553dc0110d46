"""In-memory reference list of ingredients with known densities."""

import re
from typing import Iterable, Iterator, Optional, Tuple

from .models import ReferenceIngredient

_DECORATION = re.compile(r"\*+")


def strip_decoration(name: str) -> str:
    """Remove markdown emphasis characters the model sometimes adds."""
    return _DECORATION.sub("", name)


class ReferenceCatalog:
    """Read-only collection of reference ingredients.

    Lookups compare against ``normalised`` names, which are assumed to be
    stored already normalised. The catalog is shared between worker threads
    and is never mutated after construction.
    """

    def __init__(self, references: Iterable[ReferenceIngredient]):
        self._references: Tuple[ReferenceIngredient, ...] = tuple(references)

    def __len__(self) -> int:
        return len(self._references)

    def __iter__(self) -> Iterator[ReferenceIngredient]:
        return iter(self._references)

    def lookup(self, name: str) -> Optional[ReferenceIngredient]:
        """Return the first reference whose normalised name equals ``name``.

        Emphasis asterisks are stripped from ``name`` before comparing.
        """
        name_to_search = strip_decoration(name)
        for reference in self._references:
            if reference.normalised == name_to_search:
                return reference
        return None
