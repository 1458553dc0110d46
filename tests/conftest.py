import pytest

from density_utils.ingredients import (
    Completion,
    MissingIngredient,
    ReferenceCatalog,
    ReferenceIngredient,
    Usage,
)


class ScriptedService:
    """Completion service fake that replays queued replies.

    A queued ``Exception`` instance is raised instead of returned.
    """

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def invoke(self, turns, params):
        self.calls.append((list(turns), params))
        if not self.replies:
            raise AssertionError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return Completion(reply, Usage(input_tokens=100, output_tokens=5))


@pytest.fixture
def references():
    return [
        ReferenceIngredient(1, "Flour, all purpose", "flour", 0.593, "usda"),
        ReferenceIngredient(2, "Sugar, granulated", "sugar", 0.845, "usda"),
        ReferenceIngredient(None, "Milk, whole", "milk", 1.03, "manual"),
    ]


@pytest.fixture
def catalog(references):
    return ReferenceCatalog(references)


@pytest.fixture
def record():
    return MissingIngredient(
        popularity=12, ingredient="plain flour", example="2 cups plain flour"
    )


@pytest.fixture
def scripted():
    return ScriptedService
