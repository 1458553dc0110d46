import dataclasses
import enum
from typing import List, Optional


class Confidence(str, enum.Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    NO_MATCH = "NO MATCH"


class Action(str, enum.Enum):
    AUTO_FILL = "AUTO-FILL"
    REVIEW = "REVIEW"
    NO_MATCH = "NO-MATCH"


ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


@dataclasses.dataclass(frozen=True)
class ReferenceIngredient:
    id: Optional[int]  # None when the reference row has no id assigned
    ingredient: str
    normalised: str
    density: float
    source: str

    def to_row(self) -> List[str]:
        return [
            "" if self.id is None else str(self.id),
            self.ingredient,
            self.normalised,
            f"{self.density:.6f}",
            self.source,
        ]


@dataclasses.dataclass(frozen=True)
class Resolution:
    action: Optional[Action] = None
    match_to: Optional[str] = None
    density: Optional[float] = None
    confidence: Optional[str] = None


@dataclasses.dataclass
class MissingIngredient:
    """An ingredient whose density is unknown.

    The resolution fields live on a frozen ``Resolution`` that is swapped
    as a whole, so a record is either untouched or fully resolved.
    """

    popularity: int
    ingredient: str
    example: str
    resolution: Resolution = dataclasses.field(default_factory=Resolution)

    @property
    def action(self) -> Optional[Action]:
        return self.resolution.action

    @property
    def match_to(self) -> Optional[str]:
        return self.resolution.match_to

    @property
    def density(self) -> Optional[float]:
        return self.resolution.density

    @property
    def confidence(self) -> Optional[str]:
        return self.resolution.confidence

    def to_row(self) -> List[str]:
        return [
            str(self.popularity),
            self.ingredient,
            self.action.value if self.action else "",
            self.match_to or "",
            "" if self.density is None else f"{self.density:.6f}",
            self.example,
            self.confidence or "",
        ]


@dataclasses.dataclass(frozen=True)
class ConversationTurn:
    role: str
    text: str
    cache_breakpoint: bool = False


@dataclasses.dataclass(frozen=True)
class MatchCandidate:
    confidence: Confidence
    match_to: Optional[str] = None

    def __post_init__(self):
        if (self.confidence is Confidence.NO_MATCH) != (self.match_to is None):
            raise ValueError(
                f"match_to must be absent exactly when confidence is NO MATCH, "
                f"got {self.confidence.value} / {self.match_to!r}"
            )


@dataclasses.dataclass(frozen=True)
class ResolvedOutcome:
    candidate: MatchCandidate
    reference: Optional[ReferenceIngredient]  # None for NO MATCH

    @property
    def confidence(self) -> Confidence:
        return self.candidate.confidence

    @property
    def density(self) -> Optional[float]:
        return self.reference.density if self.reference else None


@dataclasses.dataclass(frozen=True)
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            self.input_tokens + other.input_tokens,
            self.output_tokens + other.output_tokens,
            self.cache_creation_tokens + other.cache_creation_tokens,
            self.cache_read_tokens + other.cache_read_tokens,
        )


@dataclasses.dataclass(frozen=True)
class CompletionParams:
    max_tokens: int = 10000
    temperature: float = 0.3


@dataclasses.dataclass(frozen=True)
class Completion:
    text: str
    usage: Usage = Usage()


@dataclasses.dataclass(frozen=True)
class AttemptEvent:
    attempt: int
    kind: str  # 'transport_error', 'parse_error', 'not_in_reference', 'low', 'match', 'no_match'
    detail: str = ""


@dataclasses.dataclass
class ConversationResult:
    outcome: Optional[ResolvedOutcome]
    attempts: int
    events: List[AttemptEvent] = dataclasses.field(default_factory=list)
    used_fallback: bool = False
    cancelled: bool = False
    usage: Usage = Usage()

    @property
    def resolved(self) -> bool:
        return self.outcome is not None
