"""Value types for words, progress and the review snapshot."""
from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from enum import Enum, IntEnum
from functools import total_ordering
from typing import Any, Dict, Mapping, Optional, Tuple


class MasteryLevel(IntEnum):
    """Retention strength of a word. GRADUATED is terminal."""
    NEW = 0
    FIRST = 1
    SECOND = 2
    THIRD = 3
    GRADUATED = 4


class ReviewOutcome(Enum):
    """Result of showing a word to the learner."""
    KNOWN = "known"
    UNKNOWN = "unknown"

    @classmethod
    def from_known(cls, known: bool) -> "ReviewOutcome":
        return cls.KNOWN if known else cls.UNKNOWN


@total_ordering
class ReviewTime:
    """When a word is next due.

    Either a concrete instant (``ReviewTime.at(ms)``) or the graduated
    variant, which orders after every instant and every plain integer so a
    graduated word can never compare as due.
    """

    __slots__ = ("_timestamp",)

    def __init__(self, timestamp: Optional[int] = None):
        self._timestamp = None if timestamp is None else int(timestamp)

    @classmethod
    def at(cls, timestamp: int) -> "ReviewTime":
        return cls(timestamp)

    @property
    def timestamp(self) -> Optional[int]:
        """Epoch milliseconds, or None when graduated."""
        return self._timestamp

    @property
    def is_graduated(self) -> bool:
        return self._timestamp is None

    def is_due(self, now: int) -> bool:
        return self._timestamp is not None and self._timestamp <= now

    def _key(self) -> Tuple[int, int]:
        if self._timestamp is None:
            return (1, 0)
        return (0, self._timestamp)

    @staticmethod
    def _coerce(other: Any) -> Optional["ReviewTime"]:
        if isinstance(other, ReviewTime):
            return other
        if isinstance(other, int):
            return ReviewTime(other)
        return None

    def __eq__(self, other: Any) -> bool:
        other_time = self._coerce(other)
        if other_time is None:
            return NotImplemented
        return self._key() == other_time._key()

    def __lt__(self, other: Any) -> bool:
        other_time = self._coerce(other)
        if other_time is None:
            return NotImplemented
        return self._key() < other_time._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        if self._timestamp is None:
            return "ReviewTime.GRADUATED"
        return f"ReviewTime.at({self._timestamp})"


GRADUATED = ReviewTime(None)


@dataclass(frozen=True)
class Word:
    """A vocabulary item. ``id`` is the surface text and doubles as the key."""
    id: str
    translation: str
    article_id: str


@dataclass(frozen=True)
class Article:
    """A source article a word was extracted from."""
    id: str
    title: str
    date: str
    content: str


@dataclass(frozen=True)
class Progress:
    """Review state for one word."""
    level: int
    next_review: ReviewTime
    last_review: int

    @property
    def is_graduated(self) -> bool:
        return self.level >= MasteryLevel.GRADUATED

    def is_due(self, now: int) -> bool:
        return not self.is_graduated and self.next_review.is_due(now)


# Stand-in for a word that has never been reviewed
NEW_WORD_PROGRESS = Progress(level=MasteryLevel.NEW, next_review=ReviewTime.at(0), last_review=0)

ProgressStore = Mapping[str, Progress]


@dataclass(frozen=True)
class ReviewEvent:
    """A single review action applied to the progress store."""
    word_id: str
    outcome: ReviewOutcome
    at: int


@dataclass(frozen=True)
class Snapshot:
    """The whole persisted state: article catalog, word catalog and progress."""
    articles: Tuple[Article, ...] = ()
    words: Tuple[Word, ...] = ()
    progress: Dict[str, Progress] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.articles and not self.words and not self.progress

    def with_progress(self, progress: ProgressStore) -> "Snapshot":
        return replace(self, progress=dict(progress))

    def with_catalog(self, articles, words) -> "Snapshot":
        """Replace articles and words. Progress is kept as is."""
        return replace(self, articles=tuple(articles), words=tuple(words))

    def progress_for(self, word_id: str) -> Progress:
        return self.progress.get(word_id, NEW_WORD_PROGRESS)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)
