"""Review session controller and progress store transitions."""
import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from vocabboost import monitoring
from vocabboost.models.srs_models import (
    NEW_WORD_PROGRESS,
    Article,
    MasteryLevel,
    Progress,
    ProgressStore,
    ReviewEvent,
    ReviewOutcome,
    Snapshot,
    Word,
    now_ms,
)
from vocabboost.services.progression import (
    RELEARN_DELAY_MS,
    STEP_DELAYS_MS,
    InvalidStateError,
    advance,
)
from vocabboost.services.queue_builder import build_queue

logger = logging.getLogger(__name__)


def apply_review(
    store: ProgressStore,
    event: ReviewEvent,
    step_delays_ms: Sequence[int] = STEP_DELAYS_MS,
    relearn_delay_ms: int = RELEARN_DELAY_MS,
) -> Dict[str, Progress]:
    """Return a new store with ``event`` applied. ``store`` is left untouched."""
    prior = store.get(event.word_id, NEW_WORD_PROGRESS)
    level, next_review = advance(
        prior.level,
        event.outcome,
        event.at,
        step_delays_ms=step_delays_ms,
        relearn_delay_ms=relearn_delay_ms,
    )
    updated = dict(store)
    updated[event.word_id] = Progress(level=level, next_review=next_review, last_review=event.at)
    return updated


def replay(store: ProgressStore, events: Iterable[ReviewEvent], **delays) -> Dict[str, Progress]:
    """Apply events in order, starting from ``store``."""
    result = dict(store)
    for event in events:
        result = apply_review(result, event, **delays)
    return result


class SessionState(Enum):
    """Whether the session holds a queue with words left in it."""
    REVIEWING = "reviewing"
    EMPTY = "empty"


class ReviewSession:
    """Walks the learner through one review queue at a time.

    The queue is built lazily: when it is exhausted it is discarded and the
    next access rebuilds it from the updated progress store.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        clock: Callable[[], int] = now_ms,
        on_change: Optional[Callable[[Snapshot], None]] = None,
        step_delays_ms: Sequence[int] = STEP_DELAYS_MS,
        relearn_delay_ms: int = RELEARN_DELAY_MS,
    ):
        self._snapshot = snapshot
        self._clock = clock
        self._on_change = on_change
        self._step_delays_ms = tuple(step_delays_ms)
        self._relearn_delay_ms = relearn_delay_ms
        self._queue: List[Word] = []
        self._cursor = 0
        self.history: List[ReviewEvent] = []

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def state(self) -> SessionState:
        if self._cursor < len(self._queue):
            return SessionState.REVIEWING
        return SessionState.EMPTY

    @property
    def queue(self) -> Tuple[Word, ...]:
        return tuple(self._queue)

    @property
    def position(self) -> Tuple[int, int]:
        """One-based index of the current word and the queue length."""
        if self.state is SessionState.EMPTY:
            return (0, 0)
        return (self._cursor + 1, len(self._queue))

    def refresh(self) -> List[Word]:
        """Discard the current queue and build a new one."""
        self._queue = build_queue(self._snapshot.words, self._snapshot.progress, self._clock())
        self._cursor = 0
        monitoring.queue_rebuilds.inc()
        monitoring.queue_size.set(len(self._queue))
        logger.info(f"Review queue rebuilt with {len(self._queue)} words")
        return list(self._queue)

    def current_word(self) -> Optional[Word]:
        """The word to show now, or None when nothing is due."""
        if self.state is SessionState.EMPTY:
            self.refresh()
        if self.state is SessionState.EMPTY:
            return None
        return self._queue[self._cursor]

    def review(self, known: bool) -> Progress:
        """Record a review of the current word and move to the next one."""
        word = self.current_word()
        if word is None:
            raise InvalidStateError("No word is due for review")

        outcome = ReviewOutcome.from_known(known)
        event = ReviewEvent(word_id=word.id, outcome=outcome, at=self._clock())
        store = apply_review(
            self._snapshot.progress,
            event,
            step_delays_ms=self._step_delays_ms,
            relearn_delay_ms=self._relearn_delay_ms,
        )
        self._snapshot = self._snapshot.with_progress(store)
        self.history.append(event)

        progress = store[word.id]
        monitoring.reviews_total.labels(outcome=outcome.value).inc()
        if progress.level == MasteryLevel.GRADUATED:
            monitoring.words_graduated.inc()
        logger.debug(f"Reviewed {word.id!r} as {outcome.value}: level {progress.level}")

        self._cursor += 1
        if self._cursor >= len(self._queue):
            self._queue = []
            self._cursor = 0

        if self._on_change is not None:
            self._on_change(self._snapshot)
        return progress

    def load_catalog(self, articles: Sequence[Article], words: Sequence[Word]) -> None:
        """Replace the catalog. Progress is kept and the queue is discarded."""
        self._snapshot = self._snapshot.with_catalog(articles, words)
        self._queue = []
        self._cursor = 0
        if self._on_change is not None:
            self._on_change(self._snapshot)
