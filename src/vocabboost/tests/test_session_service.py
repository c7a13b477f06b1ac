"""Tests for the review session controller."""
from typing import List

import pytest

from vocabboost.models.srs_models import (
    GRADUATED,
    MasteryLevel,
    Progress,
    ReviewEvent,
    ReviewOutcome,
    ReviewTime,
    Snapshot,
    Word,
)
from vocabboost.services.progression import HOUR_MS, MINUTE_MS, InvalidStateError
from vocabboost.services.session_service import (
    ReviewSession,
    SessionState,
    apply_review,
    replay,
)


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock(now: int) -> FakeClock:
    return FakeClock(now)


@pytest.fixture
def snapshot(article, catalog: List[Word]) -> Snapshot:
    return Snapshot(articles=(article,), words=tuple(catalog))


def test_first_correct_review_of_new_word(now: int) -> None:
    """Test a new word reviewed as known moves to level 1 for six minutes."""
    store = apply_review({}, ReviewEvent("A", ReviewOutcome.KNOWN, now))

    assert store["A"] == Progress(level=1, next_review=ReviewTime.at(now + 360_000), last_review=now)


def test_miss_resets_instead_of_decrementing(now: int) -> None:
    """Test a miss at level 2 lands on level 1, not 0."""
    store = {"A": Progress(level=2, next_review=ReviewTime.at(now - 1), last_review=now - HOUR_MS)}

    updated = apply_review(store, ReviewEvent("A", ReviewOutcome.UNKNOWN, now))

    assert updated["A"] == Progress(level=1, next_review=ReviewTime.at(now + 360_000), last_review=now)


def test_apply_review_leaves_input_store_untouched(now: int) -> None:
    """Test the previous store is still usable after a review."""
    store = {"A": Progress(level=1, next_review=ReviewTime.at(now), last_review=0)}

    updated = apply_review(store, ReviewEvent("A", ReviewOutcome.KNOWN, now))

    assert store["A"].level == 1
    assert updated["A"].level == 2
    assert updated is not store


def test_replay_walks_word_to_graduation(now: int) -> None:
    """Test four correct reviews graduate a word."""
    events = [ReviewEvent("A", ReviewOutcome.KNOWN, now + i * HOUR_MS) for i in range(4)]

    store = replay({}, events)

    assert store["A"].level == MasteryLevel.GRADUATED
    assert store["A"].next_review is GRADUATED
    assert store["A"].last_review == now + 3 * HOUR_MS


def test_replay_prefix_acts_as_undo(now: int) -> None:
    """Test replaying all but the last event restores the earlier state."""
    events = [
        ReviewEvent("A", ReviewOutcome.KNOWN, now),
        ReviewEvent("A", ReviewOutcome.KNOWN, now + HOUR_MS),
        ReviewEvent("A", ReviewOutcome.UNKNOWN, now + 2 * HOUR_MS),
    ]

    assert replay({}, events[:2]) == {
        "A": Progress(level=2, next_review=ReviewTime.at(now + 2 * HOUR_MS), last_review=now + HOUR_MS)
    }
    assert replay({}, events)["A"].level == 1


def test_session_starts_empty_and_builds_lazily(snapshot: Snapshot, clock: FakeClock) -> None:
    """Test the queue is built on first access."""
    session = ReviewSession(snapshot, clock=clock)

    assert session.state is SessionState.EMPTY
    assert session.position == (0, 0)

    word = session.current_word()

    assert word == snapshot.words[0]
    assert session.state is SessionState.REVIEWING
    assert session.position == (1, len(snapshot.words))


def test_review_writes_progress_and_advances(snapshot: Snapshot, clock: FakeClock, now: int) -> None:
    """Test reviewing stores the result and moves the cursor."""
    session = ReviewSession(snapshot, clock=clock)
    first = session.current_word()

    result = session.review(True)

    assert result == Progress(level=1, next_review=ReviewTime.at(now + 6 * MINUTE_MS), last_review=now)
    assert session.snapshot.progress[first.id] == result
    assert session.current_word() == snapshot.words[1]
    assert session.history == [ReviewEvent(first.id, ReviewOutcome.KNOWN, now)]
    # The original snapshot is not modified
    assert snapshot.progress == {}


def test_exhausted_queue_is_discarded(snapshot: Snapshot, clock: FakeClock) -> None:
    """Test the session goes back to EMPTY once every word has been reviewed."""
    session = ReviewSession(snapshot, clock=clock)
    for _ in snapshot.words:
        session.current_word()
        session.review(False)

    assert session.state is SessionState.EMPTY
    # Every word was missed and is due again only in six minutes
    assert session.current_word() is None

    clock.advance(6 * MINUTE_MS)

    assert session.current_word() == snapshot.words[0]
    assert session.position == (1, len(snapshot.words))


def test_rebuild_picks_up_updated_store(snapshot: Snapshot, clock: FakeClock) -> None:
    """Test the next queue only holds words whose new review time has come."""
    session = ReviewSession(snapshot, clock=clock)
    session.current_word()
    session.review(True)  # six minutes
    for _ in snapshot.words[1:]:
        session.review(True)
    clock.advance(6 * MINUTE_MS)

    queue = session.refresh()

    assert queue == list(snapshot.words)
    session.review(True)  # first word, now one hour away
    clock.advance(HOUR_MS)
    requeued = session.refresh()

    # The first word is due latest, so it moves to the back
    assert requeued == list(snapshot.words[1:]) + [snapshot.words[0]]


def test_review_without_due_words_raises(clock: FakeClock) -> None:
    """Test reviewing with nothing due is an invalid state."""
    session = ReviewSession(Snapshot(), clock=clock)

    assert session.current_word() is None
    with pytest.raises(InvalidStateError):
        session.review(True)


def test_on_change_receives_every_update(snapshot: Snapshot, clock: FakeClock) -> None:
    """Test the persistence callback gets the updated snapshot."""
    saved = []
    session = ReviewSession(snapshot, clock=clock, on_change=saved.append)

    session.current_word()
    session.review(True)
    session.review(False)

    assert len(saved) == 2
    assert saved[-1] is session.snapshot
    assert len(saved[-1].progress) == 2


def test_load_catalog_keeps_progress(snapshot: Snapshot, clock: FakeClock, article) -> None:
    """Test re-importing replaces words but keeps what was learned."""
    session = ReviewSession(snapshot, clock=clock)
    reviewed = session.current_word()
    session.review(True)

    replacement = [reviewed, Word(id="novel-import", translation="小说", article_id=article.id)]
    session.load_catalog([article], replacement)

    assert session.state is SessionState.EMPTY
    assert session.snapshot.words == tuple(replacement)
    assert session.snapshot.progress[reviewed.id].level == 1
    assert session.current_word() == replacement[1]


def test_configured_delays_are_used(snapshot: Snapshot, clock: FakeClock, now: int) -> None:
    """Test the session passes its delays to the progression engine."""
    session = ReviewSession(snapshot, clock=clock, step_delays_ms=(10, 20, 30), relearn_delay_ms=5)
    session.current_word()

    assert session.review(True).next_review == ReviewTime.at(now + 10)
    assert session.review(False).next_review == ReviewTime.at(now + 5)


def test_graduated_word_never_returns(clock: FakeClock, article) -> None:
    """Test a word answered correctly four times is gone for good."""
    only = Word(id="ephemeral", translation="短暂的", article_id=article.id)
    session = ReviewSession(Snapshot(articles=(article,), words=(only,)), clock=clock)

    for _ in range(4):
        assert session.current_word() == only
        session.review(True)
        clock.advance(2 * HOUR_MS)

    assert session.snapshot.progress[only.id].is_graduated
    clock.advance(10 ** 12)
    assert session.current_word() is None
