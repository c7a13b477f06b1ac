"""Queue builder: selects and orders the words due for a review session."""
import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from vocabboost.models.srs_models import ProgressStore, Word

logger = logging.getLogger(__name__)


@dataclass
class QueuePartition:
    """Catalog split into disjoint review categories, each in catalog order
    except ``due``, which is sorted by next review time."""
    due: List[Word] = field(default_factory=list)
    new: List[Word] = field(default_factory=list)
    scheduled: List[Word] = field(default_factory=list)
    graduated: List[Word] = field(default_factory=list)

    @property
    def queue(self) -> List[Word]:
        """Due words first, then new words."""
        return self.due + self.new


def partition_catalog(catalog: Sequence[Word], store: ProgressStore, now: int) -> QueuePartition:
    """Split the catalog by review state at ``now``.

    A word with no progress record is new. A record at level 4 or above is
    graduated regardless of its next review time. Anything else is due when
    its next review time has passed and scheduled otherwise.
    """
    partition = QueuePartition()
    for word in catalog:
        progress = store.get(word.id)
        if progress is None:
            partition.new.append(word)
        elif progress.is_graduated:
            partition.graduated.append(word)
        elif progress.is_due(now):
            partition.due.append(word)
        else:
            partition.scheduled.append(word)

    # list.sort is stable, so equal times keep catalog order
    partition.due.sort(key=lambda word: store[word.id].next_review)
    return partition


def build_queue(catalog: Sequence[Word], store: ProgressStore, now: int) -> List[Word]:
    """Build the ordered review queue: due words by next review, then new words.

    Duplicate catalog entries are kept and produce duplicate queue entries.
    """
    partition = partition_catalog(catalog, store, now)
    logger.debug(
        f"Queue at {now}: {len(partition.due)} due, {len(partition.new)} new, "
        f"{len(partition.scheduled)} scheduled, {len(partition.graduated)} graduated"
    )
    return partition.queue
