"""Service for loading and saving the whole review snapshot."""
import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocabboost import monitoring
from vocabboost.models.models import ArticleRecord, ProgressRecord, WordRecord
from vocabboost.models.srs_models import (
    GRADUATED,
    Article,
    Progress,
    ReviewTime,
    Snapshot,
    Word,
)

logger = logging.getLogger(__name__)

# Largest integer a browser can hold exactly; exported snapshots use it for "never"
MAX_SAFE_INTEGER = 2 ** 53 - 1


class SnapshotFormatError(ValueError):
    """Raised when a serialized snapshot cannot be read."""


class StorageService:
    """Service for persisting the snapshot as a whole."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def load_snapshot(self) -> Optional[Snapshot]:
        """Load the stored snapshot, or None if nothing has been saved yet."""
        monitoring.storage_operations.labels(operation_type="load").inc()
        articles = self.db.query(ArticleRecord).order_by(ArticleRecord.position).all()
        words = self.db.query(WordRecord).order_by(WordRecord.position).all()
        progress = self.db.query(ProgressRecord).all()

        if not articles and not words and not progress:
            return None

        snapshot = Snapshot(
            articles=tuple(
                Article(id=row.id, title=row.title, date=row.date, content=row.content)
                for row in articles
            ),
            words=tuple(
                Word(id=row.text, translation=row.translation, article_id=row.article_id)
                for row in words
            ),
            progress={
                row.word_text: Progress(
                    level=row.level,
                    next_review=GRADUATED if row.next_review is None else ReviewTime.at(row.next_review),
                    last_review=row.last_review,
                )
                for row in progress
            },
        )
        logger.debug(
            f"Loaded snapshot: {len(snapshot.articles)} articles, "
            f"{len(snapshot.words)} words, {len(snapshot.progress)} progress records"
        )
        return snapshot

    def save_snapshot(self, snapshot: Snapshot) -> None:
        """Replace everything stored with ``snapshot`` in a single transaction."""
        monitoring.storage_operations.labels(operation_type="save").inc()
        try:
            self._delete_all()
            self.db.add_all(
                ArticleRecord(
                    id=article.id,
                    position=position,
                    title=article.title,
                    date=article.date,
                    content=article.content,
                )
                for position, article in enumerate(snapshot.articles)
            )
            self.db.add_all(
                WordRecord(
                    position=position,
                    text=word.id,
                    translation=word.translation,
                    article_id=word.article_id,
                )
                for position, word in enumerate(snapshot.words)
            )
            self.db.add_all(
                ProgressRecord(
                    word_text=word_id,
                    level=int(progress.level),
                    next_review=progress.next_review.timestamp,
                    last_review=progress.last_review,
                )
                for word_id, progress in snapshot.progress.items()
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            monitoring.storage_errors.labels(error_type=type(e).__name__).inc()
            logger.error(f"Failed to save snapshot: {e}")
            raise

    def reset(self) -> None:
        """Delete all stored data."""
        monitoring.storage_operations.labels(operation_type="reset").inc()
        try:
            self._delete_all()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            monitoring.storage_errors.labels(error_type=type(e).__name__).inc()
            logger.error(f"Failed to reset storage: {e}")
            raise
        logger.info("All stored data deleted")

    def _delete_all(self) -> None:
        self.db.query(ProgressRecord).delete()
        self.db.query(WordRecord).delete()
        self.db.query(ArticleRecord).delete()


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    """Convert to the browser-storage layout used by exported files."""
    return {
        "articles": [
            {"id": a.id, "title": a.title, "date": a.date, "content": a.content}
            for a in snapshot.articles
        ],
        "words": [
            {"id": w.id, "translation": w.translation, "articleId": w.article_id}
            for w in snapshot.words
        ],
        "progress": {
            word_id: {
                "level": int(p.level),
                "nextReview": MAX_SAFE_INTEGER if p.next_review.is_graduated else p.next_review.timestamp,
                "lastReview": p.last_review,
            }
            for word_id, p in snapshot.progress.items()
        },
    }


def snapshot_from_dict(data: Dict[str, Any]) -> Snapshot:
    """Build a snapshot from the browser-storage layout."""
    try:
        articles = tuple(
            Article(
                id=str(item["id"]),
                title=item.get("title", ""),
                date=item.get("date", ""),
                content=item.get("content", ""),
            )
            for item in data.get("articles", [])
        )
        words = tuple(
            Word(id=item["id"], translation=item["translation"], article_id=str(item.get("articleId", "")))
            for item in data.get("words", [])
        )
        progress = {}
        for word_id, item in data.get("progress", {}).items():
            next_review = int(item["nextReview"])
            progress[word_id] = Progress(
                level=int(item["level"]),
                next_review=GRADUATED if next_review >= MAX_SAFE_INTEGER else ReviewTime.at(next_review),
                last_review=int(item.get("lastReview", 0)),
            )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise SnapshotFormatError(f"Invalid snapshot data: {e}") from e
    return Snapshot(articles=articles, words=words, progress=progress)


def export_json(snapshot: Snapshot) -> str:
    """Serialize a snapshot to JSON."""
    return json.dumps(snapshot_to_dict(snapshot), ensure_ascii=False, indent=2)


def import_json(text: str) -> Snapshot:
    """Deserialize a snapshot from JSON."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(f"Snapshot is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotFormatError("Snapshot must be a JSON object")
    return snapshot_from_dict(data)
