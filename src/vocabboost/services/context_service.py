"""Lookup of the source article a word came from."""
import re
from typing import Optional

from vocabboost.models.srs_models import Article, Snapshot, Word


def find_article(snapshot: Snapshot, word: Word) -> Optional[Article]:
    """Get the article a word was imported from."""
    for article in snapshot.articles:
        if article.id == word.article_id:
            return article
    return None


def highlight(content: str, word: str, marker: str = "**") -> str:
    """Wrap every case-insensitive occurrence of ``word`` in ``marker``."""
    if not content or not word:
        return content
    pattern = re.compile(f"({re.escape(word)})", re.IGNORECASE)
    return pattern.sub(lambda match: f"{marker}{match.group(1)}{marker}", content)
