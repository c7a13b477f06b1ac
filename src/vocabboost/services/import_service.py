"""Parsing of article/word-list import files."""
import logging
import re
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Union

from vocabboost import monitoring
from vocabboost.models.srs_models import Article, Snapshot, Word

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = re.compile(r"={10,}")
WORD_LIST_MARKERS = ("单词清单：", "单词清单:")
DATE_PREFIX = "生成时间"
DEFAULT_TITLE = "无标题"
BULLET = re.compile(r"^[•\-*]\s*")
WORD_SEPARATOR = re.compile(r"\s+[-–]\s+")


class ImportFormatError(ValueError):
    """Raised when an import file yields no usable words."""


@dataclass
class ImportResult:
    """Articles and words read from one import file."""
    articles: List[Article] = field(default_factory=list)
    words: List[Word] = field(default_factory=list)


def _new_article_id() -> str:
    return uuid.uuid4().hex[:9]


def parse_word_line(line: str, article_id: str) -> Union[Word, None]:
    """Parse ``• word - translation``. Returns None for lines that don't match."""
    clean = BULLET.sub("", line).strip()
    match = WORD_SEPARATOR.search(clean)
    if not match:
        return None
    text = clean[:match.start()].strip()
    translation = clean[match.end():].strip()
    if not text or not translation:
        return None
    return Word(id=text, translation=translation, article_id=article_id)


def parse_import_text(text: str, id_factory: Callable[[], str] = _new_article_id) -> ImportResult:
    """Split import text into articles and their word lists.

    Each block between separator lines is one article: a ``#`` title line, an
    optional date line, free content, then a word list after the marker line.
    """
    result = ImportResult()

    for block in BLOCK_SEPARATOR.split(text):
        trimmed = block.strip()
        if not trimmed:
            continue

        title = DEFAULT_TITLE
        date = ""
        content_lines = []
        word_lines = []
        in_word_list = False

        for raw_line in trimmed.split("\n"):
            line = raw_line.strip()
            if not line:
                continue
            if any(marker in line for marker in WORD_LIST_MARKERS):
                in_word_list = True
                continue

            if in_word_list:
                word_lines.append(line)
            elif line.startswith("#") and title == DEFAULT_TITLE:
                title = line
            elif line.startswith(DATE_PREFIX):
                date = line[len(DATE_PREFIX):].lstrip("：:").strip()
            else:
                content_lines.append(line)

        article = Article(id=id_factory(), title=title, date=date, content="\n".join(content_lines))
        result.articles.append(article)

        for line in word_lines:
            word = parse_word_line(line, article.id)
            if word is None:
                logger.debug(f"Skipping unparsable word line: {line!r}")
                continue
            result.words.append(word)

    return result


def read_import_file(path: Union[str, Path]) -> str:
    """Read an import file as UTF-8 text."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ImportFormatError(f"Could not read import file {path}: {e}") from e


def import_text(snapshot: Snapshot, text: str, id_factory: Callable[[], str] = _new_article_id) -> Snapshot:
    """Replace the snapshot's catalog with the parsed text, keeping progress."""
    result = parse_import_text(text, id_factory=id_factory)
    if not result.words:
        raise ImportFormatError(
            f"No words found. Make sure each article has a '{WORD_LIST_MARKERS[0]}' section."
        )

    monitoring.words_imported.inc(len(result.words))
    logger.info(f"Imported {len(result.articles)} articles with {len(result.words)} words")
    return snapshot.with_catalog(result.articles, result.words)
