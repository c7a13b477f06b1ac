"""Database models for the persisted snapshot."""
from sqlalchemy import BigInteger, Column, Integer, String, Text

from vocabboost.models.base import Base, TimestampMixin


class ArticleRecord(Base, TimestampMixin):
    """Source article row."""

    __tablename__ = "articles"

    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False)  # catalog order
    title = Column(String, nullable=False)
    date = Column(String, nullable=False, default="")
    content = Column(Text, nullable=False, default="")


class WordRecord(Base, TimestampMixin):
    """Catalog entry row. The same text may appear more than once."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True)
    position = Column(Integer, nullable=False, index=True)  # catalog order
    text = Column(String, nullable=False, index=True)
    translation = Column(String, nullable=False)
    article_id = Column(String, nullable=False)


class ProgressRecord(Base, TimestampMixin):
    """Review progress row, keyed by word text."""

    __tablename__ = "progress"

    word_text = Column(String, primary_key=True)
    level = Column(Integer, nullable=False, default=0)
    next_review = Column(BigInteger, nullable=True)  # epoch ms, NULL when graduated
    last_review = Column(BigInteger, nullable=False, default=0)
