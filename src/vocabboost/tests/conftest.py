"""Test configuration."""
import os
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from vocabboost.config import ensure_directories

ensure_directories()

from sqlalchemy.orm import Session

from vocabboost.models.base import Base, SessionLocal, engine, init_db
from vocabboost.models.srs_models import Article, Word

NOW = 1_700_000_000_000


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session on an empty schema."""
    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def now() -> int:
    """A fixed review instant in epoch milliseconds."""
    return NOW


@pytest.fixture
def fake() -> Faker:
    faker = Faker()
    faker.seed_instance(1234)
    return faker


@pytest.fixture
def article(fake: Faker) -> Article:
    """Create a test article."""
    return Article(
        id="a1",
        title="# " + fake.sentence(nb_words=4),
        date="2024-05-01 08:00",
        content=fake.paragraph(nb_sentences=3),
    )


@pytest.fixture
def catalog(article: Article, fake: Faker) -> list[Word]:
    """Create a catalog of distinct words from one article."""
    texts = [fake.unique.word() for _ in range(5)]
    return [Word(id=text, translation=fake.word(), article_id=article.id) for text in texts]
