"""Shared helpers: fresh in-memory databases and a test token issuer."""

from datetime import timedelta

from sqlalchemy.orm import Session, sessionmaker

from storeauth.core.database import build_engine
from storeauth.core.security import TokenIssuer
from storeauth.models import Base

TEST_SECRET = "unit-test-signing-secret-0123456789abcdef"


def make_sessionmaker(database_url: str = "sqlite://") -> sessionmaker:
    """Create an engine with all tables and return a session factory bound to it."""
    engine = build_engine(database_url)
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_session() -> Session:
    return make_sessionmaker()()


def make_issuer(secret: str = TEST_SECRET, lifetime: timedelta = timedelta(days=1)) -> TokenIssuer:
    return TokenIssuer(secret=secret, algorithm="HS256", lifetime=lifetime)
