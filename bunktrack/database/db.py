from typing import Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Base class for the declarative models
Base = declarative_base()


def make_session_factory(database_url: str) -> Tuple[Engine, sessionmaker]:
    """Create the engine for ``database_url`` and a session factory bound to it."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Route handlers run in a threadpool
        connect_args["check_same_thread"] = False

    engine = create_engine(database_url, connect_args=connect_args)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, SessionLocal
