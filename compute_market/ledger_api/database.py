"""Database setup and ledger wiring for the API host."""

import threading

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from compute_market import config
from compute_market.ledger import Ledger, SqlLedgerStore
from compute_market.ledger.models import Base

# SQLite needs multithreaded access for the FastAPI threadpool
connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(config.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_ledger = None
_ledger_lock = threading.Lock()


def init_db() -> None:
    """Create the ledger tables if they do not exist yet."""
    Base.metadata.create_all(bind=engine)


def get_ledger() -> Ledger:
    """
    Dependency that returns the process-wide ledger.

    All requests share one instance so its lock serializes every operation.
    """
    global _ledger
    with _ledger_lock:
        if _ledger is None:
            _ledger = Ledger(SqlLedgerStore(SessionLocal))
    return _ledger
