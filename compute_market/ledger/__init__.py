"""Marketplace ledger: entities, results, stores and the state machine."""

from .entities import Consumer, Job, JobStatus, Provider
from .errors import Err, LedgerError, LedgerRejected, Ok, Result
from .ledger import Ledger
from .sql_store import SqlLedgerStore
from .store import InMemoryLedgerStore, LedgerStore, LedgerTransaction

__all__ = [
    "Consumer",
    "Err",
    "InMemoryLedgerStore",
    "Job",
    "JobStatus",
    "Ledger",
    "LedgerError",
    "LedgerRejected",
    "LedgerStore",
    "LedgerTransaction",
    "Ok",
    "Provider",
    "Result",
    "SqlLedgerStore",
]
