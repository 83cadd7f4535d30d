# pylint: disable=too-few-public-methods
"""SQLAlchemy models for the durable ledger store."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


class Amount(TypeDecorator):
    """
    Integer of any size, stored as its decimal text.

    Balances, prices and resources have no upper bound, which rules out
    64-bit INTEGER columns.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(int(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


class ProviderRecord(Base):
    """A registered compute provider."""

    __tablename__ = "providers"

    identity = Column(String, primary_key=True)
    resources = Column(Amount, nullable=False)
    price_per_unit = Column(Amount, nullable=False)
    earnings = Column(Amount, nullable=False, default=0)


class ConsumerRecord(Base):
    """A funded consumer account."""

    __tablename__ = "consumers"

    identity = Column(String, primary_key=True)
    balance = Column(Amount, nullable=False, default=0)


class JobRecord(Base):
    """A compute job, kept after completion as a historical record."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=False)
    consumer = Column(String, index=True, nullable=False)
    provider = Column(String, index=True, nullable=False)
    resources = Column(Amount, nullable=False)
    total_cost = Column(Amount, nullable=False)
    status = Column(String, nullable=False)


class LedgerCounter(Base):
    """Named monotonic counters; holds ``last_job_id``."""

    __tablename__ = "ledger_counters"

    name = Column(String, primary_key=True)
    value = Column(Integer, nullable=False, default=0)
