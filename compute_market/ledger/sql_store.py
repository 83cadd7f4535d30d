"""SQLAlchemy-backed ledger store: one session per ledger transaction."""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from .entities import Consumer, Job, JobStatus, Provider
from .models import ConsumerRecord, JobRecord, LedgerCounter, ProviderRecord
from .store import LedgerStore, LedgerTransaction

LAST_JOB_ID = "last_job_id"


class _SqlTransaction(LedgerTransaction):
    """Ledger reads and writes against an open session."""

    def __init__(self, db: Session):
        self.db = db

    def get_provider(self, identity: str) -> Optional[Provider]:
        record = self.db.get(ProviderRecord, identity)
        if record is None:
            return None
        return Provider(
            identity=record.identity,
            resources=record.resources,
            price_per_unit=record.price_per_unit,
            earnings=record.earnings,
        )

    def put_provider(self, provider: Provider) -> None:
        record = self.db.get(ProviderRecord, provider.identity)
        if record is None:
            record = ProviderRecord(identity=provider.identity)
            self.db.add(record)
        record.resources = provider.resources
        record.price_per_unit = provider.price_per_unit
        record.earnings = provider.earnings
        self.db.flush()

    def get_consumer(self, identity: str) -> Optional[Consumer]:
        record = self.db.get(ConsumerRecord, identity)
        if record is None:
            return None
        return Consumer(identity=record.identity, balance=record.balance)

    def put_consumer(self, consumer: Consumer) -> None:
        record = self.db.get(ConsumerRecord, consumer.identity)
        if record is None:
            record = ConsumerRecord(identity=consumer.identity)
            self.db.add(record)
        record.balance = consumer.balance
        self.db.flush()

    def get_job(self, job_id: int) -> Optional[Job]:
        record = self.db.get(JobRecord, job_id)
        if record is None:
            return None
        return _job_from_record(record)

    def put_job(self, job: Job) -> None:
        record = self.db.get(JobRecord, job.id)
        if record is None:
            record = JobRecord(
                id=job.id,
                consumer=job.consumer,
                provider=job.provider,
                resources=job.resources,
                total_cost=job.total_cost,
            )
            self.db.add(record)
        record.status = job.status.value
        self.db.flush()

    def list_jobs(self, provider=None, consumer=None, status=None) -> List[Job]:
        query = self.db.query(JobRecord)
        if provider is not None:
            query = query.filter(JobRecord.provider == provider)
        if consumer is not None:
            query = query.filter(JobRecord.consumer == consumer)
        if status is not None:
            query = query.filter(JobRecord.status == JobStatus(status).value)
        return [_job_from_record(r) for r in query.order_by(JobRecord.id).all()]

    def next_job_id(self) -> int:
        counter = self.db.get(LedgerCounter, LAST_JOB_ID)
        if counter is None:
            counter = LedgerCounter(name=LAST_JOB_ID, value=0)
            self.db.add(counter)
        counter.value += 1
        self.db.flush()
        return counter.value

    def reset(self) -> None:
        for model in (JobRecord, ConsumerRecord, ProviderRecord, LedgerCounter):
            self.db.query(model).delete()
        self.db.flush()


def _job_from_record(record: JobRecord) -> Job:
    return Job(
        id=record.id,
        consumer=record.consumer,
        provider=record.provider,
        resources=record.resources,
        total_cost=record.total_cost,
        status=JobStatus(record.status),
    )


class SqlLedgerStore(LedgerStore):
    """
    Durable store over a SQLAlchemy session factory.

    Each transaction gets its own session; it commits when the ledger
    operation returns and rolls back if anything raises.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def transaction(self) -> Iterator[LedgerTransaction]:
        db = self.session_factory()
        try:
            yield _SqlTransaction(db)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
