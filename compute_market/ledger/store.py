"""
Storage abstraction for the marketplace ledger.

A store hands out transactions. Every ledger operation runs inside exactly
one transaction, and a transaction either applies all of its writes or none
of them. Entities returned by a transaction are copies: changes only reach
the store through the ``put_*`` methods.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterator, List, Optional

from .entities import Consumer, Job, JobStatus, Provider


class LedgerTransaction(ABC):
    """Reads and staged writes over the ledger's maps and job counter."""

    @abstractmethod
    def get_provider(self, identity: str) -> Optional[Provider]:
        ...

    @abstractmethod
    def put_provider(self, provider: Provider) -> None:
        ...

    @abstractmethod
    def get_consumer(self, identity: str) -> Optional[Consumer]:
        ...

    @abstractmethod
    def put_consumer(self, consumer: Consumer) -> None:
        ...

    @abstractmethod
    def get_job(self, job_id: int) -> Optional[Job]:
        ...

    @abstractmethod
    def put_job(self, job: Job) -> None:
        ...

    @abstractmethod
    def list_jobs(
        self,
        provider: Optional[str] = None,
        consumer: Optional[str] = None,
        status: Optional[JobStatus] = None,
    ) -> List[Job]:
        """Return jobs ordered by id, optionally filtered."""

    @abstractmethod
    def next_job_id(self) -> int:
        """Advance the job counter and return the new value."""

    @abstractmethod
    def reset(self) -> None:
        """Drop every provider, consumer and job and reseed the counter at 0."""

    def consumer_or_new(self, identity: str) -> Consumer:
        """
        Get-or-default lookup for consumers.

        An unknown identity yields a fresh zero-balance record that is only
        stored once it is passed to ``put_consumer``.
        """
        consumer = self.get_consumer(identity)
        if consumer is None:
            consumer = Consumer(identity=identity)
        return consumer


class LedgerStore(ABC):
    """Source of ledger transactions."""

    @abstractmethod
    def transaction(self):
        """Context manager yielding a ``LedgerTransaction``.

        Writes are committed when the block exits normally and discarded when
        it raises.
        """


def _matches(job: Job, provider, consumer, status) -> bool:
    if provider is not None and job.provider != provider:
        return False
    if consumer is not None and job.consumer != consumer:
        return False
    if status is not None and job.status != status:
        return False
    return True


class _MemoryTransaction(LedgerTransaction):
    """Stages writes over an ``InMemoryLedgerStore`` until commit."""

    def __init__(self, store: "InMemoryLedgerStore"):
        self._store = store
        self._cleared = False
        self._providers: Dict[str, Provider] = {}
        self._consumers: Dict[str, Consumer] = {}
        self._jobs: Dict[int, Job] = {}
        self._last_job_id = store.last_job_id

    def _lookup(self, staged: Dict, committed: Dict, key):
        if key in staged:
            return replace(staged[key])
        if not self._cleared and key in committed:
            return replace(committed[key])
        return None

    def get_provider(self, identity: str) -> Optional[Provider]:
        return self._lookup(self._providers, self._store.providers, identity)

    def put_provider(self, provider: Provider) -> None:
        self._providers[provider.identity] = replace(provider)

    def get_consumer(self, identity: str) -> Optional[Consumer]:
        return self._lookup(self._consumers, self._store.consumers, identity)

    def put_consumer(self, consumer: Consumer) -> None:
        self._consumers[consumer.identity] = replace(consumer)

    def get_job(self, job_id: int) -> Optional[Job]:
        return self._lookup(self._jobs, self._store.jobs, job_id)

    def put_job(self, job: Job) -> None:
        self._jobs[job.id] = replace(job)

    def list_jobs(self, provider=None, consumer=None, status=None) -> List[Job]:
        jobs = {} if self._cleared else dict(self._store.jobs)
        jobs.update(self._jobs)
        return [
            replace(jobs[job_id])
            for job_id in sorted(jobs)
            if _matches(jobs[job_id], provider, consumer, status)
        ]

    def next_job_id(self) -> int:
        self._last_job_id += 1
        return self._last_job_id

    def reset(self) -> None:
        self._cleared = True
        self._providers.clear()
        self._consumers.clear()
        self._jobs.clear()
        self._last_job_id = 0

    def commit(self) -> None:
        store = self._store
        if self._cleared:
            store.providers.clear()
            store.consumers.clear()
            store.jobs.clear()
        store.providers.update(self._providers)
        store.consumers.update(self._consumers)
        store.jobs.update(self._jobs)
        store.last_job_id = self._last_job_id


class InMemoryLedgerStore(LedgerStore):
    """
    Dictionary-backed store.

    Attributes:
        providers: Providers keyed by identity
        consumers: Consumers keyed by identity
        jobs: Jobs keyed by id
        last_job_id: Highest job id handed out so far
    """

    def __init__(self):
        self.providers: Dict[str, Provider] = {}
        self.consumers: Dict[str, Consumer] = {}
        self.jobs: Dict[int, Job] = {}
        self.last_job_id = 0

    @contextmanager
    def transaction(self) -> Iterator[LedgerTransaction]:
        tx = _MemoryTransaction(self)
        yield tx
        tx.commit()
