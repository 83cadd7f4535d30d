"""
The marketplace ledger.

Providers register capacity and a unit price, consumers fund an account and
request compute from a provider, providers complete jobs and withdraw what
they earned. Every operation is one atomic transition over the store and
returns an ``Ok`` or ``Err`` result instead of raising.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .entities import Consumer, Job, JobStatus, Provider
from .errors import Err, LedgerError, Ok, Result
from .store import InMemoryLedgerStore, LedgerStore, LedgerTransaction

logger = logging.getLogger(__name__)


class Ledger:
    """
    Single-writer state machine over providers, consumers and jobs.

    The caller identity passed to each operation is trusted as-is; the host
    is responsible for authenticating it. Operations on one instance are
    serialized by a lock, so the ledger behaves as one critical section even
    when a threaded host shares it.
    """

    def __init__(self, store: Optional[LedgerStore] = None):
        """
        Args:
            store: Backing store; defaults to a fresh in-memory store
        """
        self.store = store if store is not None else InMemoryLedgerStore()
        self._lock = threading.Lock()

    @contextmanager
    def _transaction(self) -> Iterator[LedgerTransaction]:
        with self._lock, self.store.transaction() as tx:
            yield tx

    def register_provider(self, caller: str, resources: int, price_per_unit: int) -> Result[None]:
        """Offer ``resources`` units at ``price_per_unit`` under the caller's identity."""
        with self._transaction() as tx:
            if tx.get_provider(caller) is not None:
                return Err(LedgerError.ALREADY_EXISTS)
            tx.put_provider(
                Provider(identity=caller, resources=resources, price_per_unit=price_per_unit)
            )
        logger.info(
            "Provider %s registered: resources=%d, price=%d", caller, resources, price_per_unit
        )
        return Ok(None)

    def update_provider(self, caller: str, resources: int, price_per_unit: int) -> Result[None]:
        """
        Overwrite the caller's available resources and unit price.

        Earnings are kept. Resources still allocated to active jobs are not
        taken into account; they return to the new pool on completion.
        """
        with self._transaction() as tx:
            provider = tx.get_provider(caller)
            if provider is None:
                return Err(LedgerError.NOT_FOUND)
            provider.resources = resources
            provider.price_per_unit = price_per_unit
            tx.put_provider(provider)
        logger.info(
            "Provider %s updated: resources=%d, price=%d", caller, resources, price_per_unit
        )
        return Ok(None)

    def add_funds(self, caller: str, amount: int) -> Result[None]:
        """Credit ``amount`` to the caller's consumer balance, opening it if needed."""
        with self._transaction() as tx:
            consumer = tx.consumer_or_new(caller)
            consumer.balance += amount
            tx.put_consumer(consumer)
        logger.info("Consumer %s funded with %d, balance=%d", caller, amount, consumer.balance)
        return Ok(None)

    def request_compute(self, caller: str, provider: str, resources: int) -> Result[int]:
        """
        Allocate ``resources`` units from ``provider`` to the caller.

        Checks run in a fixed order and the first failure is reported:
        unknown provider, then insufficient provider capacity, then
        insufficient consumer balance. The price is fixed into the job at
        request time.

        Returns:
            Result carrying the new job id
        """
        with self._transaction() as tx:
            provider_data = tx.get_provider(provider)
            if provider_data is None:
                return Err(LedgerError.NOT_FOUND)
            total_cost = resources * provider_data.price_per_unit
            if provider_data.resources < resources:
                return Err(LedgerError.INVALID_AMOUNT)
            consumer_data = tx.consumer_or_new(caller)
            if consumer_data.balance < total_cost:
                return Err(LedgerError.INSUFFICIENT_BALANCE)

            job_id = tx.next_job_id()
            tx.put_job(
                Job(
                    id=job_id,
                    consumer=caller,
                    provider=provider,
                    resources=resources,
                    total_cost=total_cost,
                )
            )
            provider_data.resources -= resources
            consumer_data.balance -= total_cost
            tx.put_provider(provider_data)
            tx.put_consumer(consumer_data)
        logger.info(
            "Job %d opened: %s -> %s, resources=%d, cost=%d",
            job_id,
            caller,
            provider,
            resources,
            total_cost,
        )
        return Ok(job_id)

    def complete_job(self, caller: str, job_id: int) -> Result[None]:
        """
        Close an active job on behalf of its provider.

        The job's resources go back to the provider's pool and its cost is
        credited to the provider's earnings. A caller other than the job's
        provider and a job that is no longer active are both rejected as
        ``UNAUTHORIZED``.
        """
        with self._transaction() as tx:
            job = tx.get_job(job_id)
            if job is None:
                return Err(LedgerError.NOT_FOUND)
            if job.provider != caller:
                return Err(LedgerError.UNAUTHORIZED)
            if job.status != JobStatus.ACTIVE:
                return Err(LedgerError.UNAUTHORIZED)

            job.status = JobStatus.COMPLETED
            tx.put_job(job)
            provider_data = tx.get_provider(caller)
            provider_data.resources += job.resources
            provider_data.earnings += job.total_cost
            tx.put_provider(provider_data)
        logger.info("Job %d completed by %s, earned %d", job_id, caller, job.total_cost)
        return Ok(None)

    def withdraw_earnings(self, caller: str) -> Result[int]:
        """Pay out all of the caller's earnings; there is no partial withdrawal."""
        with self._transaction() as tx:
            provider = tx.get_provider(caller)
            if provider is None:
                return Err(LedgerError.NOT_FOUND)
            if provider.earnings == 0:
                return Err(LedgerError.INVALID_AMOUNT)
            earnings = provider.earnings
            provider.earnings = 0
            tx.put_provider(provider)
        logger.info("Provider %s withdrew %d", caller, earnings)
        return Ok(earnings)

    def get_provider(self, identity: str) -> Optional[Provider]:
        with self._transaction() as tx:
            return tx.get_provider(identity)

    def get_consumer(self, identity: str) -> Optional[Consumer]:
        with self._transaction() as tx:
            return tx.get_consumer(identity)

    def get_job(self, job_id: int) -> Optional[Job]:
        with self._transaction() as tx:
            return tx.get_job(job_id)

    def list_jobs(
        self,
        provider: Optional[str] = None,
        consumer: Optional[str] = None,
        status: Optional[JobStatus] = None,
    ) -> List[Job]:
        """List jobs in id order, filtered by any of provider, consumer or status."""
        with self._transaction() as tx:
            return tx.list_jobs(provider=provider, consumer=consumer, status=status)

    def reset(self) -> None:
        """Wipe all ledger state and restart job ids at 1."""
        with self._transaction() as tx:
            tx.reset()
        logger.warning("Ledger state reset")
