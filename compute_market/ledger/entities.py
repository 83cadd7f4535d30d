"""Plain records held by the ledger."""

from dataclasses import dataclass
from enum import Enum


class JobStatus(str, Enum):
    """Lifecycle of a job. ``completed`` is terminal."""

    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass
class Provider:
    """An identity offering compute capacity for sale."""

    identity: str
    resources: int
    price_per_unit: int
    earnings: int = 0


@dataclass
class Consumer:
    """An identity purchasing compute capacity."""

    identity: str
    balance: int = 0


@dataclass
class Job:
    """One allocation of resources from a provider to a consumer."""

    id: int
    consumer: str
    provider: str
    resources: int
    total_cost: int
    status: JobStatus = JobStatus.ACTIVE
