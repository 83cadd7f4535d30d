"""Job routes for requesting, listing and completing compute jobs."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from compute_market.ledger import JobStatus, Ledger

from .auth import get_caller
from .database import get_ledger
from .metrics import record_allocation, record_operation
from .schemas import ComputeRequestIn, JobCreated, JobOut, OperationOk

router = APIRouter()


@router.post("/", response_model=JobCreated)
def request_compute(
    request: ComputeRequestIn,
    caller: str = Depends(get_caller),
    ledger: Ledger = Depends(get_ledger),
):
    """
    Request compute units from a provider, paid from the caller's balance.

    Returns:
        JobCreated: The id of the newly opened job.
    """
    result = ledger.request_compute(caller, request.provider, request.resources)
    record_operation("request_compute", result)
    job_id = result.unwrap()
    record_allocation(request.resources)
    return JobCreated(job_id=job_id)


@router.get("/", response_model=List[JobOut])
def list_jobs(
    provider: Optional[str] = None,
    consumer: Optional[str] = None,
    status: Optional[JobStatus] = None,
    ledger: Ledger = Depends(get_ledger),
):
    """
    Retrieve jobs in id order.

    Returns:
        List[JobOut]: Jobs matching every given filter.
    """
    jobs = ledger.list_jobs(provider=provider, consumer=consumer, status=status)
    return [JobOut.model_validate(j) for j in jobs]


@router.get("/{job_id}", response_model=JobOut)
def get_job(job_id: int, ledger: Ledger = Depends(get_ledger)):
    job = ledger.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobOut.model_validate(job)


@router.post("/{job_id}/complete", response_model=OperationOk)
def complete_job(
    job_id: int,
    caller: str = Depends(get_caller),
    ledger: Ledger = Depends(get_ledger),
):
    """Mark one of the caller's jobs completed and collect its cost."""
    result = ledger.complete_job(caller, job_id)
    record_operation("complete_job", result)
    result.unwrap()
    return OperationOk()
