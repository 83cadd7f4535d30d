"""Consumer routes: deposit funds and inspect balances."""

from fastapi import APIRouter, Depends, HTTPException

from compute_market.ledger import Ledger

from .auth import get_caller
from .database import get_ledger
from .metrics import record_operation
from .schemas import ConsumerOut, FundsIn, OperationOk

router = APIRouter()


@router.post("/me/funds", response_model=OperationOk)
def add_funds(
    deposit: FundsIn,
    caller: str = Depends(get_caller),
    ledger: Ledger = Depends(get_ledger),
):
    """Credit the caller's balance, opening the account on first deposit."""
    result = ledger.add_funds(caller, deposit.amount)
    record_operation("add_funds", result)
    result.unwrap()
    return OperationOk()


@router.get("/{identity}", response_model=ConsumerOut)
def get_consumer(identity: str, ledger: Ledger = Depends(get_ledger)):
    consumer = ledger.get_consumer(identity)
    if consumer is None:
        raise HTTPException(status_code=404, detail="Consumer not found")
    return ConsumerOut.model_validate(consumer)
