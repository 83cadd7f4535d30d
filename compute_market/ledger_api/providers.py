"""Provider routes: register, update, inspect and withdraw earnings."""

from fastapi import APIRouter, Depends, HTTPException

from compute_market.ledger import Ledger

from .auth import get_caller
from .database import get_ledger
from .metrics import record_operation, record_withdrawal
from .schemas import OperationOk, ProviderIn, ProviderOut, WithdrawalOut

router = APIRouter()


@router.post("/", response_model=OperationOk)
def register_provider(
    offer: ProviderIn,
    caller: str = Depends(get_caller),
    ledger: Ledger = Depends(get_ledger),
):
    """Register the caller as a provider with the given capacity and price."""
    result = ledger.register_provider(caller, offer.resources, offer.price_per_unit)
    record_operation("register_provider", result)
    result.unwrap()
    return OperationOk()


@router.put("/me", response_model=OperationOk)
def update_provider(
    offer: ProviderIn,
    caller: str = Depends(get_caller),
    ledger: Ledger = Depends(get_ledger),
):
    """Overwrite the caller's capacity and price."""
    result = ledger.update_provider(caller, offer.resources, offer.price_per_unit)
    record_operation("update_provider", result)
    result.unwrap()
    return OperationOk()


@router.post("/me/withdraw", response_model=WithdrawalOut)
def withdraw_earnings(caller: str = Depends(get_caller), ledger: Ledger = Depends(get_ledger)):
    """Pay out all of the caller's accumulated earnings."""
    result = ledger.withdraw_earnings(caller)
    record_operation("withdraw_earnings", result)
    amount = result.unwrap()
    record_withdrawal(amount)
    return WithdrawalOut(amount=amount)


@router.get("/{identity}", response_model=ProviderOut)
def get_provider(identity: str, ledger: Ledger = Depends(get_ledger)):
    provider = ledger.get_provider(identity)
    if provider is None:
        raise HTTPException(status_code=404, detail="Provider not found")
    return ProviderOut.model_validate(provider)
