"""Pydantic schemas for the ledger API."""

from pydantic import BaseModel, Field

from compute_market.ledger import JobStatus


class ProviderIn(BaseModel):
    """Schema for registering or updating the caller's provider offer."""

    resources: int = Field(ge=0)
    price_per_unit: int = Field(ge=0)


class ProviderOut(BaseModel):
    """Schema for returning provider information."""

    identity: str
    resources: int
    price_per_unit: int
    earnings: int

    model_config = {"from_attributes": True}


class FundsIn(BaseModel):
    """Schema for depositing funds into the caller's consumer balance."""

    amount: int = Field(ge=0)


class ConsumerOut(BaseModel):
    """Schema for returning consumer information."""

    identity: str
    balance: int

    model_config = {"from_attributes": True}


class ComputeRequestIn(BaseModel):
    """Schema for requesting compute units from a provider."""

    provider: str
    resources: int = Field(ge=0)


class JobCreated(BaseModel):
    job_id: int


class JobOut(BaseModel):
    """Schema for returning a job."""

    id: int
    consumer: str
    provider: str
    resources: int
    total_cost: int
    status: JobStatus

    model_config = {"from_attributes": True}


class WithdrawalOut(BaseModel):
    amount: int


class OperationOk(BaseModel):
    success: bool = True


class TokenRequest(BaseModel):
    """Schema for minting a caller token."""

    identity: str = Field(min_length=1)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: str
