"""Mapping of ledger rejections onto HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from compute_market.ledger import LedgerError, LedgerRejected

logger = logging.getLogger(__name__)

HTTP_STATUS = {
    LedgerError.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LedgerError.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    LedgerError.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    LedgerError.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    LedgerError.INSUFFICIENT_BALANCE: status.HTTP_402_PAYMENT_REQUIRED,
}

MESSAGES = {
    LedgerError.NOT_FOUND: "Provider or job not found",
    LedgerError.UNAUTHORIZED: "Caller may not perform this operation",
    LedgerError.ALREADY_EXISTS: "Provider already registered",
    LedgerError.INVALID_AMOUNT: "Amount exceeds available capacity or there are no earnings to withdraw",
    LedgerError.INSUFFICIENT_BALANCE: "Consumer balance too low",
}


def error_body(error: LedgerError) -> dict:
    return {"error": error.kind, "code": error.code, "detail": MESSAGES[error]}


def register_error_handlers(app: FastAPI) -> None:
    """Render ``LedgerRejected`` as a structured JSON error."""

    @app.exception_handler(LedgerRejected)
    async def ledger_rejected_handler(request: Request, exc: LedgerRejected):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.error.kind)
        return JSONResponse(status_code=HTTP_STATUS[exc.error], content=error_body(exc.error))
