"""
Caller authentication for the ledger API.

The ledger trusts the identity it is given, so this module is the only
place a caller proves who they are: every mutating route resolves the
caller from a bearer JWT whose ``sub`` claim is the identity.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from compute_market import config

from .schemas import TokenOut, TokenRequest

router = APIRouter()

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def verify_issuer_key(api_key: str = Header(..., alias="X-API-Key")) -> None:
    """Only holders of the issuer key may mint caller tokens."""
    if api_key != config.TOKEN_ISSUER_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )


def create_caller_token(
    identity: str, expires_delta: Optional[timedelta] = None
) -> Tuple[str, datetime]:
    """
    Create a JWT asserting a caller identity.

    Args:
        identity: The caller identity placed in the ``sub`` claim
        expires_delta: Token lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Tuple of the encoded token and its expiry time
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": identity, "exp": expire}
    encoded_jwt = jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)
    return encoded_jwt, expire


def get_caller(token: str = Depends(oauth2_scheme)) -> str:
    """
    Resolve the authenticated caller identity from a bearer token.

    Raises:
        HTTPException: If the token is invalid, expired or has no subject
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise credentials_exception

    identity = payload.get("sub")
    if not identity:
        raise credentials_exception
    return identity


@router.post("/token", response_model=TokenOut, dependencies=[Depends(verify_issuer_key)])
def issue_token(request: TokenRequest) -> TokenOut:
    """Mint a caller token for an identity vouched for by the issuer."""
    token, expires = create_caller_token(request.identity)
    return TokenOut(access_token=token, expires_at=expires.isoformat())
