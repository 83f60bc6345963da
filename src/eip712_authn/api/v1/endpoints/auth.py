"""Authentication API endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel

from eip712_authn.core.config import get_settings
from eip712_authn.services.auth import AuthServer, get_auth_server

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])

AUTH_SCHEME = "EIP712"


class VerifyResponse(BaseModel):
    """Authenticated identity."""

    address: str


def _error_detail(code: str, message: str) -> dict[str, str]:
    return {"error": code, "message": message}


def _extract_signature(authorization: str | None) -> str:
    """Pull the signature out of an `EIP712 <signature>` header."""
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_error_detail("missing_signature", "Missing Authorization header"),
            headers={"WWW-Authenticate": AUTH_SCHEME},
        )

    scheme, _, signature = authorization.partition(" ")
    if scheme != AUTH_SCHEME or not signature.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_error_detail(
                "missing_signature",
                f"Authorization header must use the {AUTH_SCHEME} scheme",
            ),
            headers={"WWW-Authenticate": AUTH_SCHEME},
        )
    return signature.strip()


@router.get("/challenge")
async def request_challenge(
    auth_server: Annotated[AuthServer, Depends(get_auth_server)],
    address: Annotated[str, Query(description="Wallet address to authenticate")],
    network_id: Annotated[
        int | None, Query(alias="networkId", description="Chain ID of the wallet")
    ] = None,
) -> dict[str, Any]:
    """Issue a typed-data challenge for a wallet address.

    The returned envelope must be signed with eth_signTypedData_v4 and
    submitted to /auth/verify before the embedded token expires.
    """
    if network_id is None:
        network_id = get_settings().default_chain_id

    try:
        envelope = auth_server.create_challenge(address, network_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error_detail("invalid_address", str(e)),
        ) from e

    logger.info(f"Issued challenge for {address} on chain {network_id}")
    return envelope.to_typed_data()


@router.post("/verify", response_model=VerifyResponse)
async def verify_challenge(
    envelope: Annotated[dict[str, Any], Body()],
    auth_server: Annotated[AuthServer, Depends(get_auth_server)],
    authorization: Annotated[str | None, Header()] = None,
) -> VerifyResponse:
    """Verify a signed challenge.

    The unsigned envelope is the request body; the signature travels in
    the `Authorization: EIP712 <signature>` header. Verification failures
    are rendered by the application's AuthError handler.
    """
    signature = _extract_signature(authorization)
    address = auth_server.verify_challenge(envelope, signature)

    return VerifyResponse(address=address)
