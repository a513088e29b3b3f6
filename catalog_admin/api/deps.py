"""
Admin Dependencies

Login and token lifetime are handled by the auth service; these dependencies
only pick up the caller's bearer token and hand it to the catalog backend
client.
"""
import hashlib
import logging
from functools import lru_cache
from typing import Optional

import requests
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from catalog_admin.config import settings
from catalog_admin.services.bulk_jobs import BulkJobStore, bulk_job_store
from catalog_admin.services.discount_client import DiscountServiceClient

logger = logging.getLogger(__name__)

# Use HTTPBearer for better Swagger UI compatibility
http_bearer = HTTPBearer(auto_error=False)


async def get_admin_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> str:
    """Bearer token of the current admin"""
    auth_token = None

    if credentials and credentials.credentials:
        auth_token = credentials.credentials
    else:
        # Direct header extraction (fallback)
        auth_header = request.headers.get("Authorization", "")
        if auth_header.lower().startswith("bearer "):
            auth_token = auth_header[7:].strip()

    if not auth_token:
        logger.warning(f"No token provided for {request.method} {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided. Please login again.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return auth_token


def get_caller_id(token: str = Depends(get_admin_token)) -> str:
    """Stable identifier for the caller that does not keep the raw token around"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]


@lru_cache()
def get_http_session() -> requests.Session:
    """Connection pool shared by every backend call; closed when the app shuts down"""
    return requests.Session()


def get_discount_service(token: str = Depends(get_admin_token)) -> DiscountServiceClient:
    # bulk batches run after the response is sent; the session must outlive the request
    return DiscountServiceClient(
        settings.API_BASE_URL,
        token=token,
        timeout=settings.API_TIMEOUT_SECONDS,
        session=get_http_session(),
    )


def get_bulk_job_store() -> BulkJobStore:
    return bulk_job_store
