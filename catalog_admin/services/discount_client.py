"""
HTTP client for the remote catalog backend's discount endpoints
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol, Union

import requests

from catalog_admin.services.errors import RemoteAuthenticationError, RemoteServiceError
from catalog_admin.utils.discount import format_discount_percentage

logger = logging.getLogger(__name__)

ADD_DISCOUNT_ENDPOINT = "/api/v1/admin/product/add-discount"
REMOVE_DISCOUNT_ENDPOINT = "/api/v1/admin/product/remove-discount"
DISCOUNTED_PRODUCTS_ENDPOINT = "/api/v1/pro/product-discount"


class DiscountService(Protocol):
    """Single-product discount operations used by the editor and bulk batches"""

    def apply_discount(self, product_id: str, discount_percent: Union[Decimal, str]) -> Dict[str, Any]:
        ...

    def remove_discount(self, product_id: str) -> Dict[str, Any]:
        ...


def _error_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message")
    return None


class DiscountServiceClient:
    """
    Talks to the catalog backend with the admin's bearer token.

    The token is obtained and refreshed by the auth layer; this client only
    attaches it to each request.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {url} (token: {'yes' if self.token else 'no'})")

        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {endpoint} failed: {str(e)}")
            raise RemoteServiceError(f"Could not reach catalog backend: {str(e)}")

        if response.status_code == 401:
            logger.warning(f"Authentication failed (401): {endpoint}")
            raise RemoteAuthenticationError()

        if response.status_code == 400:
            message = _error_message(response)
            logger.warning(f"Bad request (400): {endpoint} {message}")
            raise RemoteServiceError(
                message or "Bad request - please check your request parameters",
                status_code=400,
            )

        if response.status_code == 404:
            logger.warning(f"API endpoint not found (404): {endpoint}")
            raise RemoteServiceError(f"API endpoint not found: {endpoint}", status_code=404)

        if not response.ok:
            message = _error_message(response)
            logger.error(f"API request failed: {response.status_code} {message}")
            raise RemoteServiceError(
                message or f"API request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            data = {}
        return data if isinstance(data, dict) else {"data": data}

    def apply_discount(self, product_id: str, discount_percent: Union[Decimal, str]) -> Dict[str, Any]:
        """Apply a percentage discount to one product"""
        payload = {
            "productId": product_id,
            "discountPercentage": format_discount_percentage(discount_percent),
        }
        try:
            return self._request("POST", ADD_DISCOUNT_ENDPOINT, payload)
        except RemoteAuthenticationError:
            raise
        except RemoteServiceError as e:
            raise RemoteServiceError(f"Failed to apply discount: {e.message}", status_code=e.status_code)

    def remove_discount(self, product_id: str) -> Dict[str, Any]:
        """Remove the discount from one product"""
        try:
            return self._request("POST", REMOVE_DISCOUNT_ENDPOINT, {"productId": product_id})
        except RemoteAuthenticationError:
            raise
        except RemoteServiceError as e:
            raise RemoteServiceError(f"Failed to remove discount: {e.message}", status_code=e.status_code)

    def list_discounted_products(self) -> List[Dict[str, Any]]:
        """Products that currently carry a discount price"""
        body = self._request("GET", DISCOUNTED_PRODUCTS_ENDPOINT)
        data = body.get("data")
        if isinstance(data, dict) and isinstance(data.get("products"), list):
            return data["products"]
        if isinstance(body.get("products"), list):
            return body["products"]
        return []
