"""PayPal REST (Orders v2) implementation of PaymentGateway.

Access tokens come from the client-credentials OAuth flow and are cached
until shortly before they expire.  Transport failures, non-JSON bodies
and error payloads all surface as PaymentGatewayError.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import httpx

from storefront.domain.exceptions import PaymentGatewayError
from storefront.domain.model.order import OrderTotals
from storefront.domain.service.payment_gateway import (
    CaptureResult,
    PaymentGateway,
    RemoteOrderItem,
)

logger = logging.getLogger(__name__)

SANDBOX_BASE_URL = "https://api-m.sandbox.paypal.com"
LIVE_BASE_URL = "https://api-m.paypal.com"

# Refresh this many seconds before PayPal says the token expires
TOKEN_EXPIRY_MARGIN = 60
MAX_ITEM_NAME = 127


def base_url_for(environment: str) -> str:
    return SANDBOX_BASE_URL if environment == "sandbox" else LIVE_BASE_URL


class PayPalGateway(PaymentGateway):

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str = SANDBOX_BASE_URL,
        http: httpx.Client | None = None,
        timeout: float = 15.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self._clock = clock
        self._token: str | None = None
        self._token_expires_at = 0.0

    # --- PaymentGateway interface ---------------------------------------------

    def create_remote_order(
        self,
        reference: str,
        totals: OrderTotals,
        items: list[RemoteOrderItem],
    ) -> str:
        totals = totals.rounded()
        currency = totals.subtotal.currency
        body = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": reference,
                    "amount": {
                        "currency_code": currency,
                        "value": totals.grand_total.to_plain(),
                        "breakdown": {
                            "item_total": _amount(currency, totals.subtotal.to_plain()),
                            "tax_total": _amount(currency, totals.tax.to_plain()),
                            "shipping": _amount(currency, totals.shipping.to_plain()),
                        },
                    },
                    "items": [_item(currency, item) for item in items],
                }
            ],
        }
        data = self._request("POST", "/v2/checkout/orders", json=body)
        remote_id = data.get("id")
        if not remote_id:
            raise PaymentGatewayError("PayPal did not return an order id")
        logger.info("Created PayPal order %s for %s", remote_id, reference)
        return remote_id

    def capture_remote_order(self, remote_order_id: str) -> CaptureResult:
        data = self._request("POST", f"/v2/checkout/orders/{remote_order_id}/capture", json={})
        capture_id = None
        try:
            capture_id = data["purchase_units"][0]["payments"]["captures"][0]["id"]
        except (KeyError, IndexError, TypeError):
            logger.warning("PayPal capture %s has no capture id", remote_order_id)
        return CaptureResult(status=str(data.get("status", "UNKNOWN")), capture_id=capture_id)

    # --- Token handling -------------------------------------------------------

    def access_token(self) -> str:
        if not self._client_id or not self._client_secret:
            raise PaymentGatewayError("PayPal configuration missing: set PAYPAL_CLIENT_ID and PAYPAL_CLIENT_SECRET")
        if self._token and self._clock() < self._token_expires_at:
            return self._token

        try:
            response = self._http.post(
                "/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                auth=(self._client_id, self._client_secret),
                headers={"Accept": "application/json", "Accept-Language": "en_US"},
            )
        except httpx.HTTPError as exc:
            raise PaymentGatewayError(f"PayPal token request failed: {exc}") from exc

        data = _json_or_error(response, "token")
        token = data.get("access_token")
        if response.status_code >= 400 or not token:
            raise PaymentGatewayError(
                f"PayPal token error: {data.get('error_description', 'Unknown error')}"
            )
        self._token = token
        self._token_expires_at = self._clock() + int(data.get("expires_in", 0)) - TOKEN_EXPIRY_MARGIN
        return token

    # --- Internal helpers -----------------------------------------------------

    def _request(self, method: str, path: str, json: dict) -> dict:
        headers = {
            "Authorization": f"Bearer {self.access_token()}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        try:
            response = self._http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("PayPal %s %s failed: %s", method, path, exc)
            raise PaymentGatewayError(f"PayPal request failed: {exc}") from exc

        data = _json_or_error(response, path)
        if response.status_code >= 400:
            message = _error_message(data)
            logger.error("PayPal %s %s returned %d: %s", method, path, response.status_code, message)
            raise PaymentGatewayError(f"PayPal error: {message}")
        return data


def _amount(currency: str, value: str) -> dict:
    return {"currency_code": currency, "value": value}


def _item(currency: str, item: RemoteOrderItem) -> dict:
    raw = {
        "name": item.name[:MAX_ITEM_NAME],
        "quantity": str(item.quantity),
        "unit_amount": _amount(currency, item.unit_price.to_plain()),
    }
    if item.sku and item.sku != "N/A":
        raw["sku"] = item.sku
    return raw


def _json_or_error(response: httpx.Response, what: str) -> dict:
    try:
        data = response.json()
    except ValueError as exc:
        logger.error("PayPal %s returned non-JSON: %s", what, response.text[:1000])
        raise PaymentGatewayError("Malformed response from PayPal") from exc
    if not isinstance(data, dict):
        raise PaymentGatewayError("Malformed response from PayPal")
    return data


def _error_message(data: dict) -> str:
    details = data.get("details")
    if isinstance(details, list) and details and isinstance(details[0], dict):
        detail = details[0]
        return str(detail.get("description") or detail.get("issue") or "Unknown error")
    return str(data.get("message") or data.get("error_description") or data.get("error") or "Unknown error")
