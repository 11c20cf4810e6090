"""FastAPI surface for checkout.

The checkout form posts here; PayPal's JS SDK calls the two PayPal
endpoints.  The signed-in user arrives in the ``X-User-Id`` header set
by the session layer in front of this app.
"""

from __future__ import annotations

import html
import logging
from dataclasses import asdict

from fastapi import Depends, FastAPI, Form, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from storefront.application.dto import (
    CheckoutRequest,
    parse_selected_items,
    parse_summary_items,
)
from storefront.domain.exceptions import DomainException, ValidationError
from storefront.infrastructure.bootstrap import Services

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to process order: an unexpected error occurred. Please try again."


class BadRequest(Exception):
    """Malformed client input that is not a business rule violation."""


def current_user(x_user_id: str | None = Header(default=None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Please log in to continue.")
    return x_user_id.strip()


def _address_id(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return 0
    try:
        return int(raw)
    except ValueError:
        raise BadRequest(f"Invalid address id '{raw}'") from None


def _selected(raw: str | None):
    try:
        return parse_selected_items(raw)
    except ValidationError as exc:
        raise BadRequest(str(exc)) from exc


def _describe(exc: RequestValidationError) -> str:
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{field}: {error.get('msg', 'invalid')}")
    return "Invalid request: " + "; ".join(problems)


def _error_page(message: str) -> HTMLResponse:
    body = (
        "<!doctype html><html><head><title>Checkout</title></head><body>"
        f'<div class="alert alert-danger">{html.escape(message)}</div>'
        '<a href="/checkout">Back to checkout</a>'
        "</body></html>"
    )
    return HTMLResponse(body, status_code=200)


def create_app(services: Services | None = None) -> FastAPI:
    services = services or Services()
    app = FastAPI(title="Storefront Checkout API")

    # --- Exception handlers ---------------------------------------------------

    @app.exception_handler(BadRequest)
    async def bad_request_handler(request: Request, exc: BadRequest) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _describe(exc)})

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    # --- Checkout -------------------------------------------------------------

    @app.get("/checkout")
    def checkout_summary(
        selected_items: str | None = None,
        user_id: str = Depends(current_user),
    ):
        try:
            summary = services.preview_checkout().handle(user_id, _selected(selected_items))
        except DomainException as exc:
            return JSONResponse(status_code=200, content={"error": str(exc)})
        payload = asdict(summary)
        payload["needs_review"] = summary.needs_review
        return payload

    @app.post("/checkout")
    def place_order(
        user_id: str = Depends(current_user),
        selected_items: str | None = Form(default=None),
        shipping_address: str | None = Form(default=None),
        billing_address: str | None = Form(default=None),
        payment_method: str | None = Form(default=None),
        notes: str = Form(default=""),
    ):
        request = CheckoutRequest(
            user_id=user_id,
            shipping_address_id=_address_id(shipping_address),
            billing_address_id=_address_id(billing_address),
            payment_method=payment_method or "",
            notes=notes,
            selected_items=_selected(selected_items),
        )
        try:
            result = services.place_order().handle(request)
        except ValidationError as exc:
            return _error_page(str(exc))
        except DomainException as exc:
            return _error_page(f"Failed to process order: {exc}")
        except Exception:
            logger.exception("Checkout failed for user %s", user_id)
            return _error_page(GENERIC_FAILURE)

        if not result.placed:
            return RedirectResponse("/cart", status_code=303)
        return RedirectResponse(f"/orders/{result.order.id}/confirmation", status_code=303)

    # --- PayPal ---------------------------------------------------------------

    @app.post("/paypal/create-order")
    def create_paypal_order(
        user_id: str = Depends(current_user),
        selected_items: str | None = Form(default=None),
        order_items: str | None = Form(default=None),
        shipping_address: str | None = Form(default=None),
        billing_address: str | None = Form(default=None),
        notes: str = Form(default=""),
    ):
        try:
            summary = parse_summary_items(order_items)
        except ValidationError as exc:
            raise BadRequest(str(exc)) from exc
        request = CheckoutRequest(
            user_id=user_id,
            shipping_address_id=_address_id(shipping_address),
            billing_address_id=_address_id(billing_address),
            payment_method="paypal",
            notes=notes,
            selected_items=_selected(selected_items),
        )
        try:
            created = services.create_paypal_order().handle(request, summary)
        except DomainException as exc:
            return {"error": str(exc)}
        except Exception:
            logger.exception("PayPal order creation failed for user %s", user_id)
            return {"error": GENERIC_FAILURE}
        return {"id": created.id, "order_id": created.order_id}

    @app.post("/paypal/capture-order")
    def capture_paypal_order(
        user_id: str = Depends(current_user),
        paypal_order_id: str = Form(default=""),
        order_id: int = Form(...),
    ):
        try:
            order = services.capture_paypal_order().handle(user_id, paypal_order_id, order_id)
        except DomainException as exc:
            return {"error": str(exc)}
        except Exception:
            logger.exception("PayPal capture failed for order %s", order_id)
            return {"error": GENERIC_FAILURE}
        return {"redirect": f"/orders/{order.id}/confirmation"}

    # --- Orders ---------------------------------------------------------------

    @app.get("/orders/{order_id}/confirmation")
    def order_confirmation(order_id: int, user_id: str = Depends(current_user)):
        try:
            order = services.show_order().handle(order_id, user_id=user_id)
        except DomainException as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(order)

    return app
