"""Thin calls into the Stripe API through an injected ``StripeClient``.

SDK objects are returned as plain dicts; the objects themselves carry the
requestor and its API key.
"""

import logging
from typing import Any

import stripe

from paygate.schemas.checkout import (
    CreateSessionRequest,
    SessionCreated,
    SessionSummary,
    SessionUpdated,
    UpdateSessionRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_UI_MODE = "hosted"


class MissingLineItems(ValueError):
    pass


def build_session_params(
    req: CreateSessionRequest, default_price_id: str | None = None
) -> dict[str, Any]:
    line_items = [li.to_params() for li in req.line_items]
    if not line_items:
        if not default_price_id:
            raise MissingLineItems("line_items is required")
        line_items = [{"price": default_price_id, "quantity": 1}]

    params: dict[str, Any] = {
        "mode": req.mode,
        "ui_mode": req.ui_mode or DEFAULT_UI_MODE,
        "line_items": line_items,
    }
    if req.success_url:
        params["success_url"] = req.success_url
    if req.cancel_url:
        params["cancel_url"] = req.cancel_url
    if req.customer_email:
        params["customer_email"] = req.customer_email
    return params


def create_checkout_session(
    client: stripe.StripeClient,
    req: CreateSessionRequest,
    default_price_id: str | None = None,
) -> SessionCreated:
    params = build_session_params(req, default_price_id)
    logger.info(
        f"Creating Checkout Session (Mode: {params['mode']}, "
        f"UIMode: {params['ui_mode']})"
    )
    session = client.checkout.sessions.create(params=params)
    logger.info(f"Created Checkout Session: {session.id} (URL: {session.url})")
    return SessionCreated(id=session.id, url=session.url)


def get_checkout_session(client: stripe.StripeClient, session_id: str) -> SessionSummary:
    logger.info(f"Fetching Checkout Session: {session_id}")
    session = client.checkout.sessions.retrieve(session_id)
    logger.info(
        f"Fetched Checkout Session: {session.id} "
        f"(Status: {session.status}, Amount: {session.amount_total})"
    )
    return SessionSummary(
        id=session.id, status=session.status, amount=session.amount_total
    )


def update_checkout_session(
    client: stripe.StripeClient, session_id: str, req: UpdateSessionRequest
) -> SessionUpdated:
    # Checkout Sessions accept few updates; shipping and transfer data are
    # only recorded here.
    params: dict[str, Any] = {}
    if req.new_price:
        params["line_items"] = [{"price": req.new_price, "quantity": 1}]
    logger.info(
        f"Updating Checkout Session {session_id} with price={req.new_price} "
        f"transferData={req.transfer_data} shipping={req.shipping_address}"
    )
    session = client.checkout.sessions.update(session_id, params=params)
    logger.info(f"Updated Checkout Session: {session.id}")
    return SessionUpdated(id=session.id)


def get_payment_intent(client: stripe.StripeClient, payment_intent_id: str):
    logger.info(f"Fetching PaymentIntent: {payment_intent_id}")
    pi = client.payment_intents.retrieve(payment_intent_id)
    logger.info(f"PaymentIntent: {pi.id} (Status: {pi.status}, Amount: {pi.amount})")
    return pi.to_dict()


def get_charge(client: stripe.StripeClient, charge_id: str):
    logger.info(f"Fetching Charge: {charge_id}")
    ch = client.charges.retrieve(charge_id)
    logger.info(f"Charge: {ch.id} (Amount: {ch.amount}, Paid: {ch.paid})")
    return ch.to_dict()


def get_account(client: stripe.StripeClient):
    logger.info("Fetching Stripe Account")
    acct = client.accounts.retrieve_current()
    logger.info(f"Stripe Account: {acct.id}")
    return acct.to_dict()
