import logging

import stripe
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from paygate.core.config import Settings, VerificationMode, get_settings
from paygate.middleware.body_size import BodySizeLimitMiddleware
from paygate.schemas.checkout import (
    CreateSessionRequest,
    SessionCreated,
    SessionSummary,
    SessionUpdated,
    UpdateSessionRequest,
)
from paygate.services import stripe_proxy
from paygate.services.dispatcher import EventDispatcher
from paygate.services.event_handlers import build_dispatcher
from paygate.services.webhook_verify import WebhookVerificationError, WebhookVerifier

logger = logging.getLogger(__name__)

router = APIRouter()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="paygate",
        description="Stripe checkout proxy and webhook receiver",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.stripe_client = stripe.StripeClient(settings.stripe_secret_api_key)
    app.state.verifier = WebhookVerifier.from_settings(settings)
    app.state.dispatcher = build_dispatcher()

    logger.info(f"Stripe key loaded (starts with): {settings.masked_api_key}")
    if settings.webhook_verification_mode is VerificationMode.BYPASSED:
        logger.warning(
            "Webhook verification mode is BYPASSED: unsigned webhooks will be "
            "accepted. Never run this way in production."
        )

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.include_router(router)
    return app


# ---------- dependencies ----------
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_stripe_client(request: Request) -> stripe.StripeClient:
    return request.app.state.stripe_client


def get_verifier(request: Request) -> WebhookVerifier:
    return request.app.state.verifier


def get_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.dispatcher


def _stripe_error(e: stripe.StripeError, code: int = status.HTTP_400_BAD_REQUEST):
    logger.error(f"Stripe API error: {e}")
    return HTTPException(status_code=code, detail=f"Stripe API error: {e}")


@router.get("/health", include_in_schema=False)
async def health(settings: Settings = Depends(get_app_settings)):
    return {
        "status": "ok",
        "webhook_verification": settings.webhook_verification_mode.value,
    }


# ---------- checkout sessions ----------
@router.post("/checkout/session", response_model=SessionCreated)
def create_checkout_session(
    data: CreateSessionRequest,
    client: stripe.StripeClient = Depends(get_stripe_client),
    settings: Settings = Depends(get_app_settings),
):
    try:
        return stripe_proxy.create_checkout_session(
            client, data, default_price_id=settings.default_price_id
        )
    except stripe_proxy.MissingLineItems as e:
        raise HTTPException(status_code=400, detail=str(e))
    except stripe.StripeError as e:
        raise _stripe_error(e)


@router.get("/checkout/session/{session_id}", response_model=SessionSummary)
def get_checkout_session(
    session_id: str, client: stripe.StripeClient = Depends(get_stripe_client)
):
    try:
        return stripe_proxy.get_checkout_session(client, session_id)
    except stripe.StripeError as e:
        raise _stripe_error(e, status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.patch("/checkout/session/{session_id}", response_model=SessionUpdated)
def update_checkout_session(
    session_id: str,
    data: UpdateSessionRequest,
    client: stripe.StripeClient = Depends(get_stripe_client),
):
    try:
        return stripe_proxy.update_checkout_session(client, session_id, data)
    except stripe.StripeError as e:
        raise _stripe_error(e)


# ---------- payment objects ----------
@router.get("/payment_intents/{payment_intent_id}")
def get_payment_intent(
    payment_intent_id: str, client: stripe.StripeClient = Depends(get_stripe_client)
):
    try:
        return stripe_proxy.get_payment_intent(client, payment_intent_id)
    except stripe.StripeError as e:
        raise _stripe_error(e)


@router.get("/charges/{charge_id}")
def get_charge(charge_id: str, client: stripe.StripeClient = Depends(get_stripe_client)):
    try:
        return stripe_proxy.get_charge(client, charge_id)
    except stripe.StripeError as e:
        raise _stripe_error(e)


@router.get("/account")
def get_account(client: stripe.StripeClient = Depends(get_stripe_client)):
    try:
        return stripe_proxy.get_account(client)
    except stripe.StripeError as e:
        raise _stripe_error(e)


# ---------- webhooks ----------
@router.post("/webhook/stripe")
async def stripe_webhook(
    request: Request,
    verifier: WebhookVerifier = Depends(get_verifier),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
):
    # Signature covers the exact bytes; never re-serialize before verifying
    raw = await request.body()
    sig = request.headers.get("Stripe-Signature")

    try:
        event = verifier.verify(raw, sig)
    except WebhookVerificationError as e:
        logger.warning(f"Webhook rejected ({e.reason}): {e}")
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Event received: {event.type} (id={event.id})")
    outcome = await run_in_threadpool(dispatcher.dispatch, event)
    logger.info(f"Event {event.id} dispatch outcome: {outcome.status.value}")
    return {"status": "received"}


app = create_app()
