import logging

from paygate.schemas.events import (
    ChargeObject,
    CheckoutSessionObject,
    PaymentIntentObject,
)
from paygate.services.dispatcher import EventDispatcher
from paygate.services.webhook_verify import VerifiedEvent
from paygate.tasks import fulfill_checkout_session

logger = logging.getLogger(__name__)


def handle_checkout_session_completed(event: VerifiedEvent) -> None:
    session = CheckoutSessionObject.model_validate(event.data_object())
    logger.info(
        f"Checkout session completed: ID={session.id}, "
        f"Amount={session.amount_total}, Email={session.email}"
    )

    # Fulfillment runs on the worker; the webhook acknowledgement never waits on it
    try:
        result = fulfill_checkout_session.apply_async(
            args=[session.id, event.id],
            kwargs={
                "amount_total": session.amount_total,
                "customer_email": session.email,
            },
        )
        logger.info(f"Queued fulfillment for {session.id} as task {result.id}")
    except Exception as e:
        logger.error(f"Failed to queue fulfillment for {session.id}: {e}", exc_info=True)


def handle_payment_intent_succeeded(event: VerifiedEvent) -> None:
    pi = PaymentIntentObject.model_validate(event.data_object())
    logger.info(f"PaymentIntent succeeded: ID={pi.id}, Amount={pi.amount}")


def handle_charge_succeeded(event: VerifiedEvent) -> None:
    ch = ChargeObject.model_validate(event.data_object())
    logger.info(f"Charge succeeded: ID={ch.id}, Amount={ch.amount}, Paid={ch.paid}")


def build_dispatcher() -> EventDispatcher:
    dispatcher = EventDispatcher()
    dispatcher.register("checkout.session.completed", handle_checkout_session_completed)
    dispatcher.register("payment_intent.succeeded", handle_payment_intent_succeeded)
    dispatcher.register("charge.succeeded", handle_charge_succeeded)
    return dispatcher
