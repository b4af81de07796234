import logging

from paygate.celery_app import celery

logger = logging.getLogger(__name__)


@celery.task(bind=True)
def fulfill_checkout_session(
    self,
    session_id: str,
    event_id: str,
    amount_total: int | None = None,
    customer_email: str | None = None,
):
    """Fulfill a completed checkout session.

    Stripe redelivers webhooks, so this can run more than once for the same
    session. Anything added here must be keyed on ``session_id``.
    """
    logger.info(
        f"Starting fulfill_checkout_session with session_id={session_id}, "
        f"event_id={event_id}"
    )
    if self.request.id:
        logger.info(f"Task ID: {self.request.id}")
    if not session_id:
        raise ValueError("Missing checkout session ID")

    logger.info(
        f"Fulfilled checkout session {session_id}: "
        f"amount={amount_total}, email={customer_email}"
    )
    return {"status": "fulfilled", "session_id": session_id, "event_id": event_id}
