from celery import Celery

from paygate.core.config import get_settings

settings = get_settings()

celery = Celery(
    "paygate",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

# Import tasks
celery.conf.imports = ["paygate.tasks"]

# Set task routes
celery.conf.task_routes = {
    "paygate.tasks.fulfill_checkout_session": {"queue": "fulfillment"}
}

# Publishing happens on the webhook path; give up quickly if the broker is down
celery.conf.task_publish_retry_policy = {
    "max_retries": 1,
    "interval_start": 0,
    "interval_step": 0.2,
    "interval_max": 0.2,
}
