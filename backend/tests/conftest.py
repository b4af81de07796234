import logging
import os
from unittest.mock import MagicMock, patch

import pytest
from celery import Task
from fastapi.testclient import TestClient

# Set test environment variables before the app reads its settings
os.environ.update(
    {
        "STRIPE_SECRET_API_KEY": "sk_test_1234567890",
        "STRIPE_WEBHOOK_SECRET": "whsec_test",
        "WEBHOOK_VERIFICATION_MODE": "enforced",
        "WEBHOOK_TOLERANCE_SECONDS": "300",
        "REDIS_URL": "redis://localhost:6379/2",  # Use a separate Redis DB for testing
    }
)
os.environ.pop("STRIPE_PREVIOUS_WEBHOOK_SECRET", None)
os.environ.pop("STRIPE_DEFAULT_PRICE_ID", None)

from paygate.core.config import Settings, VerificationMode, get_settings
from paygate.main import create_app, get_stripe_client

logger = logging.getLogger(__name__)

WEBHOOK_SECRET = "whsec_test"


@pytest.fixture(autouse=True)
def celery_publish_mock():
    with patch.object(Task, "apply_async") as mock:

        class MockAsyncResult:
            def __init__(self):
                self.id = "mock-task-id"

        mock.return_value = MockAsyncResult()
        yield mock


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def stripe_client(app):
    mock = MagicMock()
    app.dependency_overrides[get_stripe_client] = lambda: mock
    yield mock
    app.dependency_overrides.pop(get_stripe_client)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def bypass_client(settings):
    dev_settings = settings.model_copy(
        update={
            "webhook_verification_mode": VerificationMode.BYPASSED,
            "stripe_webhook_secret": None,
        }
    )
    with TestClient(create_app(dev_settings)) as test_client:
        yield test_client
