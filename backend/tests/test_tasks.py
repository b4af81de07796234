import pytest

from paygate.tasks import fulfill_checkout_session


def test_fulfill_checkout_session():
    result = fulfill_checkout_session.apply(
        args=["cs_test_1", "evt_1"],
        kwargs={"amount_total": 2000, "customer_email": "buyer@example.com"},
    ).get()

    assert result == {
        "status": "fulfilled",
        "session_id": "cs_test_1",
        "event_id": "evt_1",
    }


def test_fulfill_checkout_session_is_repeatable():
    first = fulfill_checkout_session.apply(args=["cs_test_1", "evt_1"]).get()
    second = fulfill_checkout_session.apply(args=["cs_test_1", "evt_1"]).get()
    assert first == second


def test_fulfill_checkout_session_requires_id():
    with pytest.raises(ValueError, match="Missing checkout session ID"):
        fulfill_checkout_session.apply(args=["", "evt_1"]).get()
