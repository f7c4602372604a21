# tests/test_adapters.py
import threading
from types import SimpleNamespace

import resend
import stripe

from mealpass.services.email_service import EmailService
from mealpass.services.payment import StripePaymentGateway


async def test_stripe_capture_runs_off_the_event_loop(monkeypatch):
    calls = []

    def fake_create(**kwargs):
        calls.append((threading.get_ident(), kwargs))
        return SimpleNamespace(status="succeeded", id="pi_test")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    gateway = StripePaymentGateway(api_key="sk_test_123", payment_method="pm_card_visa")

    result = await gateway.capture(70.0, "INR", metadata={"user_id": "u1"})

    assert result.success is True
    assert result.transaction_id == "pi_test"
    thread_id, kwargs = calls[0]
    assert thread_id != threading.get_ident()
    assert kwargs["amount"] == 7000
    assert kwargs["currency"] == "inr"


async def test_stripe_card_error_is_a_decline(monkeypatch):
    def fake_create(**kwargs):
        raise stripe.CardError("Your card was declined.", None, "card_declined")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    gateway = StripePaymentGateway(api_key="sk_test_123", payment_method="pm_card_visa")

    result = await gateway.capture(25.0, "INR")

    assert result.success is False


async def test_email_send_runs_off_the_event_loop(monkeypatch):
    calls = []

    def fake_send(params):
        calls.append((threading.get_ident(), params))
        return {"id": "email_1"}

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    service = EmailService(api_key="re_test", sender="MealPass <orders@mealpass.app>")

    assert await service.send("asha@campus.edu", "Menu update", "New dinners.") is True
    thread_id, params = calls[0]
    assert thread_id != threading.get_ident()
    assert params["to"] == ["asha@campus.edu"]


async def test_email_send_failure_returns_false(monkeypatch):
    def fake_send(params):
        raise RuntimeError("resend down")

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    service = EmailService(api_key="re_test")

    assert await service.send("asha@campus.edu", "Menu update", "New dinners.") is False
