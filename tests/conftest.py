# tests/conftest.py
# Settings are read at import time, so the environment is prepared first.
import os

os.environ["DATABASE_URL"] = "mongodb://localhost:27017"
os.environ["DATABASE_NAME"] = "mealpass_test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENV"] = "test"
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["SENTRY_DSN"] = ""

from datetime import datetime
from typing import Dict, List, Optional

import pytest
from mongomock_motor import AsyncMongoMockClient

from database import Database
from mealpass.models.enums import DayOfWeek, DietaryTag, MealType, UserRole
from mealpass.models.mongodb import MenuItemDocument, UserDocument
from mealpass.services.auth import create_access_token, hash_password
from mealpass.services.checkout import CheckoutService
from mealpass.services.payment import PaymentGateway, PaymentResult


class FakeGateway(PaymentGateway):
    """Records captures; approves unless told otherwise."""

    def __init__(self, approve: bool = True, error: Optional[Exception] = None):
        self.approve = approve
        self.error = error
        self.captures: List[Dict] = []

    async def capture(self, amount, currency, metadata=None):
        self.captures.append({"amount": amount, "currency": currency, "metadata": metadata})
        if self.error:
            raise self.error
        if not self.approve:
            return PaymentResult(success=False, message="Card declined")
        return PaymentResult(success=True, transaction_id=f"txn_test_{len(self.captures)}", message="ok")


class FakeNotifier:
    """Stands in for EmailService. Records sends, optionally fails."""

    def __init__(self, result: bool = True, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.sent: List[Dict] = []

    async def send(self, recipient, subject, body):
        if self.error:
            raise self.error
        self.sent.append({"recipient": recipient, "subject": subject, "body": body})
        return self.result


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    await Database.init_models(client["mealpass_test"])
    yield client
    Database._initialized = False


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def service(gateway, notifier):
    return CheckoutService(payment_gateway=gateway, notifier=notifier)


@pytest.fixture
def make_user(db):
    async def _make(
        role: UserRole = UserRole.STUDENT,
        email: Optional[str] = None,
        name: str = "Asha Rao",
        password: str = "password123",
        last_purchase_at: Optional[datetime] = None,
        last_order_id: Optional[str] = None,
    ) -> UserDocument:
        user = UserDocument(
            email=email or f"{role.value.lower()}-{os.urandom(3).hex()}@campus.edu",
            password_hash=hash_password(password),
            name=name,
            role=role,
            last_purchase_at=last_purchase_at,
            last_order_id=last_order_id,
        )
        await user.insert()
        return user

    return _make


@pytest.fixture
def make_item(db):
    async def _make(
        meal_type: MealType = MealType.BREAKFAST,
        name: Optional[str] = None,
        day: DayOfWeek = DayOfWeek.MONDAY,
        price: float = 99.0,
        tags: Optional[List[DietaryTag]] = None,
    ) -> MenuItemDocument:
        item = MenuItemDocument(
            day=day,
            meal_type=meal_type,
            name=name or f"{meal_type.value} special",
            description="Test meal",
            dietary_tags=tags or [DietaryTag.VEGETARIAN],
            calories=400,
            price=price,
        )
        await item.insert()
        return item

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: UserDocument) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token({'sub': str(user.uid)})}"}

    return _headers
