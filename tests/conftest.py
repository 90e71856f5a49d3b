import os

# Must be set before config/database are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""

from datetime import datetime, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import models  # noqa: E402,F401
from database import Base, SessionLocal, engine  # noqa: E402
from models.payment import PaymentRecord, PaymentType  # noqa: E402
from services.fuel_price import FuelPriceCache, FuelPriceSource, get_fuel_price_source  # noqa: E402
from services.store import EarningsStore  # noqa: E402
from services.trip_sessions import trip_sessions  # noqa: E402

TEST_FUEL_PRICE = "50,00"

# Degrees of latitude per meter along a meridian (Earth radius 6371 km)
DEG_PER_METER = 1 / 111194.92664455873


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def north_of(lat: float, meters: float) -> float:
    return lat + meters * DEG_PER_METER


def make_record(amount, payment_type="cash", user="Ali", created_at=None, location="Kadikoy", record_id=None):
    created_at = created_at or datetime(2026, 10, 14, 12, 0)
    return PaymentRecord(
        id=record_id or f"{user}-{created_at.isoformat()}-{amount}",
        amount=Decimal(str(amount)),
        payment_type=PaymentType(payment_type),
        user=user,
        location=location,
        created_at=created_at,
        hour=created_at.hour,
    )


def price_transport(price: str = TEST_FUEL_PRICE, status_code: int = 200, calls: list = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(
            status_code,
            json={"success": True, "result": [
                {"city": "ANKARA", "gasolinePrice": "49,10"},
                {"city": "ISTANBUL (AVRUPA)", "gasolinePrice": price},
            ]},
        )
    return httpx.MockTransport(handler)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db):
    return EarningsStore(db)


@pytest.fixture
def client(db):
    from app import app

    price_source = FuelPriceSource(FuelPriceCache(), client=httpx.Client(transport=price_transport()))
    app.dependency_overrides[get_fuel_price_source] = lambda: price_source
    trip_sessions.close_all()

    yield TestClient(app)

    app.dependency_overrides.clear()
    trip_sessions.close_all()
