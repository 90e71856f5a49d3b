"""
services/fuel_price.py - Current gasoline price per liter

Looks the price up over HTTP (CollectAPI) and keeps the last good value in an
injected FuelPriceCache. When the lookup fails the last cached value, or the
configured fallback, is returned instead.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)


@dataclass
class FuelPriceCache:
    value: Optional[float] = None
    fetched_at: Optional[datetime] = None

    def is_stale(self, now: datetime, ttl: timedelta) -> bool:
        if self.value is None or self.fetched_at is None:
            return True
        return now - self.fetched_at >= ttl

    def store(self, value: float, now: datetime) -> None:
        self.value = value
        self.fetched_at = now

    def clear(self) -> None:
        self.value = None
        self.fetched_at = None


@dataclass(frozen=True)
class FuelPriceQuote:
    price: float
    cached: bool
    updated_at: datetime
    fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "price": self.price,
            "cached": self.cached,
            "fallback": self.fallback,
            "updated_at": self.updated_at.isoformat(),
        }


def parse_price(payload: dict, city: str) -> Optional[float]:
    """Pick the gasoline price for a city out of a CollectAPI response"""
    for item in payload.get("result") or []:
        if city.lower() in str(item.get("city", "")).lower():
            raw = item.get("gasolinePrice")
            if raw is None:
                return None
            return float(str(raw).replace(",", "."))
    return None


class FuelPriceSource:
    def __init__(
        self,
        cache: FuelPriceCache,
        client: Optional[httpx.Client] = None,
        api_url: str = settings.FUEL_PRICE_API_URL,
        api_key: str = settings.COLLECTAPI_KEY,
        city: str = settings.FUEL_PRICE_CITY,
        fallback_price: float = settings.FUEL_PRICE_FALLBACK,
        ttl: timedelta = timedelta(seconds=settings.FUEL_PRICE_CACHE_TTL),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.cache = cache
        self.client = client or httpx.Client(timeout=settings.HTTP_TIMEOUT_SEC)
        self.api_url = api_url
        self.api_key = api_key
        self.city = city
        self.fallback_price = fallback_price
        self.ttl = ttl
        self.clock = clock

    def get_current_price(self, force_refresh: bool = False) -> FuelPriceQuote:
        now = self.clock()
        if force_refresh:
            self.cache.clear()
        elif not self.cache.is_stale(now, self.ttl):
            return FuelPriceQuote(price=self.cache.value, cached=True, updated_at=self.cache.fetched_at)

        try:
            resp = self.client.get(
                self.api_url,
                headers={
                    "content-type": "application/json",
                    "authorization": f"apikey {self.api_key}",
                },
            )
            resp.raise_for_status()
            price = parse_price(resp.json(), self.city)
            if price is not None:
                self.cache.store(price, now)
                logger.info(f"Fuel price updated: {price:.2f} per liter ({self.city})")
                return FuelPriceQuote(price=price, cached=False, updated_at=now)
            logger.warning(f"Fuel price response has no entry for {self.city}")
        except Exception as e:
            logger.warning(f"Fuel price lookup failed, using fallback: {e}")

        if self.cache.value is not None:
            return FuelPriceQuote(
                price=self.cache.value, cached=True, fallback=True, updated_at=self.cache.fetched_at
            )
        return FuelPriceQuote(price=self.fallback_price, cached=True, fallback=True, updated_at=now)


_fuel_price_source: Optional[FuelPriceSource] = None


def get_fuel_price_source() -> FuelPriceSource:
    """FastAPI dependency; one source (and cache) per process"""
    global _fuel_price_source
    if _fuel_price_source is None:
        _fuel_price_source = FuelPriceSource(FuelPriceCache())
    return _fuel_price_source
