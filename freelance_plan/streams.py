"""Revenue streams and rate-card aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class RevenueStream(str, Enum):
    HOURLY = "hourly"
    PACKAGES = "packages"
    SUBSCRIPTIONS = "subscriptions"


STREAM_LABELS = {
    RevenueStream.HOURLY: "Hourly",
    RevenueStream.PACKAGES: "Packages",
    RevenueStream.SUBSCRIPTIONS: "Subscriptions",
}


@dataclass(frozen=True)
class StreamValues:
    """One scalar per revenue stream (client counts, acquisition rates, shares)."""

    hourly: float = 0.0
    packages: float = 0.0
    subscriptions: float = 0.0

    def get(self, stream: RevenueStream) -> float:
        if stream == RevenueStream.HOURLY:
            return self.hourly
        if stream == RevenueStream.PACKAGES:
            return self.packages
        return self.subscriptions

    def scale(self, factor: float) -> StreamValues:
        return StreamValues(self.hourly * factor, self.packages * factor, self.subscriptions * factor)

    def add(self, other: StreamValues) -> StreamValues:
        return StreamValues(
            self.hourly + other.hourly,
            self.packages + other.packages,
            self.subscriptions + other.subscriptions,
        )

    def total(self) -> float:
        return self.hourly + self.packages + self.subscriptions

    def as_dict(self) -> dict[str, float]:
        return {
            RevenueStream.HOURLY.value: self.hourly,
            RevenueStream.PACKAGES.value: self.packages,
            RevenueStream.SUBSCRIPTIONS.value: self.subscriptions,
        }

    @classmethod
    def from_dict(cls, values: dict) -> StreamValues:
        return cls(
            float(values.get(RevenueStream.HOURLY.value, 0.0)),
            float(values.get(RevenueStream.PACKAGES.value, 0.0)),
            float(values.get(RevenueStream.SUBSCRIPTIONS.value, 0.0)),
        )


@dataclass(frozen=True)
class HourlyRate:
    rate_per_hour: float
    name: str = ""

    stream = RevenueStream.HOURLY

    @property
    def unit_price(self) -> float:
        return float(self.rate_per_hour)


@dataclass(frozen=True)
class ServicePackage:
    price: float
    name: str = ""

    stream = RevenueStream.PACKAGES

    @property
    def unit_price(self) -> float:
        return float(self.price)


@dataclass(frozen=True)
class Subscription:
    monthly_price: float
    name: str = ""

    stream = RevenueStream.SUBSCRIPTIONS

    @property
    def unit_price(self) -> float:
        return float(self.monthly_price)


@dataclass(frozen=True)
class StreamRates:
    """Average price per stream, pre-aggregated from the rate card."""

    avg_hourly_rate: float = 0.0
    avg_package_price: float = 0.0
    avg_subscription_price: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {
            "avg_hourly_rate": self.avg_hourly_rate,
            "avg_package_price": self.avg_package_price,
            "avg_subscription_price": self.avg_subscription_price,
        }


def _mean_price(entries: Iterable) -> float:
    prices = [entry.unit_price for entry in entries]
    return sum(prices) / len(prices) if prices else 0.0


def aggregate_rates(
    hourly_rates: Iterable[HourlyRate] = (),
    packages: Iterable[ServicePackage] = (),
    subscriptions: Iterable[Subscription] = (),
) -> StreamRates:
    """Arithmetic mean per stream; a stream without entries averages to 0."""
    return StreamRates(
        avg_hourly_rate=_mean_price(hourly_rates),
        avg_package_price=_mean_price(packages),
        avg_subscription_price=_mean_price(subscriptions),
    )


def rate_card_from_prices(
    hourly_rates: Iterable[float] = (),
    packages: Iterable[float] = (),
    subscriptions: Iterable[float] = (),
) -> tuple[list[HourlyRate], list[ServicePackage], list[Subscription]]:
    return (
        [HourlyRate(float(v)) for v in hourly_rates],
        [ServicePackage(float(v)) for v in packages],
        [Subscription(float(v)) for v in subscriptions],
    )
