"""
Real-time context provider.

Fetches traffic, weather and fuel prices concurrently, each under its own
timeout, and joins them into one immutable RealTimeContext. A failed or
timed-out signal is replaced by the last-known-good value for the region,
or by the named default, and the context is flagged stale.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from route_engine.core.config import EngineConfig, TimeFactorRules
from route_engine.core.exceptions import ContextUnavailableError
from route_engine.schemas.base import Location
from route_engine.schemas.request import RealTimeFactorFlags
from route_engine.services.context.clients import RealTimeDataClient
from route_engine.services.context.defaults import (
    DEFAULT_FUEL_PRICES,
    DEFAULT_TIME_FACTORS,
    DEFAULT_TRAFFIC,
    DEFAULT_WEATHER,
)
from route_engine.services.context.models import RealTimeContext, TimeFactors

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def compute_time_factors(moment: datetime, rules: TimeFactorRules) -> TimeFactors:
    """
    Derive temporal multipliers for an instant.

    Rush-hour windows are inclusive of both boundary hours and only apply
    on working days. Weekends and holidays get the off-peak multiplier.
    Naive instants are taken as UTC, then read in the rules' local zone.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(ZoneInfo(rules.local_timezone))
    hour = moment.hour
    is_weekend = moment.weekday() >= 5
    is_holiday = moment.date() in rules.holidays
    off_peak_day = is_weekend or is_holiday

    in_morning = rules.morning_rush[0] <= hour <= rules.morning_rush[1]
    in_evening = rules.evening_rush[0] <= hour <= rules.evening_rush[1]

    if off_peak_day:
        multiplier = rules.off_peak_day_multiplier
    elif in_morning:
        multiplier = rules.morning_multiplier
    elif in_evening:
        multiplier = rules.evening_multiplier
    else:
        multiplier = rules.normal_multiplier

    return TimeFactors(
        is_rush_hour=(in_morning or in_evening) and not off_peak_day,
        is_weekend=is_weekend,
        is_holiday=is_holiday,
        traffic_multiplier=multiplier,
    )


class ContextProvider:
    """
    Builds RealTimeContext snapshots.

    Last-known-good signals are cached per region for the lifetime of the
    provider instance.
    """

    def __init__(
        self,
        client: RealTimeDataClient,
        config: EngineConfig,
        clock: Optional[Clock] = None,
    ):
        self.client = client
        self.config = config
        self.clock = clock or utc_now
        self._last_known_good: dict[str, dict[str, Any]] = {}

    async def _fetch(self, name: str, fetch: Awaitable[Any]) -> tuple[Any, Optional[str]]:
        """Run one sub-fetch under the context timeout. Returns (value, error)."""
        try:
            value = await asyncio.wait_for(fetch, timeout=self.config.context_timeout_seconds)
            return value, None
        except asyncio.TimeoutError:
            return None, f"timed out after {self.config.context_timeout_seconds:.1f}s"
        except ContextUnavailableError as e:
            return None, str(e)
        except Exception as e:
            logger.warning(f"Unexpected error fetching {name}: {e}", exc_info=True)
            return None, f"{type(e).__name__}: {e}"

    async def get_context(
        self,
        origin: Location,
        destinations: Sequence[Location],
        region: Optional[str] = None,
        flags: Optional[RealTimeFactorFlags] = None,
        at: Optional[datetime] = None,
    ) -> RealTimeContext:
        """
        Collect a context snapshot for a geography and instant.

        Never raises for provider failures; degraded signals are reported
        through is_stale and warnings.
        """
        region = region or self.config.default_region
        flags = flags or RealTimeFactorFlags()
        moment = at or self.clock()

        requested: dict[str, Awaitable[Any]] = {}
        if flags.include_traffic:
            requested["traffic"] = self.client.get_traffic(origin, destinations)
        if flags.include_weather:
            requested["weather"] = self.client.get_weather(origin, destinations)
        if flags.include_fuel_prices:
            requested["fuel_prices"] = self.client.get_fuel_prices(region)

        outcomes = await asyncio.gather(
            *(self._fetch(name, fetch) for name, fetch in requested.items())
        )

        defaults = {
            "traffic": DEFAULT_TRAFFIC,
            "weather": DEFAULT_WEATHER,
            "fuel_prices": DEFAULT_FUEL_PRICES,
        }
        cache = self._last_known_good.setdefault(region, {})
        signals = dict(defaults)
        warnings: list[str] = []

        for name, (value, error) in zip(requested, outcomes):
            if error is None:
                signals[name] = value
                cache[name] = value
                continue

            label = name.replace("_", " ")
            if name in cache:
                signals[name] = cache[name]
                warnings.append(f"Stale context: {label} unavailable ({error}); using last known values")
            else:
                warnings.append(f"Stale context: {label} unavailable ({error}); using default values")
            logger.warning(f"Context signal '{name}' unavailable for region {region}: {error}")

        time_factors = (
            compute_time_factors(moment, self.config.time_factors)
            if flags.include_time_factors
            else DEFAULT_TIME_FACTORS
        )

        context = RealTimeContext(
            traffic=signals["traffic"],
            weather=signals["weather"],
            fuel_prices=signals["fuel_prices"],
            time_factors=time_factors,
            captured_at=moment,
            region=region,
            is_stale=bool(warnings),
            warnings=tuple(warnings),
        )
        logger.info(
            f"Context collected for region {region}: congestion={context.traffic.congestion_level:.2f}, "
            f"road={context.weather.road_condition.value}, stale={context.is_stale}"
        )
        return context
