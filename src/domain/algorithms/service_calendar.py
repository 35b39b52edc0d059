from __future__ import annotations

import logging
from collections.abc import Iterable

from src.domain.models.gtfs import ServiceException, ServiceRule, Trip
from src.domain.models.schedule import ServiceDay, ServiceNow

logger = logging.getLogger(__name__)


def active_services(
    calendar: Iterable[ServiceRule],
    calendar_dates: Iterable[ServiceException],
    service_date: str,
    weekday: str,
    *,
    fallback_service_ids: Iterable[str] = (),
) -> frozenset[str]:
    """Service ids running on `service_date` (YYYYMMDD) / `weekday` (Mon..Sun).

    Weekly rules first, then date exceptions in table order (so a later remove
    wins over an earlier add). If nothing matches, every service in
    `fallback_service_ids` is treated as active: this keeps the planner usable
    with stale or incomplete calendars, but it does not guarantee that those
    services actually run today.
    """

    try:
        date_num = int(service_date)
    except ValueError:
        date_num = -1

    active: set[str] = set()
    for rule in calendar:
        if not rule.service_id:
            continue
        if date_num < rule.start_date or date_num > rule.end_date:
            continue
        if not rule.runs_on(weekday):
            continue
        active.add(rule.service_id)

    for exc in calendar_dates:
        if not exc.service_id or exc.date != service_date:
            continue
        if exc.exception_type == ServiceException.ADDED:
            active.add(exc.service_id)
        elif exc.exception_type == ServiceException.REMOVED:
            active.discard(exc.service_id)

    if not active:
        active.update(s for s in fallback_service_ids if s)
        if active:
            logger.warning(
                "No calendar entry matches %s; assuming %d displayed services run",
                service_date,
                len(active),
            )

    return frozenset(active)


def active_trips(
    trips: Iterable[Trip], active_service_ids: Iterable[str]
) -> frozenset[str]:
    service_ids = set(active_service_ids)
    return frozenset(t.trip_id for t in trips if t.service_id in service_ids)


def resolve_service_day(
    calendar: Iterable[ServiceRule],
    calendar_dates: Iterable[ServiceException],
    trips: Iterable[Trip],
    now: ServiceNow,
    *,
    fallback_service_ids: Iterable[str] = (),
) -> ServiceDay:
    """Active services and trips for one clock snapshot."""

    rules = tuple(calendar)
    exceptions = tuple(calendar_dates)
    services = active_services(rules, exceptions, now.service_date, now.weekday)
    used_fallback = False
    if not services:
        services = active_services(
            rules,
            exceptions,
            now.service_date,
            now.weekday,
            fallback_service_ids=fallback_service_ids,
        )
        used_fallback = bool(services)

    return ServiceDay(
        now=now,
        active_service_ids=services,
        active_trip_ids=active_trips(trips, services),
        used_fallback=used_fallback,
    )
