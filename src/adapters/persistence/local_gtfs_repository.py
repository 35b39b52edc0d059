from __future__ import annotations

import csv
import io
import logging
import os
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

from src.app.ports.output import IGtfsRepository
from src.domain.algorithms.schedule_time import parse_schedule_time
from src.domain.exceptions import FeedLoadError
from src.domain.models import GeoPoint, Stop
from src.domain.models.gtfs import (
    GtfsTables,
    Route,
    ServiceException,
    ServiceRule,
    ShapePoint,
    StopVisit,
    Trip,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Row = dict[str, str]

_DAY_COLUMNS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def _clean(row: Row, key: str) -> str:
    return (row.get(key) or "").strip()


def _opt(row: Row, key: str) -> str | None:
    return _clean(row, key) or None


def _int_or(raw: str, default: int) -> int:
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_route(row: Row) -> Route | None:
    route_id = _clean(row, "route_id")
    if not route_id:
        return None
    return Route(route_id=route_id, short_name=_opt(row, "route_short_name"))


def _parse_trip(row: Row) -> Trip | None:
    trip_id = _clean(row, "trip_id")
    if not trip_id:
        return None
    direction_raw = _clean(row, "direction_id")
    direction_id = int(direction_raw) if direction_raw in ("0", "1") else None
    return Trip(
        trip_id=trip_id,
        route_id=_clean(row, "route_id"),
        service_id=_clean(row, "service_id"),
        headsign=_opt(row, "trip_headsign"),
        direction_id=direction_id,
        shape_id=_opt(row, "shape_id"),
    )


def _parse_stop_time(row: Row) -> StopVisit | None:
    trip_id = _clean(row, "trip_id")
    stop_id = _clean(row, "stop_id")
    if not trip_id or not stop_id:
        return None
    try:
        seq = int(_clean(row, "stop_sequence"))
    except ValueError:
        return None
    return StopVisit(
        trip_id=trip_id,
        stop_id=stop_id,
        sequence=seq,
        arrival_s=parse_schedule_time(row.get("arrival_time")),
        departure_s=parse_schedule_time(row.get("departure_time")),
    )


def _parse_stop(row: Row) -> Stop | None:
    stop_id = _clean(row, "stop_id")
    if not stop_id:
        return None
    return Stop(
        id=stop_id,
        name=_clean(row, "stop_name"),
        location=GeoPoint.parse(row.get("stop_lat"), row.get("stop_lon")),
    )


def _parse_shape_point(row: Row) -> ShapePoint | None:
    shape_id = _clean(row, "shape_id")
    location = GeoPoint.parse(row.get("shape_pt_lat"), row.get("shape_pt_lon"))
    if not shape_id or location is None:
        return None
    return ShapePoint(
        shape_id=shape_id,
        sequence=_int_or(_clean(row, "shape_pt_sequence"), 0),
        location=location,
    )


def _parse_service_rule(row: Row) -> ServiceRule | None:
    service_id = _clean(row, "service_id")
    if not service_id:
        return None
    days = tuple(_clean(row, col) == "1" for col in _DAY_COLUMNS)
    return ServiceRule(
        service_id=service_id,
        days=days,  # type: ignore[arg-type]
        start_date=_int_or(_clean(row, "start_date"), 0),
        end_date=_int_or(_clean(row, "end_date"), 0),
    )


def _parse_service_exception(row: Row) -> ServiceException | None:
    service_id = _clean(row, "service_id")
    date = _clean(row, "date")
    if not service_id or not date:
        return None
    return ServiceException(
        service_id=service_id,
        date=date,
        exception_type=_int_or(_clean(row, "exception_type"), 0),
    )


@dataclass(slots=True)
class LocalGtfsRepository(IGtfsRepository):
    """Loads a GTFS dataset from a directory of .txt files or a .zip archive.

    Env vars:
      - GTFS_PATH: directory or zip file (default: data/gtfs)

    routes/trips/stop_times/stops are mandatory; shapes, calendar,
    calendar_dates and agency are optional.
    """

    base_path: str | Path | None = None

    def _base(self) -> Path:
        value = self.base_path or os.getenv("GTFS_PATH") or "data/gtfs"
        return Path(value)

    def load_tables(self) -> GtfsTables:
        base = self._base()
        if not base.exists():
            raise FeedLoadError(f"GTFS dataset not found: {base}")

        with self._open_source(base) as open_table:

            def read(
                name: str, parse: Callable[[Row], T | None], *, optional: bool = False
            ) -> tuple[T, ...]:
                rows = open_table(name)
                if rows is None:
                    if optional:
                        return ()
                    raise FeedLoadError(f"Missing mandatory GTFS file: {name}")
                out: list[T] = []
                skipped = 0
                for row in rows:
                    item = parse(row)
                    if item is None:
                        skipped += 1
                        continue
                    out.append(item)
                if skipped:
                    logger.warning("Skipped %d malformed rows in %s", skipped, name)
                return tuple(out)

            routes = read("routes.txt", _parse_route)
            trips = read("trips.txt", _parse_trip)
            stop_times = read("stop_times.txt", _parse_stop_time)
            stops = read("stops.txt", _parse_stop)
            shapes = read("shapes.txt", _parse_shape_point, optional=True)
            calendar = read("calendar.txt", _parse_service_rule, optional=True)
            calendar_dates = read(
                "calendar_dates.txt", _parse_service_exception, optional=True
            )
            agencies = read(
                "agency.txt", lambda r: _opt(r, "agency_timezone"), optional=True
            )

        logger.info(
            "Read GTFS from %s: %d routes, %d trips, %d stop_times, %d stops",
            base,
            len(routes),
            len(trips),
            len(stop_times),
            len(stops),
        )

        return GtfsTables(
            routes=routes,
            trips=trips,
            stop_times=stop_times,
            stops=stops,
            shapes=shapes,
            calendar=calendar,
            calendar_dates=calendar_dates,
            timezone=agencies[0] if agencies else None,
        )

    @contextmanager
    def _open_source(
        self, base: Path
    ) -> Iterator[Callable[[str], Iterator[Row] | None]]:
        if base.is_dir():

            def open_dir(name: str) -> Iterator[Row] | None:
                path = base / name
                if not path.exists():
                    return None
                return _iter_rows(path.read_text(encoding="utf-8-sig"))

            yield open_dir
            return

        try:
            archive = zipfile.ZipFile(base)
        except (zipfile.BadZipFile, OSError) as exc:
            raise FeedLoadError(f"Cannot open GTFS archive {base}: {exc}") from exc

        with archive:
            members = {
                Path(n).name: n for n in archive.namelist() if not n.endswith("/")
            }

            def open_zip(name: str) -> Iterator[Row] | None:
                member = members.get(name)
                if member is None:
                    return None
                return _iter_rows(archive.read(member).decode("utf-8-sig"))

            yield open_zip


def _iter_rows(text: str) -> Iterator[Row]:
    reader = csv.DictReader(io.StringIO(text, newline=""))
    for row in reader:
        # Skip blank lines (DictReader yields them as all-empty rows).
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            continue
        yield row
