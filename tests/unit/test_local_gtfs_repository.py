from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import pytest

from src.adapters.persistence import LocalGtfsRepository
from src.domain.exceptions import FeedLoadError
from src.domain.models import GeoPoint

FEED = {
    "agency.txt": "agency_id,agency_name,agency_url,agency_timezone\n"
    "1,Buses,http://example.com,Atlantic/Canary\n",
    "routes.txt": "route_id,route_short_name,route_long_name\n"
    "R470,470,Costa\n"
    ",999,No id\n",
    "trips.txt": "route_id,service_id,trip_id,trip_headsign,direction_id,shape_id\n"
    "R470,WK,A1,Yaiza,0,S1\n"
    "R470,WK,A2,,,\n",
    "stop_times.txt": "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
    "A1,10:00:00,10:00:30,X,1\n"
    "A1,25:10:00,,Y,2\n"
    "A1,10:30:00,10:30:00,Z,x\n",
    "stops.txt": "stop_id,stop_name,stop_lat,stop_lon\n"
    "X,Xarco,28.1,-16.2\n"
    "Y,Yaiza,,\n",
    "calendar.txt": "service_id,monday,tuesday,wednesday,thursday,friday,"
    "saturday,sunday,start_date,end_date\n"
    "WK,1,1,1,1,1,0,0,20240101,20241231\n",
    "calendar_dates.txt": "service_id,date,exception_type\n" "WK,20240115,2\n",
    "shapes.txt": "shape_id,shape_pt_lat,shape_pt_lon,shape_pt_sequence\n"
    "S1,28.1,-16.2,1\n"
    "S1,bad,-16.3,2\n",
}


def _write_dir(base: Path, files: dict[str, str]) -> Path:
    base.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        # Some published feeds start with a BOM.
        (base / name).write_text("\ufeff" + content, encoding="utf-8")
    return base


@pytest.mark.unit
def test_loads_directory_and_parses_rows(tmp_path: Path) -> None:
    repo = LocalGtfsRepository(base_path=_write_dir(tmp_path / "gtfs", FEED))
    tables = repo.load_tables()

    assert [r.route_id for r in tables.routes] == ["R470"]
    assert tables.timezone == "Atlantic/Canary"

    a1, a2 = tables.trips
    assert (a1.headsign, a1.direction_id, a1.shape_id) == ("Yaiza", 0, "S1")
    assert (a2.headsign, a2.direction_id, a2.shape_id) == (None, None, None)

    first, last = tables.stop_times
    assert (first.arrival_s, first.departure_s) == (36000, 36030)
    assert (last.arrival_s, last.departure_s) == (90600, None)

    x, y = tables.stops
    assert x.location == GeoPoint(lat=28.1, lon=-16.2)
    assert y.location is None

    assert tables.calendar[0].days == (True, True, True, True, True, False, False)
    assert tables.calendar[0].start_date == 20240101
    assert tables.calendar_dates[0].exception_type == 2
    assert len(tables.shapes) == 1


@pytest.mark.unit
def test_malformed_rows_are_counted_in_a_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    repo = LocalGtfsRepository(base_path=_write_dir(tmp_path / "gtfs", FEED))
    with caplog.at_level(logging.WARNING):
        repo.load_tables()

    messages = [r.getMessage() for r in caplog.records]
    assert "Skipped 1 malformed rows in stop_times.txt" in messages
    assert "Skipped 1 malformed rows in routes.txt" in messages


@pytest.mark.unit
def test_loads_zip_archive_with_nested_folder(tmp_path: Path) -> None:
    archive = tmp_path / "feed.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        for name, content in FEED.items():
            zf.writestr(f"google_transit/{name}", content)

    tables = LocalGtfsRepository(base_path=archive).load_tables()

    assert len(tables.stops) == 2
    assert tables.timezone == "Atlantic/Canary"


@pytest.mark.unit
def test_optional_tables_default_to_empty(tmp_path: Path) -> None:
    mandatory = {
        k: v
        for k, v in FEED.items()
        if k in {"routes.txt", "trips.txt", "stop_times.txt", "stops.txt"}
    }
    repo = LocalGtfsRepository(base_path=_write_dir(tmp_path / "gtfs", mandatory))
    tables = repo.load_tables()

    assert tables.shapes == ()
    assert tables.calendar == ()
    assert tables.calendar_dates == ()
    assert tables.timezone is None


@pytest.mark.unit
def test_missing_mandatory_table_is_fatal(tmp_path: Path) -> None:
    files = {k: v for k, v in FEED.items() if k != "stop_times.txt"}
    repo = LocalGtfsRepository(base_path=_write_dir(tmp_path / "gtfs", files))

    with pytest.raises(FeedLoadError, match="stop_times.txt"):
        repo.load_tables()


@pytest.mark.unit
def test_missing_or_corrupt_dataset_is_fatal(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GTFS_PATH", str(tmp_path / "nope"))
    with pytest.raises(FeedLoadError):
        LocalGtfsRepository().load_tables()

    broken = tmp_path / "broken.zip"
    broken.write_bytes(b"not a zip")
    with pytest.raises(FeedLoadError):
        LocalGtfsRepository(base_path=broken).load_tables()
