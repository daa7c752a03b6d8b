import numpy as np
import pandas as pd
import pytest

from usagerecon import civil, ingest, utils
from usagerecon.testing import pacific_2024

TZ = "America/Los_Angeles"
HEADER = "TYPE,DATE,START TIME,END TIME,IMPORT (kWh),EXPORT (kWh),NOTES"

PREAMBLE = [
    "Name,Pat Example",
    'Address,"100 Main St, Seattle WA"',
    "Account Number,0012345678",
    "Service,Electric",
    "",
]


def portal_csv(rows, *, bom=True):
    """Export text in the portal layout: preamble, header, 15-minute rows."""
    lines = list(PREAMBLE) + [HEADER]
    for date, start, kwh in rows:
        lines.append(f"Electric usage,{date},{start},,{kwh},0.00,")
    lines.append(",,,,,,")
    text = "\n".join(lines) + "\n"
    return ("\ufeff" + text) if bom else text


def table(rows):
    """Tokenized rows as the CSV reader would return them."""
    return pd.DataFrame(
        {
            "TYPE": "Electric usage",
            "DATE": [r[0] for r in rows],
            "START TIME": [r[1] for r in rows],
            "END TIME": "",
            "IMPORT (kWh)": [str(r[2]) for r in rows],
            "EXPORT (kWh)": "0.00",
            "NOTES": "",
        }
    )


@pytest.fixture
def la_calendar():
    return civil.get_calendar(TZ)


@pytest.fixture
def table_calendar():
    return pacific_2024()


@pytest.fixture(params=["la_calendar", "table_calendar"])
def any_calendar(request):
    """Run against the zoneinfo calendar and the fixed offset table."""
    return request.getfixturevalue(request.param)


@pytest.fixture
def make_records(la_calendar):
    def _make(rows, source="export.csv", calendar=None):
        return ingest.parse_rows(table(rows), source, calendar=calendar or la_calendar)

    return _make


@pytest.fixture
def three_days(la_calendar):
    """2024-01-01..03 local, every 15 minutes, 0.25 kWh each."""
    idx = pd.date_range("2024-01-01 08:00", periods=96 * 3, freq="15min", tz="UTC")
    return utils.build_usage_frame(
        idx,
        civil_date=la_calendar.civil_dates(idx),
        start_time=la_calendar.civil_times(idx),
        import_kwh=np.full(len(idx), 0.25),
        source="fixture.csv",
        synthetic=False,
    )


@pytest.fixture
def write_export(tmp_path):
    def _write(name, rows, **kwargs):
        path = tmp_path / name
        path.write_text(portal_csv(rows, **kwargs), encoding="utf-8")
        return path

    return _write
