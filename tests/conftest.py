import json
from io import BytesIO
from pathlib import Path

import pytest
import structlog
from openpyxl import Workbook

from tourpricing.services.rate_catalog import InMemoryRateCatalog

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True, scope="session")
def route_logs_through_stdlib():
    """Keep structlog output off stdout so CLI tests can read their JSON."""
    structlog.configure(logger_factory=structlog.stdlib.LoggerFactory())
    yield
    structlog.reset_defaults()


TEMPLATE_HEADERS = [
    "Hotel ID",
    "Room Type Name",
    "Occupancy Type Name",
    "Meal Plan Code",
    "Start Date",
    "End Date",
    "Price Per Night",
    "Currency",
    "Is Active",
    "Notes",
]


def build_workbook_bytes(rows, headers=None, sheet_name="UploadTemplate", epoch=None, leading_sheets=()):
    """Build an .xlsx in memory: one header row followed by rows."""
    workbook = Workbook()
    if epoch is not None:
        workbook.epoch = epoch
    sheet = workbook.active
    for name in reversed(leading_sheets):
        workbook.create_sheet(name, 0).append(["See the template sheet"])
    sheet.title = sheet_name
    if headers is not None or rows:
        sheet.append(list(headers if headers is not None else TEMPLATE_HEADERS))
    for row in rows:
        sheet.append(list(row))
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def catalog_payload():
    """Load the reference data and stored rates fixture."""
    with open(FIXTURES_DIR / "catalog.json") as f:
        return json.load(f)


@pytest.fixture
def catalog(catalog_payload):
    return InMemoryRateCatalog.from_dict(catalog_payload)


@pytest.fixture
def workbook_builder():
    """Factory fixture: workbook_builder(rows, headers=None, ...) -> bytes."""
    return build_workbook_bytes


@pytest.fixture
def template_headers():
    return list(TEMPLATE_HEADERS)


@pytest.fixture
def valid_row():
    return [
        "hotel-snowview",
        "Deluxe",
        "Double",
        "CP",
        "2025-07-01",
        "2025-09-30",
        4200,
        "INR",
        "Yes",
        "Summer season",
    ]
