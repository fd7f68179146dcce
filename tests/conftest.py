"""Pytest configuration and fixtures for Roster tests."""

import asyncio
from typing import Any, Dict, List, Optional

import httpx
import pytest

from roster.columns import ColumnCatalog, TableColumn
from roster.filters import FieldSchema
from roster.query import (
    InMemoryPreferencesStore,
    ListingClient,
    ListingPreferences,
    QuerySynchronizer,
)


FIELD_CONFIG = {
    "identification": {
        "id": {"type": "text", "label": "Employee ID"},
        "surname": {"type": "text", "label": "Surname"},
    },
    "employment": {
        "status": {"type": "select", "label": "Status", "options": ["active", "inactive", "on-leave"]},
        "employee_type": {"type": "select", "label": "Employee Type", "options": ["Teaching", "Non-Teaching"]},
        "date_hired": {"type": "date", "label": "Date Hired"},
    },
    "personal": {
        "is_solo_parent": {"type": "boolean", "label": "Solo Parent"},
        "blood_type": {"type": "rating", "label": "Blood Type"},
    },
}

GROUP_LABELS = {"identification": "Identification", "employment": "Employment Details"}


class FakeListingServer:
    """
    Records listing requests and answers them through httpx.MockTransport.

    ``delays`` maps a 1-based request number to seconds to wait before
    answering, to make earlier requests resolve after later ones.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.delays: Dict[int, float] = {}
        self.status_code = 200
        self.extra: Dict[str, Any] = {}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        number = len(self.requests)
        delay = self.delays.get(number)
        if delay:
            await asyncio.sleep(delay)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"message": "Server Error"})

        page = int(request.url.params.get("page", "1"))
        per_page = int(request.url.params.get("per_page", "10"))
        body = {
            "data": [{"id": number, "surname": f"Employee {number}"}],
            "meta": {
                "current_page": page,
                "from": 1,
                "to": 1,
                "total": 30,
                "last_page": 3,
                "per_page": per_page,
            },
        }
        body.update(self.extra)
        return httpx.Response(200, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def count(self) -> int:
        return len(self.requests)

    def params(self, index: int = -1) -> httpx.QueryParams:
        return self.requests[index].url.params


@pytest.fixture
def schema():
    """Small field catalog covering every field type plus one unrecognized type."""
    return FieldSchema.from_config(FIELD_CONFIG, GROUP_LABELS)


@pytest.fixture
def status_only_schema():
    """The two-field catalog: surname (text) and status (select)."""
    return FieldSchema.from_config({
        "identification": {"surname": {"type": "text", "label": "Surname"}},
        "employment": {
            "status": {"type": "select", "label": "Status", "options": ["active", "inactive", "on-leave"]},
        },
    })


@pytest.fixture
def catalog():
    """Column catalog with a low cap."""
    columns = [
        TableColumn("id", "Employee ID", "identification"),
        TableColumn("surname", "Surname", "identification"),
        TableColumn("first_name", "First Name", "identification"),
        TableColumn("department.faculty_name", "Department", "employment"),
        TableColumn("status", "Status", "employment"),
        TableColumn("mobile_no", "Mobile", "contact"),
        TableColumn("email_address", "Email", "contact"),
        TableColumn("actions", "Actions", "actions", always_visible=True, is_action=True),
    ]
    return ColumnCatalog(
        columns,
        core_columns=["id", "surname"],
        max_visible=5,
        group_labels={"contact": "Contact Information"},
    )


@pytest.fixture
def store():
    return InMemoryPreferencesStore()


@pytest.fixture
def preferences(store):
    return ListingPreferences(store)


@pytest.fixture
def server():
    return FakeListingServer()


@pytest.fixture
def make_sync(server, preferences, schema, catalog):
    """Factory for a synchronizer wired to the fake server, with short timers."""

    def _make(
        debounce_seconds: float = 0.05,
        reapply_delay_seconds: float = 0.01,
        prefs: Optional[ListingPreferences] = None,
        **kwargs: Any,
    ) -> QuerySynchronizer:
        client = ListingClient(base_url="http://roster.test", path="/employees", transport=server.transport)
        return QuerySynchronizer(
            client=client,
            preferences=prefs or preferences,
            schema=schema,
            columns=catalog,
            debounce_seconds=debounce_seconds,
            reapply_delay_seconds=reapply_delay_seconds,
            **kwargs,
        )

    return _make
