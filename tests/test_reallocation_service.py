"""
Tests for `services/reallocation_service.py`.

The reallocation repository is replaced with an in-memory fake.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from domain.reallocation import ReallocationRequest
from services import reallocation_service
from services.reallocation_service import (
    ReallocationNotFound,
    ReallocationRow,
    find_van,
    load_stats,
    mark_done,
    record_issue,
    submit_reallocations,
)
from services.settings import DashboardSettings

NOW = datetime(2025, 2, 15, 1, 30, 5, tzinfo=timezone.utc)
SETTINGS = DashboardSettings(mail_recipients=("ops@example.com",))

VANS = [
    {
        "Chassis": "ABC123",
        "Dealer": "Frankston",
        "Model": "SRV22.1",
        "Customer": "Stock",
        "Regent Production": "Production Commenced Regent",
        "Signed Plans Received": "Yes",
    },
    {"Chassis": "DONE01", "Dealer": "Geelong", "Regent Production": "Finished"},
    {"Chassis": "NOSIGN", "Dealer": "Geelong", "Signed Plans Received": "No"},
]


class FakeRepository:
    def __init__(self):
        self.saved = {}
        self.mail = []
        self.issues = {}

    def list_production_vans(self):
        return VANS

    def save_reallocation(self, request):
        self.saved[request.chassis] = request

    def queue_reallocation_mail(self, recipients, subject, html, text=""):
        self.mail.append((tuple(recipients), subject))

    def mark_reallocation_completed(self, chassis):
        return chassis in self.saved

    def record_reallocation_issue(self, chassis, issue):
        if chassis not in self.saved:
            return False
        self.issues[chassis] = issue
        return True

    def list_reallocations(self):
        return list(self.saved.values())


@pytest.fixture
def repo(monkeypatch):
    fake = FakeRepository()
    for name in (
        "list_production_vans",
        "save_reallocation",
        "queue_reallocation_mail",
        "mark_reallocation_completed",
        "record_reallocation_issue",
        "list_reallocations",
    ):
        monkeypatch.setattr(reallocation_service.reallocation_repository, name, getattr(fake, name))
    return fake


def test_find_van_is_case_insensitive() -> None:
    assert find_van(VANS, " abc123 ")["Dealer"] == "Frankston"
    assert find_van(VANS, "") is None
    assert find_van(VANS, "ZZZ") is None


def test_submit_saves_requests_and_queues_mail(repo) -> None:
    result = submit_reallocations([ReallocationRow("abc123", "Geelong")], SETTINGS, NOW)

    assert [r.chassis for r in result.submitted] == ["abc123"]
    request = repo.saved["abc123"]
    assert request.original_dealer == "Frankston"
    assert request.reallocated_to == "Geelong"
    assert request.status == "Production Commenced Regent"
    assert request.submit_time == "15/02/2025, 12:30:05"
    assert repo.mail == [(("ops@example.com",), "New Reallocation Request: Chassis abc123")]


def test_submit_rejects_invalid_rows_but_keeps_valid_ones(repo) -> None:
    rows = [
        ReallocationRow("ABC123", "Geelong"),
        ReallocationRow("MISSING", "Geelong"),
        ReallocationRow("DONE01", "Frankston"),
        ReallocationRow("NOSIGN", "Frankston"),
        ReallocationRow("ABC123", "  "),
    ]

    result = submit_reallocations(rows, SETTINGS, NOW)

    assert len(result.submitted) == 1
    assert [(r.chassis, r.reason) for r in result.rejected] == [
        ("MISSING", "Chassis number not found"),
        ("DONE01", "The van was dispatched - cannot reallocate"),
        ("NOSIGN", "Cannot submit - van is not signed"),
        ("ABC123", "No dealer selected"),
    ]


def test_submit_with_nothing_valid_raises(repo) -> None:
    with pytest.raises(ValueError):
        submit_reallocations([ReallocationRow("DONE01", "Frankston")], SETTINGS, NOW)

    assert repo.saved == {}


def test_submit_without_recipients_skips_mail(repo) -> None:
    submit_reallocations([ReallocationRow("ABC123", "Geelong")], DashboardSettings(), NOW)

    assert "ABC123" in repo.saved
    assert repo.mail == []


def test_mark_done(repo) -> None:
    repo.saved["ABC123"] = ReallocationRequest("ABC123", "Frankston", "Geelong", "Finished")

    mark_done("ABC123")

    with pytest.raises(ReallocationNotFound):
        mark_done("UNKNOWN")


def test_record_issue(repo) -> None:
    repo.saved["ABC123"] = ReallocationRequest("ABC123", "Frankston", "Geelong", "Finished")

    issue = record_issue("ABC123", "SAP Issue", SETTINGS, NOW)

    assert issue.type == "SAP Issue"
    assert issue.timestamp == "15/02/2025, 12:30:05"
    assert repo.issues["ABC123"] == issue
    assert repo.mail == [(("ops@example.com",), "Chassis ABC123 New Issue")]


def test_record_issue_rejects_unknown_type_and_chassis(repo) -> None:
    with pytest.raises(ValueError):
        record_issue("ABC123", "Paint Issue", SETTINGS, NOW)

    with pytest.raises(ReallocationNotFound):
        record_issue("UNKNOWN", "Invoice Issue", SETTINGS, NOW)


def test_load_stats(repo) -> None:
    repo.saved["A"] = ReallocationRequest("A", "Frankston", "Geelong", "completed")
    repo.saved["B"] = ReallocationRequest("B", "Frankston", "Geelong", "Finished")

    stats = load_stats()

    assert (stats.total_pending, stats.total_done) == (1, 1)
    assert stats.dealer_stats["Geelong"].moved_to == 2
