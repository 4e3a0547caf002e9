"""Mini README: Tests for the FastAPI ledger routes.

Each test builds an application around its own in-memory ledger so runs
stay isolated, then checks status codes and payloads for the public and
owner-gated routes.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from expenseledger.configuration import ExpenseLedgerSettings
from expenseledger.interface import build_ledger, create_application
from expenseledger.ledger import MAX_AMOUNT, ExpenseLedger, InvalidArgument

OWNER_HEADERS = {"X-Caller-Identity": "alice"}
STRANGER_HEADERS = {"X-Caller-Identity": "mallory"}


@pytest.fixture()
def client() -> TestClient:
    settings = ExpenseLedgerSettings(owner="alice", state_file=None)
    ledger = ExpenseLedger.create("alice", clock=lambda: 1_700_000_000)
    return TestClient(create_application(ledger=ledger, settings=settings))


def test_add_remove_and_total(client: TestClient) -> None:
    """The lunch/rent walkthrough behaves the same over HTTP."""

    response = client.post("/expenses", data={"title": "lunch", "amount": 500}, headers=OWNER_HEADERS)
    assert response.status_code == 201
    assert response.json() == {"id": 1}
    client.post("/expenses", data={"title": "rent", "amount": 10000}, headers=OWNER_HEADERS)

    assert client.delete("/expenses/1", headers=OWNER_HEADERS).status_code == 200

    assert client.get("/expense-ids").json() == {"expense_ids": [1, 2]}
    assert client.get("/expenses/1").status_code == 404
    assert client.get("/total").json() == {"total": 10000, "total_text": "10000"}
    assert client.get("/expenses/2").json() == {
        "id": 2,
        "title": "rent",
        "amount": 10000,
        "timestamp": 1_700_000_000,
    }


def test_gated_routes_reject_strangers(client: TestClient) -> None:
    add = client.post("/expenses", data={"title": "x", "amount": 1}, headers=STRANGER_HEADERS)
    anonymous = client.post("/expenses", data={"title": "x", "amount": 1})
    transfer = client.post("/ownership", data={"new_owner": "mallory"}, headers=STRANGER_HEADERS)
    remove = client.delete("/expenses/1", headers=STRANGER_HEADERS)

    assert [add.status_code, anonymous.status_code, transfer.status_code, remove.status_code] == [
        403,
        403,
        403,
        403,
    ]
    assert client.get("/expense-ids").json() == {"expense_ids": []}


def test_invalid_arguments_map_to_bad_request(client: TestClient) -> None:
    negative = client.post("/expenses", data={"title": "x", "amount": -3}, headers=OWNER_HEADERS)
    null_owner = client.post("/ownership", data={"new_owner": "0x0000"}, headers=OWNER_HEADERS)

    assert negative.status_code == 400
    assert null_owner.status_code == 400


def test_remove_unknown_expense_is_not_found(client: TestClient) -> None:
    assert client.delete("/expenses/42", headers=OWNER_HEADERS).status_code == 404


def test_transfer_then_new_owner_can_add(client: TestClient) -> None:
    response = client.post("/ownership", data={"new_owner": "bob"}, headers=OWNER_HEADERS)
    assert response.json() == {"owner": "bob"}

    old = client.post("/expenses", data={"title": "x", "amount": 1}, headers=OWNER_HEADERS)
    new = client.post(
        "/expenses", data={"title": "x", "amount": 1}, headers={"X-Caller-Identity": "bob"}
    )

    assert old.status_code == 403
    assert new.status_code == 201
    assert client.get("/").json()["owner"] == "bob"


def test_notifications_route_lists_add_and_remove_only(client: TestClient) -> None:
    client.post("/expenses", data={"title": "lunch", "amount": 500}, headers=OWNER_HEADERS)
    client.delete("/expenses/1", headers=OWNER_HEADERS)
    client.post("/ownership", data={"new_owner": "bob"}, headers=OWNER_HEADERS)

    notifications = client.get("/notifications").json()["notifications"]

    assert notifications == [
        {
            "event": "ExpenseAdded",
            "id": 1,
            "title": "lunch",
            "amount": 500,
            "timestamp": 1_700_000_000,
        },
        {"event": "ExpenseRemoved", "id": 1},
    ]


def test_snapshot_lists_live_expenses(client: TestClient) -> None:
    client.post("/expenses", data={"title": "lunch", "amount": 500}, headers=OWNER_HEADERS)
    client.post("/expenses", data={"title": "rent", "amount": 10000}, headers=OWNER_HEADERS)
    client.delete("/expenses/1", headers=OWNER_HEADERS)

    snapshot = client.get("/").json()

    assert snapshot["expense_ids"] == [1, 2]
    assert [expense["id"] for expense in snapshot["expenses"]] == [2]
    assert snapshot["total"] == 10000
    assert snapshot["next_id"] == 3


def test_overflowing_total_maps_to_server_error() -> None:
    ledger = ExpenseLedger.create("alice")
    ledger.add_expense("alice", "huge", MAX_AMOUNT)
    ledger.add_expense("alice", "one more", 1)
    client = TestClient(create_application(ledger=ledger, settings=ExpenseLedgerSettings(owner="alice", state_file=None)))

    assert client.get("/total").status_code == 500
    assert client.get("/").status_code == 500


def test_failing_subscriber_still_returns_created(client: TestClient) -> None:
    ledger = client.app.state.ledger

    def broken(notification: object) -> None:
        raise RuntimeError("dashboard offline")

    ledger.notifications.subscribe(broken)

    response = client.post("/expenses", data={"title": "lunch", "amount": 500}, headers=OWNER_HEADERS)

    assert response.status_code == 201
    assert client.get("/expense-ids").json() == {"expense_ids": [1]}
    assert len(client.get("/notifications").json()["notifications"]) == 1


def test_shutdown_detaches_notification_log() -> None:
    ledger = ExpenseLedger.create("alice")
    settings = ExpenseLedgerSettings(owner="alice", state_file=None)

    for _ in range(3):
        with TestClient(create_application(ledger=ledger, settings=settings)):
            assert len(ledger.notifications.subscribers) == 1

    assert ledger.notifications.subscribers == []


def test_notification_log_size_is_bounded() -> None:
    ledger = ExpenseLedger.create("alice")
    settings = ExpenseLedgerSettings(owner="alice", state_file=None, notification_log_size=2)
    client = TestClient(create_application(ledger=ledger, settings=settings))

    for index in range(3):
        client.post("/expenses", data={"title": f"e{index}", "amount": 1}, headers=OWNER_HEADERS)

    ids = [entry["id"] for entry in client.get("/notifications").json()["notifications"]]
    assert ids == [2, 3]


@pytest.mark.parametrize("owner", ["", "0x0", "0x" + "0" * 40])
def test_settings_reject_null_owner(owner: str) -> None:
    with pytest.raises(ValueError):
        ExpenseLedgerSettings(owner=owner)


def test_build_ledger_rejects_null_owner() -> None:
    settings = ExpenseLedgerSettings.model_construct(owner="0x0", state_file=None)

    with pytest.raises(InvalidArgument):
        build_ledger(settings)
