"""Shared fixtures: in-memory stand-ins for the DynamoDB stores and Cognito."""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from restaurant_api.admission import ReservationAdmission
from restaurant_api.identity import CognitoIdentity
from restaurant_api.routes import ReservationApi


class FakeTableDirectory:
    def __init__(self):
        self.items: Dict[Any, Dict[str, Any]] = {}

    def get(self, table_id):
        return self.items.get(table_id)

    def list(self) -> List[Dict[str, Any]]:
        return list(self.items.values())

    def put(self, item):
        self.items[item["id"]] = dict(item)


class FakeReservationLedger:
    def __init__(self):
        self.items: Dict[str, Dict[str, Any]] = {}

    def list(self) -> List[Dict[str, Any]]:
        return list(self.items.values())

    def find_for_slot(self, table_id, date, starting_before: Optional[str] = None):
        return [
            r for r in self.items.values()
            if r["tableNumber"] == table_id and r["date"] == date
            and (starting_before is None or r["slotTimeStart"] < starting_before)
        ]

    def insert(self, item):
        assert item["reservationId"] not in self.items
        self.items[item["reservationId"]] = dict(item)


@pytest.fixture
def tables():
    directory = FakeTableDirectory()
    directory.put({"id": 5, "number": 5, "places": 4, "isVip": False, "minOrder": None})
    return directory


@pytest.fixture
def reservations():
    return FakeReservationLedger()


@pytest.fixture
def admission(tables, reservations):
    return ReservationAdmission(tables, reservations)


@pytest.fixture
def cognito_client():
    return MagicMock()


@pytest.fixture
def identity(cognito_client):
    return CognitoIdentity(cognito_client, "eu-central-1_pool", "client-123")


@pytest.fixture
def api(tables, reservations, identity, admission):
    return ReservationApi(tables, reservations, identity, admission)


@pytest.fixture
def reservation_body():
    return {
        "tableNumber": 5,
        "clientName": "Ada Lovelace",
        "phoneNumber": "+44 20 7946 0000",
        "date": "2024-06-01",
        "slotTimeStart": "18:00",
        "slotTimeEnd": "19:00",
    }


def make_event(method: str, resource: str, body: Any = None, path: Optional[str] = None,
               token: Optional[str] = "Bearer test-token", path_params: Optional[dict] = None) -> Dict[str, Any]:
    event: Dict[str, Any] = {
        "httpMethod": method,
        "resource": resource,
        "path": path or resource,
        "headers": {"Authorization": token} if token else {},
        "pathParameters": path_params,
        "body": json.dumps(body) if body is not None else None,
    }
    return event


def body_of(response: Dict[str, Any]) -> Any:
    return json.loads(response["body"])
