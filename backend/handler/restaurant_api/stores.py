"""DynamoDB-backed table directory and reservation ledger.

Both adapters take a boto3 ``Table`` resource so callers (and tests) decide
which table they talk to. botocore failures are translated to ``InternalError``
here, so nothing above this module sees a boto exception.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from .errors import InternalError
from .validation import TableId

logger = logging.getLogger(__name__)

# Attributes kept on stored reservations for indexing only
INTERNAL_ATTRIBUTES = ("slotKey",)


@contextmanager
def backend_call(operation: str) -> Iterator[None]:
    try:
        yield
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "Unknown")
        logger.error("DynamoDB %s failed: %s", operation, code)
        raise InternalError(f"Could not {operation}") from e
    except BotoCoreError as e:
        logger.error("DynamoDB %s failed: %r", operation, e)
        raise InternalError(f"Could not {operation}") from e


def to_dynamo(value: Any) -> Any:
    # boto3 rejects float; everything numeric goes in as Decimal
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


def slot_key(table_id: TableId, date: str) -> str:
    return f"{table_id}#{date}"


def public_item(item: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in item.items() if k not in INTERNAL_ATTRIBUTES}


def scan_all(table, **kwargs) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    while True:
        page = table.scan(**kwargs)
        items.extend(page.get("Items") or [])
        last_key = page.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


def query_all(table, **kwargs) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    while True:
        page = table.query(**kwargs)
        items.extend(page.get("Items") or [])
        last_key = page.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


class DynamoTableDirectory:
    def __init__(self, table):
        self.table = table

    def get(self, table_id: TableId) -> Optional[Dict[str, Any]]:
        with backend_call("get table"):
            return self.table.get_item(Key={"id": table_id}).get("Item")

    def list(self) -> List[Dict[str, Any]]:
        with backend_call("list tables"):
            return scan_all(self.table)

    def put(self, item: Dict[str, Any]) -> None:
        with backend_call("create table"):
            self.table.put_item(Item=to_dynamo(item))


class DynamoReservationLedger:
    def __init__(self, table, slot_index: str = "slot-index"):
        self.table = table
        self.slot_index = slot_index

    def list(self) -> List[Dict[str, Any]]:
        with backend_call("list reservations"):
            return [public_item(i) for i in scan_all(self.table)]

    def find_for_slot(self, table_id: TableId, date: str, starting_before: Optional[str] = None) -> List[Dict[str, Any]]:
        """Reservations for one table on one date, optionally only those starting before a time."""
        condition = Key("slotKey").eq(slot_key(table_id, date))
        if starting_before:
            condition = condition & Key("slotTimeStart").lt(starting_before)
        with backend_call("check reservations"):
            return query_all(self.table, IndexName=self.slot_index, KeyConditionExpression=condition)

    def insert(self, item: Dict[str, Any]) -> None:
        record = dict(item, slotKey=slot_key(item["tableNumber"], item["date"]))
        with backend_call("create reservation"):
            self.table.put_item(
                Item=to_dynamo(record),
                ConditionExpression=Attr("reservationId").not_exists(),
            )
