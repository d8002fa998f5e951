from __future__ import annotations

from typing import Any, Callable

from .client import table_resource
from .errors import DdbInternal
from .retry import ddb_call


def _expression_kwargs(
    *,
    condition_expression: str | None = None,
    expression_attribute_names: dict[str, str] | None = None,
    expression_attribute_values: dict[str, Any] | None = None,
) -> dict[str, Any]:
    # boto3 rejects empty ExpressionAttribute* maps, so only set what is present.
    out: dict[str, Any] = {}
    if condition_expression:
        out["ConditionExpression"] = condition_expression
    if expression_attribute_names:
        out["ExpressionAttributeNames"] = expression_attribute_names
    if expression_attribute_values:
        out["ExpressionAttributeValues"] = expression_attribute_values
    return out


def _page_limit(page_size: int, default: int) -> int:
    return max(1, min(1000, int(page_size or default)))


class DynamoTable:
    """Thin wrapper over a boto3 Table: every call goes through `ddb_call`."""

    def __init__(self, *, table_name: str):
        self.table_name = str(table_name)
        self._table = table_resource(self.table_name)

    def _call(self, operation: str, fn: Callable[[], Any], key: dict[str, Any] | None = None) -> Any:
        return ddb_call(operation, fn, table_name=self.table_name, key=key)

    def get_item(self, *, key: dict[str, Any], consistent_read: bool = True) -> dict[str, Any] | None:
        resp = self._call("GetItem", lambda: self._table.get_item(Key=key, ConsistentRead=bool(consistent_read)), key)
        return resp.get("Item")

    def put_item(
        self,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
        expression_attribute_names: dict[str, str] | None = None,
        expression_attribute_values: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        kwargs = {
            "Item": item,
            **_expression_kwargs(
                condition_expression=condition_expression,
                expression_attribute_names=expression_attribute_names,
                expression_attribute_values=expression_attribute_values,
            ),
        }
        key = {k: item[k] for k in ("pk", "sk") if k in item}
        return self._call("PutItem", lambda: self._table.put_item(**kwargs), key)

    def delete_item(
        self,
        *,
        key: dict[str, Any],
        condition_expression: str | None = None,
        expression_attribute_names: dict[str, str] | None = None,
        expression_attribute_values: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        kwargs = {
            "Key": key,
            **_expression_kwargs(
                condition_expression=condition_expression,
                expression_attribute_names=expression_attribute_names,
                expression_attribute_values=expression_attribute_values,
            ),
        }
        return self._call("DeleteItem", lambda: self._table.delete_item(**kwargs), key)

    def update_item(
        self,
        *,
        key: dict[str, Any],
        update_expression: str,
        expression_attribute_names: dict[str, str] | None,
        expression_attribute_values: dict[str, Any],
        condition_expression: str | None = None,
        return_values: str = "ALL_NEW",
    ) -> dict[str, Any] | None:
        kwargs = {
            "Key": key,
            "UpdateExpression": update_expression,
            "ReturnValues": return_values,
            **_expression_kwargs(
                condition_expression=condition_expression,
                expression_attribute_names=expression_attribute_names,
                expression_attribute_values=expression_attribute_values,
            ),
        }
        resp = self._call("UpdateItem", lambda: self._table.update_item(**kwargs), key)
        return resp.get("Attributes")

    def _drain(self, operation: str, fetch: Callable[..., dict[str, Any]], base: dict[str, Any]) -> list[dict[str, Any]]:
        """Follow LastEvaluatedKey until the result set is exhausted."""
        items: list[dict[str, Any]] = []
        start_key: dict[str, Any] | None = None
        while True:
            kwargs = dict(base)
            if start_key:
                kwargs["ExclusiveStartKey"] = start_key
            resp = self._call(operation, lambda: fetch(**kwargs))
            items.extend(resp.get("Items") or [])
            start_key = resp.get("LastEvaluatedKey")
            if not start_key:
                return items

    def query_all(
        self,
        *,
        key_condition_expression: Any,
        index_name: str | None = None,
        scan_index_forward: bool = True,
        filter_expression: Any | None = None,
        page_size: int = 200,
    ) -> list[dict[str, Any]]:
        base: dict[str, Any] = {
            "KeyConditionExpression": key_condition_expression,
            "ScanIndexForward": bool(scan_index_forward),
            "Limit": _page_limit(page_size, 200),
        }
        if index_name:
            base["IndexName"] = index_name
        if filter_expression is not None:
            base["FilterExpression"] = filter_expression
        return self._drain("Query", self._table.query, base)

    def scan_all(self, *, filter_expression: Any | None = None, page_size: int = 500) -> list[dict[str, Any]]:
        base: dict[str, Any] = {"Limit": _page_limit(page_size, 500)}
        if filter_expression is not None:
            base["FilterExpression"] = filter_expression
        return self._drain("Scan", self._table.scan, base)


def get_main_table() -> DynamoTable:
    from ...settings import settings

    if not settings.ddb_table_name:
        raise DdbInternal(message="DDB_TABLE_NAME is not set", operation="Config")
    return DynamoTable(table_name=settings.ddb_table_name)
