"""Table helpers that store dataclass instances in a DynamoDB table."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, ClassVar

from .conversion import Item, from_item, key_value, to_item
from .errors import (
    BatchGetError,
    GetByPartitionError,
    GetError,
    OperationError,
    ParseError,
    ScanError,
)
from .fieldtypes import PARTITION, RANGE, annotated_field, scalar_type
from .options import Method, parse_exclusions

_METHOD_ATTRIBUTES: dict[Method, tuple[str, ...]] = {
    Method.GET: ("get", "get_by_partition_key"),
    Method.BATCH_GET: ("batch_get",),
    Method.CREATE_TABLE: ("create_table", "create_table_with_provisioned_throughput"),
    Method.DELETE_TABLE: ("delete_table",),
    Method.PUT: ("put",),
    Method.BATCH_PUT: ("batch_put",),
    Method.DELETE: ("delete",),
    Method.SCAN: ("scan",),
}


class _Unavailable:
    """Hides an operation that was excluded from a helper class."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Any, owner: type | None = None) -> Any:
        owner_name = owner.__name__ if owner is not None else type(obj).__name__
        raise AttributeError(f"{owner_name} has no operation {self.name!r}")


class TableHelper:
    """Operations on one table for one dataclass; create subclasses with :func:`dynamodb`.

    ``client`` is a low-level DynamoDB client taking the service's request
    parameters as keyword arguments and returning response dictionaries.
    """

    model: ClassVar[type | None] = None
    partition_field: ClassVar[tuple[str, Any]]
    range_field: ClassVar[tuple[str, Any] | None] = None

    def __init__(self, client: Any, table: str) -> None:
        if self.model is None:
            raise TypeError("Create a helper class for a dataclass with dynamodb()")
        self.client = client
        self.table = table

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table={self.table!r})"

    # keys and parsing

    def _key(self, partition: Any, range: Any = None) -> Item:
        name, tp = self.partition_field
        key = {name: key_value(tp, partition)}
        if self.range_field is None:
            if range is not None:
                raise TypeError(f"{type(self).__name__} has no range key")
        else:
            if range is None:
                raise TypeError("A range key value is required")
            range_name, range_tp = self.range_field
            key[range_name] = key_value(range_tp, range)
        return key

    def _parse_all(self, items: Iterable[Item], error: type[OperationError]) -> list[Any]:
        try:
            return [from_item(self.model, item) for item in items]
        except ParseError as exc:
            raise error.from_parse(exc) from exc

    def _call(self, error: type[OperationError], operation: str, **kwargs: Any) -> dict[str, Any]:
        try:
            return getattr(self.client, operation)(**kwargs)
        except Exception as exc:
            raise error.from_aws(exc) from exc

    def _definitions(self) -> tuple[list[dict[str, str]], list[dict[str, str]]]:
        fields = [(self.partition_field, "HASH")]
        if self.range_field is not None:
            fields.append((self.range_field, "RANGE"))
        definitions = [
            {"AttributeName": name, "AttributeType": scalar_type(tp).value}
            for (name, tp), _ in fields
        ]
        schema = [{"AttributeName": name, "KeyType": key_type} for (name, _), key_type in fields]
        return definitions, schema

    # tables

    def create_table(self) -> dict[str, Any]:
        """Create the table with on-demand billing."""
        definitions, schema = self._definitions()
        return self.client.create_table(
            TableName=self.table,
            KeySchema=schema,
            AttributeDefinitions=definitions,
            BillingMode="PAY_PER_REQUEST",
        )

    def create_table_with_provisioned_throughput(
        self, read_capacity: int, write_capacity: int
    ) -> dict[str, Any]:
        """Create the table with provisioned read and write capacity."""
        definitions, schema = self._definitions()
        return self.client.create_table(
            TableName=self.table,
            KeySchema=schema,
            AttributeDefinitions=definitions,
            BillingMode="PROVISIONED",
            ProvisionedThroughput={
                "ReadCapacityUnits": read_capacity,
                "WriteCapacityUnits": write_capacity,
            },
        )

    def delete_table(self) -> dict[str, Any]:
        """Delete the table."""
        return self.client.delete_table(TableName=self.table)

    # writes

    def _check(self, item: Any) -> None:
        if not isinstance(item, self.model):
            raise TypeError(f"Expected a {self.model.__name__}, got {type(item).__name__}")

    def put(self, item: Any) -> dict[str, Any]:
        """Store an item, replacing one with the same key."""
        self._check(item)
        return self.client.put_item(TableName=self.table, Item=to_item(item))

    def batch_put(self, items: Iterable[Any]) -> dict[str, Any]:
        """Store several items in one batch write."""
        requests = []
        for item in items:
            self._check(item)
            requests.append({"PutRequest": {"Item": to_item(item)}})
        return self.client.batch_write_item(RequestItems={self.table: requests})

    def delete(self, partition: Any, range: Any = None) -> dict[str, Any]:
        """Delete the item with the given key."""
        return self.client.delete_item(TableName=self.table, Key=self._key(partition, range))

    # reads

    def get(self, partition: Any, range: Any = None) -> Any | None:
        """The item with the given key, or None when there is none."""
        key = self._key(partition, range)
        response = self._call(GetError, "get_item", TableName=self.table, Key=key)
        item = response.get("Item")
        if item is None:
            return None
        return self._parse_all([item], GetError)[0]

    def get_by_partition_key(self, partition: Any) -> list[Any]:
        """All items sharing a partition key (first result page)."""
        name, tp = self.partition_field
        response = self._call(
            GetByPartitionError,
            "query",
            TableName=self.table,
            KeyConditionExpression="#pk = :pkval",
            ExpressionAttributeNames={"#pk": name},
            ExpressionAttributeValues={":pkval": key_value(tp, partition)},
        )
        return self._parse_all(response.get("Items", []), GetByPartitionError)

    def batch_get(self, keys: Iterable[Any]) -> list[Any]:
        """The items for several keys; pairs of (partition, range) if the table has a range key."""
        if self.range_field is None:
            mapped = [self._key(partition) for partition in keys]
        else:
            mapped = [self._key(partition, range) for partition, range in keys]
        response = self._call(
            BatchGetError, "batch_get_item", RequestItems={self.table: {"Keys": mapped}}
        )
        items = (response.get("Responses") or {}).get(self.table, [])
        return self._parse_all(items, BatchGetError)

    def scan(self) -> list[Any]:
        """Every item in the table, following all result pages."""
        items: list[Item] = []
        request: dict[str, Any] = {"TableName": self.table}
        while True:
            response = self._call(ScanError, "scan", **request)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            request["ExclusiveStartKey"] = last_key
        return self._parse_all(items, ScanError)


def dynamodb(cls: type, *, exclude: Iterable[str | Method] | str | Method = ()) -> type[TableHelper]:
    """Create a helper class named ``<cls>Db`` for dataclass ``cls``.

    ``exclude`` names operations the helper should not offer.
    """
    excluded = parse_exclusions(exclude)
    partition_field = annotated_field(cls, PARTITION)
    if partition_field is None:
        raise TypeError(
            f"{cls.__name__} needs a partition key: declare one field with partition(). "
            "DynamoDB only supports strings, numbers and booleans as keys."
        )
    range_field = annotated_field(cls, RANGE)

    namespace: dict[str, Any] = {
        "model": cls,
        "partition_field": partition_field,
        "range_field": range_field,
        "excluded": excluded,
        "__doc__": f"Table helper for {cls.__name__}.",
        "__module__": cls.__module__,
    }
    for method in excluded:
        for attribute in _METHOD_ATTRIBUTES.get(method, ()):
            namespace[attribute] = _Unavailable()
    if range_field is None:
        namespace["get_by_partition_key"] = _Unavailable()

    return type(f"{cls.__name__}Db", (TableHelper,), namespace)