# dynamohelper

Describe a DynamoDB item as a dataclass, mark its keys, and get a helper
class that creates and deletes the table, writes items, reads them back as
instances of your dataclass and deletes them.

The package has no runtime dependencies. You hand the helper a low-level
DynamoDB client: any object whose methods `create_table`, `delete_table`,
`put_item`, `batch_write_item`, `delete_item`, `get_item`, `query`,
`batch_get_item` and `scan` take the service's request parameters as
keyword arguments (`TableName=...`, `Key=...`, ...) and return response
dictionaries. boto3's `client("dynamodb")` has this shape.

## Describing an item

```python
from dataclasses import dataclass, field
from typing import Optional

from dynamohelper.fieldtypes import partition, range_key


@dataclass
class Order:
    an_id: str = partition()
    a_range: int = range_key()
    name: str = ""
    total_amount: int = 0
    names: list[str] = field(default_factory=list)
    map_values: dict[str, str] = field(default_factory=dict)
    note: Optional[str] = None
```

`partition()` and `range_key()` accept the same keyword arguments as
`dataclasses.field()` (`default`, `default_factory`, `metadata`, ...).

Field types are classified by `dynamohelper.fieldtypes.field_kind`:

* `int`, `float` and `Decimal` are stored as numbers, `bool` as a boolean,
  and every other type as a string (read back by calling the type on the
  stored text);
* `list[...]` of a string or number type;
* `dict[str, str]`;
* any of the above as `Optional[...]` or `... | None`.

Other unions, lists of booleans, nested containers and maps with non-string
keys or values raise `TypeError`. Annotations written as text (for instance
under `from __future__ import annotations`) are understood as well.

The partition key is required; the range key is optional. Key attributes are
declared as `S`, `N` or `B` according to their type.

## Building a helper

```python
from dynamohelper.helper import dynamodb

OrderDb = dynamodb(Order)          # a TableHelper subclass named "OrderDb"
orders = OrderDb(client, "orders")

orders.create_table()
orders.put(Order(an_id="uid123", a_range=1000, name="Me", total_amount=6,
                 names=["a name"], map_values={"example": "value"}))

order = orders.get("uid123", 1000)              # an Order, or None
same_partition = orders.get_by_partition_key("uid123")
several = orders.batch_get([("uid123", 1000), ("uid123", 1001)])
everything = orders.scan()

orders.delete("uid123", 1000)
orders.delete_table()
```

* `create_table()` uses on-demand billing;
  `create_table_with_provisioned_throughput(read_capacity, write_capacity)`
  creates a provisioned table instead.
* `put(item)` replaces any item with the same key; `batch_put(items)` sends
  all items in one `batch_write_item` request. Both raise `TypeError` for an
  object that is not an instance of the dataclass, and `ValueError` when a
  field that is not optional holds `None`. Optional fields holding `None`
  are left out of the stored item.
* `get_by_partition_key(partition)` returns the items of the first `query`
  result page; `scan()` follows `LastEvaluatedKey` through all pages.
* For a table without a range key, `get`, `delete` and `batch_get` take the
  partition key alone, and `get_by_partition_key` is not offered (accessing
  it raises `AttributeError`). Passing a range value to such a table, or
  leaving it out for a table that has one, raises `TypeError`.
* `dynamodb()` raises `TypeError` when the dataclass has no partition key.

The generated class carries `model`, `partition_field`, `range_field` (name
and type pairs) and `excluded`.

### Leaving methods out

Pass `exclude` with method names to leave them off the generated helper;
accessing an excluded method raises `AttributeError`:

```python
ReadOnlyOrderDb = dynamodb(Order, exclude=("put", "batch_put", "delete",
                                           "create_table", "delete_table"))
```

The names are the values of the `dynamohelper.options.Method` enum: `new`,
`build`, `get`, `batch_get`, `create_table`, `delete_table`, `put`,
`batch_put`, `delete` and `scan`. Excluding `get` removes both `get` and
`get_by_partition_key`; excluding `create_table` removes both table-creation
methods. `new` and `build` are accepted but remove nothing. An unknown name
raises `ValueError`.

`dynamohelper.options` also offers `parse_exclusions(names)`,
`retrieval_enabled(exclusions)` (false only when `get`, `batch_get` and
`scan` are all excluded) and `put_enabled(exclusions)` (false only when
`put` and `batch_put` are both excluded).

## Errors

The reading methods raise subclasses of `dynamohelper.errors.OperationError`:
`GetError`, `GetByPartitionError`, `BatchGetError` and `ScanError`. Each one
either wraps a `ParseError` (an item in the table did not match the
dataclass, for instance a number stored as a string) or the exception raised
by the client. `is_parse_error` tells which; the client's exception is in
`aws_error` and `__cause__`.

```python
from dynamohelper.errors import GetError

try:
    orders.get("uid123", 1000)
except GetError as exc:
    print(exc)   # e.g. "GetError parse error: Could not parse number for total_amount"
```

The writing and table methods return the client's response unchanged and
let the client's exceptions through as they are.

## Conversions on their own

`dynamohelper.conversion` exposes the mapping between dataclass instances
and DynamoDB attribute maps:

```python
from dynamohelper.conversion import from_item, key_value, to_item

item = to_item(order)            # {"an_id": {"S": "uid123"}, "a_range": {"N": "1000"}, ...}
back = from_item(Order, item)    # raises ParseError on missing or mistyped attributes
key_value(float, 6.0)            # {"N": "6"}
```

`from_item` ignores attributes that are not fields of the dataclass.

## What it does not do

* It does not create or configure a DynamoDB client; bring your own.
* Calls are synchronous; there is no async interface.
* Batch requests are sent as given: they are not split to fit DynamoDB's
  batch size limits, and unprocessed items or keys are not retried.
* There are no retries, conditional writes, updates of single attributes,
  secondary indexes or filter expressions.