"""Names of the helper operations that can be switched off."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

EXCLUSION_ATTRIBUTE_NAME = "exclusion"


class Method(Enum):
    """An operation a table helper can offer."""

    NEW = "new"
    BUILD = "build"
    GET = "get"  # covers get by partition key as well
    BATCH_GET = "batch_get"
    CREATE_TABLE = "create_table"
    DELETE_TABLE = "delete_table"
    PUT = "put"
    BATCH_PUT = "batch_put"
    DELETE = "delete"
    SCAN = "scan"


_RETRIEVAL_METHODS = frozenset({Method.GET, Method.BATCH_GET, Method.SCAN})
_PUT_METHODS = frozenset({Method.PUT, Method.BATCH_PUT})


def parse_exclusions(names: Iterable[str | Method] | str | Method) -> frozenset[Method]:
    """Turn method names (or Method members) into a set of excluded methods."""
    if isinstance(names, (str, Method)):
        names = [names]
    excluded = set()
    for name in names:
        try:
            excluded.add(Method(name))
        except ValueError:
            raise ValueError(f"Unknown method to exclude: {name!r}") from None
    return frozenset(excluded)


def retrieval_enabled(exclusions: Iterable[str | Method]) -> bool:
    """True unless get, batch_get and scan are all excluded."""
    return not _RETRIEVAL_METHODS <= parse_exclusions(exclusions)


def put_enabled(exclusions: Iterable[str | Method]) -> bool:
    """True unless put and batch_put are both excluded."""
    return not _PUT_METHODS <= parse_exclusions(exclusions)