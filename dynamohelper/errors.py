"""Errors raised when items cannot be read or an operation fails."""

from __future__ import annotations

from typing import ClassVar


class ParseError(Exception):
    """An item could not be turned back into its dataclass."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"Parse error: {self.message}"


class OperationError(Exception):
    """A retrieval failed, either while parsing or inside the AWS client."""

    operation: ClassVar[str] = ""

    def __init__(self, message: str, aws_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.aws_error = aws_error

    @property
    def is_parse_error(self) -> bool:
        return self.aws_error is None

    @classmethod
    def from_parse(cls, error: ParseError) -> OperationError:
        result = cls(error.message)
        result.__cause__ = error
        return result

    @classmethod
    def from_aws(cls, error: BaseException) -> OperationError:
        result = cls(str(error), error)
        result.__cause__ = error
        return result

    def __str__(self) -> str:
        name = type(self).__name__
        if self.aws_error is not None:
            return f"{name} aws error {self.aws_error}"
        return f"{name} parse error: {self.message}"


class GetError(OperationError):
    operation = "get_item"


class GetByPartitionError(OperationError):
    operation = "query"


class BatchGetError(OperationError):
    operation = "batch_get_item"


class ScanError(OperationError):
    operation = "scan"