"""Typed DynamoDB table helpers generated from annotated dataclasses."""

__version__ = "0.2.1"
__all__ = ["conversion", "errors", "fieldtypes", "helper", "options"]