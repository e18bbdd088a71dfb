"""Core building blocks shared across workflow modules."""

from acadvizen.core.result import OperationResult, service_operation


__all__ = ["OperationResult", "service_operation"]
