"""
Domain exceptions for the stockroom application.

Expected, recoverable conditions derive from DomainError or NotFoundError.
StorageError and its subclasses are unexpected and abort the operation.
"""

from typing import Any


class StockroomError(Exception):
    """Base exception for all stockroom errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class DomainError(StockroomError):
    """Business rule violation reported back to the caller."""

    pass


# Not-found exceptions
class NotFoundError(StockroomError):
    """Referenced entity does not exist."""

    pass


class MaterialNotFoundError(NotFoundError):
    """Material not found."""

    def __init__(self, material_id: str):
        super().__init__(
            f"Material not found: {material_id}",
            code="MATERIAL_NOT_FOUND",
            details={"material_id": material_id},
        )


class MachineNotFoundError(NotFoundError):
    """Machine not found."""

    def __init__(self, machine_id: str):
        super().__init__(
            f"Machine not found: {machine_id}",
            code="MACHINE_NOT_FOUND",
            details={"machine_id": machine_id},
        )


class BOMItemNotFoundError(NotFoundError):
    """BOM item not found on the given machine."""

    def __init__(self, machine_id: str, item_id: str):
        super().__init__(
            f"BOM item {item_id} not found on machine {machine_id}",
            code="BOM_ITEM_NOT_FOUND",
            details={"machine_id": machine_id, "item_id": item_id},
        )


class WorkOrderNotFoundError(NotFoundError):
    """Work order not found."""

    def __init__(self, work_order_id: str):
        super().__init__(
            f"Work order not found: {work_order_id}",
            code="WORK_ORDER_NOT_FOUND",
            details={"work_order_id": work_order_id},
        )


class MovementNotFoundError(NotFoundError):
    """Stock movement not found."""

    def __init__(self, movement_id: str):
        super().__init__(
            f"Stock movement not found: {movement_id}",
            code="MOVEMENT_NOT_FOUND",
            details={"movement_id": movement_id},
        )


# Ledger exceptions
class InsufficientStockError(DomainError):
    """OUT movement would drive stock below zero."""

    def __init__(
        self,
        material_id: str,
        requested: float,
        available: float,
        shortages: list[dict[str, Any]] | None = None,
    ):
        super().__init__(
            f"Insufficient stock for material {material_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "material_id": material_id,
                "requested": requested,
                "available": available,
            },
        )
        self.material_id = material_id
        self.requested = requested
        self.available = available
        if shortages:
            self.details["shortages"] = shortages


class MaterialInUseError(DomainError):
    """Material is still referenced by BOM items or movements."""

    def __init__(self, material_id: str, bom_items: int, movements: int):
        super().__init__(
            f"Material {material_id} is referenced by {bom_items} BOM item(s) "
            f"and {movements} movement(s)",
            code="MATERIAL_IN_USE",
            details={
                "material_id": material_id,
                "bom_items": bom_items,
                "movements": movements,
            },
        )


class DuplicateMaterialCodeError(DomainError):
    """Material with the same code already exists."""

    def __init__(self, code: str, existing_id: str):
        super().__init__(
            f"Material already exists with code: {code}",
            code="DUPLICATE_MATERIAL_CODE",
            details={"material_code": code, "existing_id": existing_id},
        )


# BOM exceptions
class DuplicateMachineCodeError(DomainError):
    """Machine with the same code already exists."""

    def __init__(self, code: str, existing_id: str):
        super().__init__(
            f"Machine already exists with code: {code}",
            code="DUPLICATE_MACHINE_CODE",
            details={"machine_code": code, "existing_id": existing_id},
        )


class DuplicateBOMEntryError(DomainError):
    """Material already appears in the machine's BOM."""

    def __init__(self, machine_id: str, material_id: str):
        super().__init__(
            f"Material {material_id} is already in the BOM of machine {machine_id}",
            code="DUPLICATE_BOM_ENTRY",
            details={"machine_id": machine_id, "material_id": material_id},
        )


# Work order exceptions
class InvalidTransitionError(DomainError):
    """Illegal work order status change."""

    def __init__(self, work_order_id: str, current: str, requested: str):
        super().__init__(
            f"Work order {work_order_id} cannot move from {current} to {requested}",
            code="INVALID_TRANSITION",
            details={
                "work_order_id": work_order_id,
                "current": current,
                "requested": requested,
            },
        )


class CannotDeleteActiveWorkOrderError(DomainError):
    """Work order in progress cannot be deleted."""

    def __init__(self, work_order_id: str):
        super().__init__(
            f"Work order {work_order_id} is in progress and cannot be deleted",
            code="CANNOT_DELETE_ACTIVE_WORK_ORDER",
            details={"work_order_id": work_order_id},
        )


# Validation Exceptions
class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Storage Exceptions
class StorageError(StockroomError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(StockroomError):
    """Configuration error."""

    pass
