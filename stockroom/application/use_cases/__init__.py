"""Application use cases."""

from stockroom.application.use_cases.change_work_order_status import (
    ChangeWorkOrderStatusUseCase,
)
from stockroom.application.use_cases.record_movement import RecordMovementUseCase
from stockroom.application.use_cases.register_material import RegisterMaterialUseCase

__all__ = [
    "RecordMovementUseCase",
    "RegisterMaterialUseCase",
    "ChangeWorkOrderStatusUseCase",
]
