"""
Register Material Use Case.

Creates a material and books its opening balance.
"""

from stockroom.application.dto.requests import CreateMaterialRequest
from stockroom.application.dto.responses import MaterialResponse
from stockroom.config import get_logger
from stockroom.core.entities.material import Material
from stockroom.core.services.material_registry import MaterialRegistry

logger = get_logger(__name__)


class RegisterMaterialUseCase:
    """Register a material; a non-zero opening stock becomes an IN movement."""

    def __init__(self, registry: MaterialRegistry | None = None):
        self._registry = registry

    async def _get_registry(self) -> MaterialRegistry:
        if self._registry is None:
            from stockroom.application.services import get_material_registry

            self._registry = await get_material_registry()
        return self._registry

    async def execute(
        self,
        request: CreateMaterialRequest,
        performed_by: str | None = None,
    ) -> Material:
        registry = await self._get_registry()
        material = Material(**request.model_dump(exclude={"opening_stock"}))
        created = await registry.register(
            material,
            opening_stock=request.opening_stock,
            performed_by=performed_by,
        )
        logger.info(
            "register_material_complete",
            material_id=created.id,
            opening_stock=request.opening_stock,
        )
        return created

    def to_response(self, result: Material) -> MaterialResponse:
        return MaterialResponse.from_entity(result)
