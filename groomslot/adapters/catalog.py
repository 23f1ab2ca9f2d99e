"""
Service catalog backed by the configured service list.
"""

from typing import Dict, Iterable, List

from ..domain.exceptions import ServiceNotFoundError
from ..domain.models import ServiceSpec


class ConfigCatalog:
    """Read-only catalog of grooming services."""

    def __init__(self, services: Iterable[ServiceSpec]):
        self._services: Dict[int, ServiceSpec] = {s.id: s for s in services}

    async def get_service(self, service_id: int) -> ServiceSpec:
        try:
            return self._services[service_id]
        except KeyError:
            raise ServiceNotFoundError(f"Unknown service id: {service_id}") from None

    def list_services(self) -> List[ServiceSpec]:
        """Services ordered by price, cheapest first."""
        return sorted(self._services.values(), key=lambda s: (s.price, s.id))
