# rental/services/vehicle_service.py
"""Read-only vehicle lookups used by the booking core."""

from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import VehicleNotFoundException
from ..models.vehicle import Vehicle
from ..repositories.factory import RepositoryFactory
from ..repositories.vehicle_repository import VehicleRepository
from .base import BaseService


class VehicleService(BaseService):
    def __init__(self, db: Session, vehicle_repository: Optional[VehicleRepository] = None):
        super().__init__(db)
        self.vehicle_repository = (
            vehicle_repository or RepositoryFactory.create_vehicle_repository(db)
        )

    @BaseService.measure_operation("get_vehicle")
    def get_vehicle(self, vehicle_id: int) -> Vehicle:
        """
        Fetch a bookable vehicle.

        Raises:
            VehicleNotFoundException: If the vehicle is missing or soft-deleted
        """
        vehicle = self.vehicle_repository.get_active(vehicle_id)
        if vehicle is None:
            raise VehicleNotFoundException(vehicle_id)
        return vehicle
