# rental/repositories/vehicle_repository.py

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.vehicle import Vehicle
from .base_repository import BaseRepository


class VehicleRepository(BaseRepository[Vehicle]):
    """Read access to vehicle listings."""

    def __init__(self, db: Session):
        super().__init__(db, Vehicle)

    def get_active(self, vehicle_id: int) -> Optional[Vehicle]:
        """Vehicle by id, ignoring soft-deleted listings."""
        try:
            return (
                self.db.query(Vehicle)
                .options(selectinload(Vehicle.images))
                .filter(Vehicle.id == vehicle_id, Vehicle.is_deleted.is_(False))
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting vehicle {vehicle_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve vehicle: {str(e)}") from e
