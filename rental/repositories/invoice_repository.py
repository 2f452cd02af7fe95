# rental/repositories/invoice_repository.py

from typing import Optional

from sqlalchemy.orm import Session

from ..models.invoice import Invoice
from .base_repository import BaseRepository


class InvoiceRepository(BaseRepository[Invoice]):
    """Repository for settlement invoices."""

    def __init__(self, db: Session):
        super().__init__(db, Invoice)

    def get_by_booking_id(self, booking_id: int) -> Optional[Invoice]:
        return self.find_one_by(booking_id=booking_id)
