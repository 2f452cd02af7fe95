# rental/repositories/user_repository.py

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Read access to users for notifications and booking details."""

    def __init__(self, db: Session):
        super().__init__(db, User)
