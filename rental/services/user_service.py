# rental/services/user_service.py
"""Read-only user lookups used by the booking core."""

from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import UserNotFoundException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from .base import BaseService


class UserService(BaseService):
    def __init__(self, db: Session, user_repository: Optional[UserRepository] = None):
        super().__init__(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("get_user")
    def get_user(self, user_id: int) -> User:
        """
        Fetch a user by id.

        Raises:
            UserNotFoundException: If no such user exists
        """
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(user_id)
        return user
