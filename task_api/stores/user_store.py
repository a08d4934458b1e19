from datetime import datetime, timezone
from typing import List, Optional
import uuid

from sqlmodel import Session, select

from ..models.user import Role, User


class UserStore:
    """Filtered queries over the ``users`` table for one request's session."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: uuid.UUID) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.email == email)).first()

    def email_taken(self, email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        statement = select(User.id).where(User.email == email)
        if exclude_id is not None:
            statement = statement.where(User.id != exclude_id)
        return self.session.exec(statement).first() is not None

    def create(self, *, email: str, password: str, name: str = "", role: Role = Role.user) -> User:
        # password is plaintext here; the before_insert listener hashes it
        user = User(name=name or "", email=email, password=password, role=role)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def save(self, user: User) -> User:
        user.updated_at = datetime.now(timezone.utc)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def delete(self, user: User) -> None:
        self.session.delete(user)
        self.session.commit()

    def list_all(self) -> List[User]:
        return list(self.session.exec(select(User).order_by(User.created_at.desc())).all())
