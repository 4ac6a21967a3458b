"""User repository"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import User


class UserRepository:
    @staticmethod
    def get_users(db: Session, role: Optional[str] = None) -> list[User]:
        query = db.query(User)
        if role:
            query = query.filter(User.role == role)
        return query.order_by(User.email.asc()).all()

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def find_existing(db: Session, firebase_uid: str, email: str) -> Optional[User]:
        return (
            db.query(User)
            .filter(or_(User.firebase_uid == firebase_uid, User.email == email))
            .first()
        )

    @staticmethod
    def create_user(db: Session, **data) -> User:
        user = User(**data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        for key, value in updates.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)

        db.commit()
        db.refresh(user)
        return user
