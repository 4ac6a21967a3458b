"""Interpreter repository - Database operations for interpreters"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Interpreter


class InterpreterRepository:
    """Repository for interpreter database operations"""

    @staticmethod
    def get_interpreters(db: Session, status: Optional[str] = None) -> list[Interpreter]:
        query = db.query(Interpreter)
        if status:
            query = query.filter(Interpreter.status == status)
        return query.order_by(Interpreter.name.asc()).all()

    @staticmethod
    def get_interpreter_by_id(db: Session, interpreter_id: str) -> Optional[Interpreter]:
        return db.query(Interpreter).filter(Interpreter.id == interpreter_id).first()

    @staticmethod
    def find_by_language(db: Session, language: str) -> list[Interpreter]:
        """ACTIVE interpreters with a case-insensitive substring match on any language"""
        needle = language.strip().lower()
        active = db.query(Interpreter).filter(Interpreter.status == "ACTIVE").all()
        return [i for i in active if any(needle in lang.lower() for lang in (i.languages or []))]

    @staticmethod
    def create_interpreter(db: Session, **data) -> Interpreter:
        interpreter = Interpreter(**data)
        db.add(interpreter)
        db.commit()
        db.refresh(interpreter)
        return interpreter

    @staticmethod
    def update_interpreter(db: Session, interpreter: Interpreter, **updates) -> Interpreter:
        for key, value in updates.items():
            if value is not None and hasattr(interpreter, key):
                setattr(interpreter, key, value)

        db.commit()
        db.refresh(interpreter)
        return interpreter
