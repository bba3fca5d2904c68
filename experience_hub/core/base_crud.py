from datetime import datetime, timezone
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session


class BaseCRUD:
    """Base CRUD class with common operations"""

    def __init__(self, model, db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> Optional[Any]:
        """Get record by integer ID"""
        return self.db.query(self.model).filter(self.model.id == id).first()

    def get_active_by_id(self, id: int) -> Optional[Any]:
        """Get record by ID, skipping soft-deleted rows"""
        query = self.db.query(self.model).filter(self.model.id == id)

        if hasattr(self.model, "deleted_at"):
            query = query.filter(self.model.deleted_at.is_(None))

        return query.first()

    def create(self, obj_in: Dict[str, Any]) -> Any:
        """Create new record"""
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        self.db.flush()
        self.db.refresh(db_obj)
        return db_obj

    def update(self, db_obj: Any, obj_in: Dict[str, Any]) -> Any:
        """Update existing record"""
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        self.db.add(db_obj)
        self.db.flush()
        self.db.refresh(db_obj)
        return db_obj

    def soft_delete(self, db_obj: Any, deleted_at: datetime | None = None) -> Any:
        """Mark record as deleted"""
        db_obj.deleted_at = deleted_at or datetime.now(timezone.utc)
        self.db.add(db_obj)
        self.db.flush()
        return db_obj
