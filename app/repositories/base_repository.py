from typing import Generic, TypeVar, Type, Optional, Any, Dict
from sqlalchemy.orm import Session, Query
from app.db import Base

ModelType = TypeVar("ModelType", bound=Base)

class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations"""
    
    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db
    
    def query(self) -> Query:
        """Unfiltered query over the model"""
        return self.db.query(self.model)
    
    def find_by_id(self, id: Any) -> Optional[ModelType]:
        """Get by ID"""
        return self.db.get(self.model, id)
    
    def find_one(self, **criteria) -> Optional[ModelType]:
        """First object matching all criteria"""
        return self.query().filter_by(**criteria).first()
    
    def exists(self, **criteria) -> bool:
        """Check if object exists"""
        return self.find_one(**criteria) is not None
    
    def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """Create new object"""
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        self._commit()
        self.db.refresh(db_obj)
        return db_obj
    
    def update(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """Update object"""
        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        self._commit()
        self.db.refresh(db_obj)
        return db_obj
    
    def find_by_id_and_update(self, id: Any, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """Partial update by ID; None when no such object"""
        db_obj = self.find_by_id(id)
        if db_obj is None:
            return None
        return self.update(db_obj, obj_in)
    
    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
