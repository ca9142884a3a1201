from typing import Generic, TypeVar, Type, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parity.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing common CRUD operations.
    
    Usage:
        class UserRepository(BaseRepository[User]):
            def __init__(self, db: AsyncSession):
                super().__init__(db, User)
            
            # Add custom methods here
            async def get_by_email(self, email: str):
                ...
    """
    
    def __init__(self, db: AsyncSession, model: Type[ModelType]):
        """
        Initialize repository.
        
        Args:
            db: Async database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
    
    async def create(self, entity: ModelType) -> ModelType:
        """Create a new entity."""
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity
    
    async def update(self, entity: ModelType) -> ModelType:
        """Update an existing entity."""
        await self.db.flush()
        await self.db.refresh(entity)
        return entity
    
    async def delete(self, entity: ModelType) -> None:
        """Hard delete an entity (permanent)."""
        await self.db.delete(entity)
        await self.db.flush()
    
    async def get_by_id(self, entity_id: UUID | int) -> Optional[ModelType]:
        """
        Get entity by primary key.
        
        Returns:
            Entity if found, None otherwise
        """
        query = select(self.model).where(self.model.id == entity_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
