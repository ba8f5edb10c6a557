from sqlalchemy import Column, Integer, String, JSON, DateTime
from sqlalchemy.sql import func
from faculty_appraisal.database import Base


class StoredCollection(Base):
    """One JSON list per logical collection key (cycles, appraisals)."""
    __tablename__ = "stored_collections"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, unique=True, index=True, nullable=False)
    payload = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
