from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from faculty_appraisal.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String, index=True, nullable=False)  # Created, Submitted, Reviewed, Finalized, ...
    module = Column(String, index=True, nullable=False)  # "Appraisal", "Appraisal Cycle"
    actor_id = Column(String, nullable=True)
    actor_name = Column(String, nullable=False, default="System")
    entity_id = Column(String, nullable=True)
    details = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
