"""Project workflow steps."""

from enum import Enum

from sqlalchemy import Column, Integer, Float, String, Date, Text, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from ..database import Base, new_id


class StepStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class WorkflowStep(Base):
    """One step of a project's content workflow."""

    __tablename__ = "project_workflows"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text)
    step_type = Column(String(50))  # research, writing, optimization, review, publishing
    assignee_id = Column(String(36))
    status = Column(SQLEnum(StepStatus), default=StepStatus.PENDING, index=True)
    due_date = Column(Date)
    dependencies = Column(JSON, default=list)  # names of steps this one waits on
    estimated_hours = Column(Float, default=0.0)
    position = Column(Integer, default=0)

    project = relationship("Project", back_populates="workflow_steps")

    def __repr__(self):
        return f"<WorkflowStep(id={self.id}, name='{self.name}', status={self.status})>"
