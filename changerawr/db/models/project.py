import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, JSON, Uuid
from sqlalchemy.orm import relationship

from changerawr.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    is_public = Column(Boolean, nullable=False, default=False)

    # Publication policy
    require_approval = Column(Boolean, nullable=False, default=True)
    allow_auto_publish = Column(Boolean, nullable=False, default=False)

    default_tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    changelog = relationship(
        "Changelog", back_populates="project", uselist=False, cascade="all, delete-orphan"
    )
    requests = relationship("ChangelogRequest", back_populates="project", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Project {self.slug}>"
