import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship

from changerawr.db.base import Base
from changerawr.db.models.changelog import entry_tags


class ChangelogTag(Base):
    __tablename__ = "changelog_tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(50), unique=True, nullable=False, index=True)
    color = Column(String(7), nullable=True)  # "#RRGGBB"
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    entries = relationship("ChangelogEntry", secondary=entry_tags, back_populates="tags")

    def __repr__(self) -> str:
        return f"<ChangelogTag {self.name}>"
