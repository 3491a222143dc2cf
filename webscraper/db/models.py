from __future__ import annotations


from sqlalchemy import Boolean, Column, DateTime, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import declarative_base


Base = declarative_base()


class SavedLink(Base):
    __tablename__ = "links"

    link_id = Column(Integer, primary_key=True)
    url = Column(Text, unique=True, nullable=False)
    visited = Column(Boolean, nullable=False, default=False)
    saved_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ContentItem(Base):
    __tablename__ = "content_items"
    __table_args__ = (UniqueConstraint("content_type", "value", name="uq_content_type_value"),)

    item_id = Column(Integer, primary_key=True)
    content_type = Column(Text, nullable=False, index=True)
    value = Column(Text, nullable=False)
    session_label = Column(Text, nullable=True)
    saved_at = Column(DateTime(timezone=True), server_default=func.now())
