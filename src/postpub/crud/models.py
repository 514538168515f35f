"""Rebuild cache table: one row per (source file, segment) last built"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel


class BuildRecord(SQLModel, table=True):
    """Hash of the segment text a document was last built from"""
    __tablename__ = "build_records"
    __table_args__ = (UniqueConstraint("path", "segment", name="uq_build_path_segment"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    path: str = Field(..., sa_column=Column(Text, nullable=False, index=True))
    segment: int = Field(..., nullable=False, description="Index of the document within its file")
    slug: str = Field(..., index=True, nullable=False)
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    built_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
