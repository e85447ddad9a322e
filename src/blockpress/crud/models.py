"""Database table definitions for pages, blocks and block fields"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, String, Text
from sqlmodel import Field, Relationship, SQLModel


class FieldTypeEnum(str, Enum):
    """Editor widget used for a field, inferred from the editable element's tag"""
    text = "text"
    textarea = "textarea"
    image = "image"
    link = "link"


class ProvenanceEnum(str, Enum):
    """How a block boundary was found: an explicit marker pair or a body child element"""
    manual = "manual"
    auto = "auto"


class Page(SQLModel, table=True):
    """An imported HTML page; the slug is both its route and its asset namespace"""
    __tablename__ = "pages"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(..., sa_column=Column(String(255), nullable=False, unique=True, index=True))
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    head_content: str = Field(default="", sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    path: str = Field(..., sa_column=Column(Text, nullable=False))
    published: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    committed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
    blocks: List["Block"] = Relationship(back_populates="page")


class Block(SQLModel, table=True):
    """One ordered content unit of a page: its template plus the fields substituted into it"""
    __tablename__ = "blocks"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    page_id: UUID = Field(..., foreign_key="pages.id", index=True, nullable=False)
    type: str = Field(..., nullable=False, description="Marker name, element id, class token or tag-counter name")
    html_template: str = Field(..., sa_column=Column(Text, nullable=False))
    order: int = Field(..., nullable=False, description="1-based render position within the page")
    draggable: bool = Field(default=False, nullable=False)
    provenance: ProvenanceEnum = Field(default=ProvenanceEnum.auto, nullable=False)
    page: Optional[Page] = Relationship(back_populates="blocks")
    fields: List["BlockField"] = Relationship(back_populates="block")


class BlockField(SQLModel, table=True):
    """A named editable value owned by a block"""
    __tablename__ = "block_fields"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    block_id: UUID = Field(..., foreign_key="blocks.id", index=True, nullable=False)
    position: int = Field(..., nullable=False, description="Document order of the editable element in its block")
    field_name: str = Field(..., nullable=False)
    display_name: str = Field(..., nullable=False)
    field_type: FieldTypeEnum = Field(default=FieldTypeEnum.text, nullable=False)
    value: str = Field(default="", sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    block: Optional[Block] = Relationship(back_populates="fields")
