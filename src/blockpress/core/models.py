"""Intermediate data models for the import, render and editing pipeline"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from uuid import UUID

from bs4 import BeautifulSoup
from pydantic import BaseModel

from blockpress.crud.models import FieldTypeEnum, ProvenanceEnum


# --- import: staging contract written by extract, read by commit ---

class StagedField(BaseModel):
    """One editable value extracted from a block."""
    field_name: str
    display_name: str
    field_type: FieldTypeEnum = FieldTypeEnum.text
    value: str = ""


class StagedBlock(BaseModel):
    """A block ready to persist: template with {{field_name}} tokens plus its fields."""
    type: str
    draggable: bool = False
    provenance: ProvenanceEnum = ProvenanceEnum.auto
    html_template: str
    fields: list[StagedField] = []


class StagedPage(BaseModel):
    """Public staging contract; blocks are in render order (position i -> order i + 1)."""
    slug: str
    path: str
    title: str
    head_content: str = ""
    hash: str
    blocks: list[StagedBlock]


@dataclass
class ParsedPage:
    """Internal parse result carrying the html.parser tree; not persisted."""
    path:         Optional[Path]
    slug:         str
    raw_html:     str
    hash:         str
    title:        str
    head_content: str
    soup:         BeautifulSoup


@dataclass
class Segment:
    """A block boundary in the source document: markup[start:end]."""
    type:       str
    start:      int
    end:        int
    draggable:  bool
    provenance: ProvenanceEnum
    raw_html:   str = ""


# --- render/edit: read-only views of persisted pages ---

class FieldView(BaseModel):
    id: Optional[UUID] = None
    field_name: str
    display_name: str = ""
    field_type: FieldTypeEnum = FieldTypeEnum.text
    value: str = ""


class BlockView(BaseModel):
    id: Optional[UUID] = None
    type: str
    order: int
    draggable: bool = False
    html_template: str
    fields: list[FieldView] = []


class PageView(BaseModel):
    id: Optional[UUID] = None
    slug: str
    title: str = ""
    head_content: str = ""
    published: bool = True
    blocks: list[BlockView] = []


# --- editing batch submitted by an editor per save action ---

class FieldUpdate(BaseModel):
    id: UUID
    value: str
    display_name: Optional[str] = None


class BlockUpdate(BaseModel):
    id: UUID
    order: int
    fields: list[FieldUpdate] = []


class PageUpdate(BaseModel):
    blocks: list[BlockUpdate]
