from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    return int(time.time() * 1000)


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"


class DocumentMode(str, Enum):
    NORMAL = "normal"
    VOCABULARY = "vocabulary"
    STUDY = "study"


class Highlight(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: int  # inclusive char offset
    end: int    # exclusive char offset
    color: Color


class Document(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    content: str
    cursor: int = 0
    created_at: int = Field(default_factory=now_ms)
    mode: DocumentMode = DocumentMode.NORMAL
    highlights: List[Highlight] = Field(default_factory=list)


class DictionaryFolder(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    created_at: int = Field(default_factory=now_ms)


class DictionaryEntry(BaseModel):
    id: str = Field(default_factory=new_id)
    word: str
    definition: str = ""
    source_document_id: Optional[str] = None  # where the word was captured
    folder_id: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)


class TextRange(BaseModel):
    start: int  # inclusive char offset
    end: int    # exclusive char offset


class ExtractedDraft(BaseModel):
    title: str
    content: str


class ProcessingState(BaseModel):
    is_processing: bool = False
    message: str = ""
    error: Optional[str] = None
    draft: Optional[ExtractedDraft] = None


class DocumentSummary(BaseModel):
    id: str
    title: str
    mode: DocumentMode
    created_at: int
    cursor: int
    length: int
    progress: float


class PageView(BaseModel):
    document_id: str
    page: int          # 1-indexed
    total_pages: int
    page_start: int
    cursor: int
    text: str
    highlights: List[Highlight]


# --- request bodies ---

class NewDocument(BaseModel):
    title: str
    content: str
    mode: DocumentMode = DocumentMode.NORMAL
    repeat: int = Field(default=1, ge=1)


class KeyEvent(BaseModel):
    key: str
    ctrl: bool = False
    meta: bool = False
    alt: bool = False


class PageJump(BaseModel):
    page: int


class SelectionBody(BaseModel):
    anchor: Optional[int] = None
    focus: Optional[int] = None
    text: str = ""


class HighlightRequest(SelectionBody):
    color: Optional[Color] = None  # None erases


class VocabularyRequest(SelectionBody):
    definition: str = ""


class EntryUpdate(BaseModel):
    word: Optional[str] = None
    definition: Optional[str] = None
    folder_id: Optional[str] = None
    uncategorize: bool = False


class FolderBody(BaseModel):
    name: str


class ExtractRequest(BaseModel):
    filename: str = ""
    mime_type: str = "application/pdf"
    data: str  # base64
