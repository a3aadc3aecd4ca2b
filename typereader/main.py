from __future__ import annotations

import base64
import binascii
import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from typereader import config
from typereader.extraction import ExtractionTracker
from typereader.highlights import overlapping
from typereader.models import (
    DictionaryEntry,
    DictionaryFolder,
    Document,
    DocumentMode,
    DocumentSummary,
    EntryUpdate,
    ExtractRequest,
    FolderBody,
    HighlightRequest,
    KeyEvent,
    NewDocument,
    PageJump,
    PageView,
    ProcessingState,
    VocabularyRequest,
)
from typereader.persistence import DICTIONARY, DOCUMENTS, FOLDERS, JsonFileBlobStore
from typereader.selection import resolve_selection, selected_text
from typereader.store import ReaderStore
from typereader.typing_progress import TypingSession

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="typereader")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_blobs() -> JsonFileBlobStore:
    return JsonFileBlobStore(config.DATA_DIR)


@lru_cache(maxsize=1)
def get_store() -> ReaderStore:
    return ReaderStore(get_blobs())


@lru_cache(maxsize=1)
def get_tracker() -> ExtractionTracker:
    return ExtractionTracker()


@app.get("/health")
async def health():
    blobs = get_blobs()
    return {
        "ok": True,
        "data_dir": str(config.DATA_DIR),
        "documents_exists": blobs.exists(DOCUMENTS),
        "dictionary_exists": blobs.exists(DICTIONARY),
        "folders_exists": blobs.exists(FOLDERS),
    }


def find_document(store: ReaderStore, doc_id: str) -> Document:
    doc = store.get_document(doc_id)
    if doc is None:
        raise HTTPException(404, detail=f"document not found: {doc_id}")
    return doc


def session_for(store: ReaderStore, doc: Document) -> TypingSession:
    """Typing session whose cursor moves are written back to the store."""
    return TypingSession(
        doc.content,
        doc.cursor,
        on_move=lambda cursor: store.update_cursor(doc.id, cursor),
        page_size=config.PAGE_SIZE,
    )


def page_view(doc: Document, session: TypingSession) -> PageView:
    start = session.page_start
    return PageView(
        document_id=doc.id,
        page=session.page_number,
        total_pages=session.total_pages,
        page_start=start,
        cursor=session.cursor,
        text=session.visible_text,
        highlights=overlapping(doc.highlights, start, start + session.page_size),
    )


# --- documents ---

@app.get("/documents", response_model=List[DocumentSummary])
async def list_documents(store: ReaderStore = Depends(get_store)):
    out = []
    for d in store.list_documents():
        session = TypingSession(d.content, d.cursor)
        out.append(
            DocumentSummary(
                id=d.id,
                title=d.title,
                mode=d.mode,
                created_at=d.created_at,
                cursor=d.cursor,
                length=len(d.content),
                progress=session.progress,
            )
        )
    return out


@app.post("/documents", response_model=Document, status_code=201)
async def add_document(body: NewDocument, store: ReaderStore = Depends(get_store)):
    doc = store.add_document(body.title, body.content, mode=body.mode, repeat=body.repeat)
    if doc is None:
        raise HTTPException(400, detail="title and content are required")
    return doc


@app.get("/documents/{doc_id}", response_model=Document)
async def get_document(doc_id: str, store: ReaderStore = Depends(get_store)):
    return find_document(store, doc_id)


@app.delete("/documents/{doc_id}")
async def delete_document(doc_id: str, store: ReaderStore = Depends(get_store)):
    if not store.remove_document(doc_id):
        raise HTTPException(404, detail=f"document not found: {doc_id}")
    return {"ok": True}


@app.post("/documents/{doc_id}/open", response_model=Document)
async def open_document(doc_id: str, store: ReaderStore = Depends(get_store)):
    doc = store.open_document(doc_id)
    if doc is None:
        raise HTTPException(404, detail=f"document not found: {doc_id}")
    return doc


@app.get("/active", response_model=Document)
async def active_document(store: ReaderStore = Depends(get_store)):
    doc = store.active_document
    if doc is None:
        raise HTTPException(404, detail="no document is open")
    return doc


# --- typing ---

@app.get("/documents/{doc_id}/page", response_model=PageView)
async def get_page(doc_id: str, store: ReaderStore = Depends(get_store)):
    doc = find_document(store, doc_id)
    return page_view(doc, session_for(store, doc))


@app.post("/documents/{doc_id}/keys", response_model=PageView)
async def press_key(doc_id: str, event: KeyEvent, store: ReaderStore = Depends(get_store)):
    doc = find_document(store, doc_id)
    session = session_for(store, doc)
    session.handle_key(event.key, ctrl=event.ctrl, meta=event.meta, alt=event.alt)
    return page_view(doc, session)


@app.post("/documents/{doc_id}/page", response_model=PageView)
async def jump_to_page(doc_id: str, body: PageJump, store: ReaderStore = Depends(get_store)):
    doc = find_document(store, doc_id)
    session = session_for(store, doc)
    session.jump_to_page(body.page)
    return page_view(doc, session)


# --- study / vocabulary ---

def require_mode(doc: Document, mode: DocumentMode) -> None:
    if doc.mode != mode:
        raise HTTPException(409, detail=f"document is in {doc.mode.value} mode, not {mode.value}")


@app.post("/documents/{doc_id}/highlights", response_model=Document)
async def highlight(doc_id: str, body: HighlightRequest, store: ReaderStore = Depends(get_store)):
    doc = find_document(store, doc_id)
    require_mode(doc, DocumentMode.STUDY)

    rng = resolve_selection(body, len(doc.content))
    if rng is None:
        raise HTTPException(400, detail="selection could not be resolved")
    try:
        return store.apply_highlight(doc_id, rng.start, rng.end, body.color)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))


@app.post("/documents/{doc_id}/vocabulary", response_model=DictionaryEntry, status_code=201)
async def capture_word(doc_id: str, body: VocabularyRequest, store: ReaderStore = Depends(get_store)):
    doc = find_document(store, doc_id)
    require_mode(doc, DocumentMode.VOCABULARY)

    rng = resolve_selection(body, len(doc.content))
    if rng is None:
        raise HTTPException(400, detail="selection could not be resolved")
    entry = store.add_entry(selected_text(doc.content, rng), body.definition, source_document_id=doc_id)
    if entry is None:
        raise HTTPException(400, detail="selection is empty")
    return entry


# --- dictionary ---

@app.get("/dictionary", response_model=List[DictionaryEntry])
async def get_dictionary(
    search: str = Query("", description="substring of word or definition"),
    folder: Optional[str] = Query(None, description="folder id, or 'uncategorized'"),
    store: ReaderStore = Depends(get_store),
):
    return store.filter_entries(search=search, folder=folder)


@app.patch("/dictionary/{entry_id}", response_model=DictionaryEntry)
async def update_entry(entry_id: str, body: EntryUpdate, store: ReaderStore = Depends(get_store)):
    if store.get_entry(entry_id) is None:
        raise HTTPException(404, detail=f"entry not found: {entry_id}")
    entry = store.update_entry(
        entry_id,
        word=body.word,
        definition=body.definition,
        folder_id=body.folder_id,
        uncategorize=body.uncategorize,
    )
    if entry is None:
        raise HTTPException(400, detail="invalid entry update")
    return entry


@app.delete("/dictionary/{entry_id}")
async def delete_entry(entry_id: str, store: ReaderStore = Depends(get_store)):
    if not store.delete_entry(entry_id):
        raise HTTPException(404, detail=f"entry not found: {entry_id}")
    return {"ok": True}


# --- folders ---

@app.get("/folders", response_model=List[DictionaryFolder])
async def list_folders(store: ReaderStore = Depends(get_store)):
    return store.list_folders()


@app.post("/folders", response_model=DictionaryFolder, status_code=201)
async def create_folder(body: FolderBody, store: ReaderStore = Depends(get_store)):
    folder = store.create_folder(body.name)
    if folder is None:
        raise HTTPException(400, detail="folder name is required")
    return folder


@app.patch("/folders/{folder_id}", response_model=DictionaryFolder)
async def rename_folder(folder_id: str, body: FolderBody, store: ReaderStore = Depends(get_store)):
    if store.get_folder(folder_id) is None:
        raise HTTPException(404, detail=f"folder not found: {folder_id}")
    folder = store.rename_folder(folder_id, body.name)
    if folder is None:
        raise HTTPException(400, detail="folder name is required")
    return folder


@app.delete("/folders/{folder_id}")
async def delete_folder(folder_id: str, store: ReaderStore = Depends(get_store)):
    if not store.delete_folder(folder_id):
        raise HTTPException(404, detail=f"folder not found: {folder_id}")
    return {"ok": True}


# --- extraction ---

@app.post("/extract", status_code=202)
async def start_extraction(body: ExtractRequest, tracker: ExtractionTracker = Depends(get_tracker)):
    try:
        data = base64.b64decode(body.data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(400, detail="data must be base64")
    request = tracker.start(data, body.mime_type, body.filename)
    return {"request": request}


@app.get("/extract/status", response_model=ProcessingState)
async def extraction_status(tracker: ExtractionTracker = Depends(get_tracker)):
    return tracker.state
