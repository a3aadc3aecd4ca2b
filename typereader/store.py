"""In-memory collections of documents, dictionary entries and folders.

The store is the only thing that mutates the collections. Every successful
mutation hands the whole updated collection to the blob store. Callers get
model copies back and ask the store for changes instead of editing them.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from typereader.highlights import apply_highlight
from typereader.models import (
    Color,
    DictionaryEntry,
    DictionaryFolder,
    Document,
    DocumentMode,
    Highlight,
)
from typereader.persistence import DICTIONARY, DOCUMENTS, FOLDERS, BlobStore
from typereader.typing_progress import clamp

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"

M = TypeVar("M", bound=BaseModel)


def normalize_content(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _load_models(blobs: BlobStore, name: str, model: Type[M]) -> List[M]:
    out: List[M] = []
    for raw in blobs.load(name):
        try:
            out.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning("Skipping invalid %s record: %s", name, e)
    return out


class ReaderStore:
    def __init__(self, blobs: BlobStore):
        self.blobs = blobs
        self._documents: List[Document] = _load_models(blobs, DOCUMENTS, Document)
        self._entries: List[DictionaryEntry] = _load_models(blobs, DICTIONARY, DictionaryEntry)
        self._folders: List[DictionaryFolder] = _load_models(blobs, FOLDERS, DictionaryFolder)
        self.active_id: Optional[str] = None
        logger.info(
            "Loaded %d documents, %d dictionary entries, %d folders",
            len(self._documents), len(self._entries), len(self._folders),
        )

    # --- persistence ---

    def _save(self, name: str, items: List[BaseModel]) -> None:
        try:
            self.blobs.save(name, [x.model_dump(mode="json") for x in items])
        except Exception:
            logger.exception("Failed to persist %s", name)

    def _save_documents(self) -> None:
        self._save(DOCUMENTS, self._documents)

    def _save_entries(self) -> None:
        self._save(DICTIONARY, self._entries)

    def _save_folders(self) -> None:
        self._save(FOLDERS, self._folders)

    # --- documents ---

    def list_documents(self) -> List[Document]:
        return [d.model_copy(deep=True) for d in self._documents]

    def _doc_index(self, doc_id: str) -> int:
        for i, d in enumerate(self._documents):
            if d.id == doc_id:
                return i
        return -1

    def get_document(self, doc_id: str) -> Optional[Document]:
        i = self._doc_index(doc_id)
        if i < 0:
            return None
        return self._documents[i].model_copy(deep=True)

    def add_document(
        self,
        title: str,
        content: str,
        mode: DocumentMode = DocumentMode.NORMAL,
        repeat: int = 1,
        normalize: bool = True,
    ) -> Optional[Document]:
        if not title.strip() or not content.strip():
            return None

        text = normalize_content(content) if normalize else content
        if repeat > 1:
            text = " ".join([text] * repeat)

        doc = Document(title=title.strip(), content=text, mode=DocumentMode(mode))
        self._documents.insert(0, doc)
        self._save_documents()
        logger.info("Added document %s (%s, %d chars)", doc.id, doc.mode.value, len(text))
        return doc.model_copy(deep=True)

    def remove_document(self, doc_id: str) -> bool:
        i = self._doc_index(doc_id)
        if i < 0:
            return False
        del self._documents[i]
        if self.active_id == doc_id:
            self.active_id = None
        self._save_documents()
        return True

    def open_document(self, doc_id: str) -> Optional[Document]:
        doc = self.get_document(doc_id)
        if doc is not None:
            self.active_id = doc_id
        return doc

    def close_document(self) -> None:
        self.active_id = None

    @property
    def active_document(self) -> Optional[Document]:
        if self.active_id is None:
            return None
        return self.get_document(self.active_id)

    def _replace_document(self, i: int, **changes) -> Document:
        self._documents[i] = self._documents[i].model_copy(update=changes)
        self._save_documents()
        return self._documents[i].model_copy(deep=True)

    def update_cursor(self, doc_id: str, cursor: int) -> Optional[Document]:
        i = self._doc_index(doc_id)
        if i < 0:
            return None
        doc = self._documents[i]
        return self._replace_document(i, cursor=clamp(cursor, 0, len(doc.content)))

    def update_highlights(self, doc_id: str, highlights: List[Highlight]) -> Optional[Document]:
        i = self._doc_index(doc_id)
        if i < 0:
            return None
        return self._replace_document(i, highlights=list(highlights))

    def apply_highlight(
        self,
        doc_id: str,
        start: int,
        end: int,
        color: Optional[Color],
    ) -> Optional[Document]:
        doc = self.get_document(doc_id)
        if doc is None:
            return None
        return self.update_highlights(doc_id, apply_highlight(doc.highlights, start, end, color))

    # --- dictionary entries ---

    def list_entries(self) -> List[DictionaryEntry]:
        return [e.model_copy() for e in self._entries]

    def _entry_index(self, entry_id: str) -> int:
        for i, e in enumerate(self._entries):
            if e.id == entry_id:
                return i
        return -1

    def get_entry(self, entry_id: str) -> Optional[DictionaryEntry]:
        i = self._entry_index(entry_id)
        return self._entries[i].model_copy() if i >= 0 else None

    def add_entry(
        self,
        word: str,
        definition: str = "",
        source_document_id: Optional[str] = None,
        folder_id: Optional[str] = None,
    ) -> Optional[DictionaryEntry]:
        word = word.strip()
        if not word:
            return None
        if folder_id is not None and self.get_folder(folder_id) is None:
            return None

        entry = DictionaryEntry(
            word=word,
            definition=definition.strip(),
            source_document_id=source_document_id,
            folder_id=folder_id,
        )
        self._entries.insert(0, entry)
        self._save_entries()
        return entry.model_copy()

    def update_entry(
        self,
        entry_id: str,
        word: Optional[str] = None,
        definition: Optional[str] = None,
        folder_id: Optional[str] = None,
        uncategorize: bool = False,
    ) -> Optional[DictionaryEntry]:
        """Edit an entry or move it between folders.

        ``folder_id`` moves the entry into that folder; ``uncategorize`` takes
        it out of any folder. Returns None if the entry is unknown or the edit
        is rejected (blank word, unknown folder).
        """
        i = self._entry_index(entry_id)
        if i < 0:
            return None

        changes: dict = {}
        if word is not None:
            if not word.strip():
                return None
            changes["word"] = word.strip()
        if definition is not None:
            changes["definition"] = definition.strip()
        if uncategorize:
            changes["folder_id"] = None
        elif folder_id is not None:
            if self.get_folder(folder_id) is None:
                return None
            changes["folder_id"] = folder_id

        self._entries[i] = self._entries[i].model_copy(update=changes)
        self._save_entries()
        return self._entries[i].model_copy()

    def delete_entry(self, entry_id: str) -> bool:
        i = self._entry_index(entry_id)
        if i < 0:
            return False
        del self._entries[i]
        self._save_entries()
        return True

    def filter_entries(self, search: str = "", folder: Optional[str] = None) -> List[DictionaryEntry]:
        """Entries matching ``search`` in word or definition, within ``folder``.

        ``folder`` is None for all entries, ``"uncategorized"`` for entries
        without a folder, or a folder id.
        """
        needle = search.strip().lower()
        out = []
        for e in self._entries:
            if needle and needle not in e.word.lower() and needle not in e.definition.lower():
                continue
            if folder == UNCATEGORIZED:
                if e.folder_id:
                    continue
            elif folder and e.folder_id != folder:
                continue
            out.append(e.model_copy())
        return out

    # --- folders ---

    def list_folders(self) -> List[DictionaryFolder]:
        return [f.model_copy() for f in self._folders]

    def _folder_index(self, folder_id: str) -> int:
        for i, f in enumerate(self._folders):
            if f.id == folder_id:
                return i
        return -1

    def get_folder(self, folder_id: str) -> Optional[DictionaryFolder]:
        i = self._folder_index(folder_id)
        return self._folders[i].model_copy() if i >= 0 else None

    def create_folder(self, name: str) -> Optional[DictionaryFolder]:
        if not name.strip():
            return None
        folder = DictionaryFolder(name=name.strip())
        self._folders.append(folder)
        self._save_folders()
        return folder.model_copy()

    def rename_folder(self, folder_id: str, name: str) -> Optional[DictionaryFolder]:
        i = self._folder_index(folder_id)
        if i < 0 or not name.strip():
            return None
        self._folders[i] = self._folders[i].model_copy(update={"name": name.strip()})
        self._save_folders()
        return self._folders[i].model_copy()

    def delete_folder(self, folder_id: str) -> bool:
        """Delete a folder; its entries stay and become uncategorized."""
        i = self._folder_index(folder_id)
        if i < 0:
            return False
        del self._folders[i]

        moved = 0
        for j, e in enumerate(self._entries):
            if e.folder_id == folder_id:
                self._entries[j] = e.model_copy(update={"folder_id": None})
                moved += 1

        self._save_folders()
        if moved:
            self._save_entries()
        logger.info("Deleted folder %s (%d entries uncategorized)", folder_id, moved)
        return True
