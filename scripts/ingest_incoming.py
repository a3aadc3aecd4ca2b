"""Import text and PDF files from data/incoming as reader documents.

- *.txt: title is the first non-empty line, body is the rest
- *.pdf: text is extracted with the configured extraction backend, title is the filename stem

Processed files are moved into data/archive so reruns don't import them twice.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path

from typereader import config
from typereader.extraction import ExtractionError, extract_text, title_from_filename
from typereader.models import DocumentMode
from typereader.persistence import JsonFileBlobStore
from typereader.store import ReaderStore

INCOMING = config.DATA_DIR / "incoming"
ARCHIVE = config.DATA_DIR / "archive"

# Only one output location: processed == archive (automatic move)
AUTO_ARCHIVE_INCOMING = True


@dataclass
class ParsedText:
    title: str
    text: str


def parse_txt(path: Path) -> ParsedText:
    """Parse a text file.

    - Title: first non-empty line
    - Body: remaining lines
    """
    raw = path.read_text(encoding="utf-8").replace("\r\n", "\n").strip("\n")
    lines = raw.split("\n")

    title = ""
    body_start = 0
    for i, line in enumerate(lines):
        if line.strip():
            title = line.strip()
            body_start = i + 1
            break

    body = "\n".join(lines[body_start:]).strip("\n")
    if not title:
        # fallback if file is empty
        title = path.stem.strip() or path.name

    return ParsedText(title=title, text=body)


def parse_pdf(path: Path) -> ParsedText:
    text = asyncio.run(extract_text(path.read_bytes(), "application/pdf"))
    return ParsedText(title=title_from_filename(path.name), text=text)


def archive_incoming_file(src_path: Path, archive_dir: Path = ARCHIVE) -> Path:
    """Move an incoming source file into the archive folder."""
    archive_dir.mkdir(parents=True, exist_ok=True)

    dest_path = archive_dir / src_path.name

    # If a file with the same name already exists in the archive, append a numeric suffix.
    if dest_path.exists():
        stem = src_path.stem
        suffix = src_path.suffix
        k = 1
        while True:
            candidate = archive_dir / f"{stem}_{k}{suffix}"
            if not candidate.exists():
                dest_path = candidate
                break
            k += 1

    shutil.move(str(src_path), str(dest_path))
    return dest_path


def ingest(store: ReaderStore, incoming: Path = INCOMING, archive: Path = ARCHIVE) -> int:
    """Add every incoming file to the store. Returns the number of documents added."""
    files = sorted(
        (p for p in incoming.iterdir() if p.suffix.lower() in (".txt", ".pdf")),
        key=lambda p: p.name.lower(),
    )

    added = 0
    for idx, path in enumerate(files, start=1):
        print(f"[{idx}/{len(files)}] {path.name}")
        if path.suffix.lower() == ".pdf":
            try:
                parsed = parse_pdf(path)
            except ExtractionError as e:
                print(f"  Skipped: {e}")
                continue
        else:
            parsed = parse_txt(path)

        doc = store.add_document(parsed.title, parsed.text, mode=DocumentMode.NORMAL)
        if doc is None:
            print("  Skipped: empty title or content")
            continue
        added += 1
        print(f"  Added '{doc.title}' ({len(doc.content)} chars)")

        if AUTO_ARCHIVE_INCOMING:
            archive_incoming_file(path, archive)

    return added


def main() -> None:
    if not INCOMING.exists():
        raise SystemExit(f"Missing folder: {INCOMING}")

    store = ReaderStore(JsonFileBlobStore(config.DATA_DIR))
    added = ingest(store)

    print(f"Updated {config.DATA_DIR / 'documents.json'} from {INCOMING}")
    print(f"Documents added: {added}")
    if AUTO_ARCHIVE_INCOMING:
        print(f"Processed files archived under: {ARCHIVE}")


if __name__ == "__main__":
    main()
