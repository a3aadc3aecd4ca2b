"""Text extraction for uploaded files, plus the "processing" indicator.

``extract_text`` asks the OpenAI Responses API to return the text of a file
verbatim. ``ExtractionTracker`` runs extractions as background tasks; only the
most recent request may update the processing state.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import Awaitable, Callable, Optional

from typereader import config
from typereader.models import ExtractedDraft, ProcessingState

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = {"application/pdf"}

EXTRACTION_PROMPT = (
    "Extract all of the text in this file exactly as written. "
    "Return only the text, with no commentary. "
    "Keep every accented and non-Latin character. Keep paragraph breaks."
)

PROCESSING_MESSAGE = "Reading the document..."
FAILURE_MESSAGE = "The file could not be read. Please make sure it is a valid PDF and try again."


class ExtractionError(Exception):
    pass


Extractor = Callable[[bytes, str], Awaitable[str]]


def _response_text(data: dict) -> str:
    """Pull the output text out of a Responses API payload."""
    for item in data.get("output", []) or []:
        if isinstance(item, dict) and item.get("type") == "message":
            parts = item.get("content", []) or []
            texts = [p.get("text", "") for p in parts if isinstance(p, dict) and p.get("type") == "output_text"]
            out = "".join(texts).strip()
            if out:
                return out

    # Fallback: top-level convenience field if present
    return (data.get("output_text") or "").strip()


def openai_extract(data: bytes, mime_type: str, filename: str = "upload.pdf", timeout_s: Optional[int] = None) -> str:
    """Blocking call to the Responses API. Returns the extracted text."""
    api_key = config.OPENAI_API_KEY
    if not api_key:
        raise ExtractionError("OPENAI_API_KEY is not set.")

    b64 = base64.b64encode(data).decode("ascii")
    payload = {
        "model": config.OPENAI_MODEL,
        "input": [
            {
                "role": "user",
                "content": [
                    {
                        "type": "input_file",
                        "filename": filename,
                        "file_data": f"data:{mime_type};base64,{b64}",
                    },
                    {"type": "input_text", "text": EXTRACTION_PROMPT},
                ],
            }
        ],
    }

    req = urllib.request.Request(
        config.OPENAI_URL,
        data=json.dumps(payload).encode("utf-8"),
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        },
        method="POST",
    )

    try:
        with urllib.request.urlopen(req, timeout=timeout_s or config.EXTRACTION_TIMEOUT_S) as resp:
            raw = resp.read().decode("utf-8")
    except urllib.error.HTTPError as e:
        raise ExtractionError(f"OpenAI request failed with HTTP {e.code}") from e
    except (urllib.error.URLError, OSError) as e:
        raise ExtractionError(f"OpenAI request failed: {e}") from e

    try:
        text = _response_text(json.loads(raw))
    except (ValueError, AttributeError) as e:
        raise ExtractionError("Could not parse the extraction response") from e

    if not text:
        raise ExtractionError("No text could be extracted.")
    return text


async def extract_text(data: bytes, mime_type: str) -> str:
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise ExtractionError(f"Unsupported file type: {mime_type}")
    if not data:
        raise ExtractionError("Empty file.")
    return await asyncio.to_thread(openai_extract, data, mime_type)


def title_from_filename(filename: str) -> str:
    return Path(filename).stem.strip() if filename else ""


class ExtractionTracker:
    def __init__(self, extractor: Extractor = extract_text):
        self.extractor = extractor
        self.state = ProcessingState()
        self._latest = 0
        self._tasks: set[asyncio.Task] = set()

    def start(self, data: bytes, mime_type: str, filename: str = "") -> int:
        """Schedule an extraction on the running loop. Returns its request number.

        A newer request supersedes an older one: the older one's result is
        dropped when it finishes.
        """
        self._latest += 1
        request = self._latest
        self.state = ProcessingState(is_processing=True, message=PROCESSING_MESSAGE)

        task = asyncio.get_running_loop().create_task(self._run(request, data, mime_type, filename))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return request

    async def _run(self, request: int, data: bytes, mime_type: str, filename: str) -> None:
        try:
            text = await self.extractor(data, mime_type)
            if not text or not text.strip():
                raise ExtractionError("No text could be extracted.")
        except ExtractionError as e:
            logger.error("Extraction %d failed: %s", request, e)
            self._fail(request)
            return
        except Exception:
            logger.exception("Extraction %d crashed", request)
            self._fail(request)
            return

        if request != self._latest:
            logger.info("Extraction %d finished after being superseded; dropping result", request)
            return
        draft = ExtractedDraft(title=title_from_filename(filename), content=text)
        self.state = ProcessingState(draft=draft)
        logger.info("Extraction %d finished (%d chars)", request, len(text))

    def _fail(self, request: int) -> None:
        if request == self._latest:
            self.state = ProcessingState(error=FAILURE_MESSAGE)

    async def wait(self) -> None:
        """Wait for all pending extractions (used by scripts and tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
