"""Incremental parser for OpenAI-style server-sent event streams.

Pure functions and a small stateful decoder, no I/O. The relay feeds it raw
bytes as they arrive from the upstream body and gets back complete records.

Record format::

    data: {"choices":[{"delta":{"content":"Hi"}}]}\\n\\n
    data: [DONE]\\n\\n
"""

import codecs
import json
from collections.abc import Iterator

RECORD_SEPARATOR = "\n\n"
DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class MalformedRecordError(Exception):
    """Raised when a data payload is not valid JSON."""

    pass


def split_records(buffer: str, text: str) -> tuple[list[str], str]:
    """Append text to the buffer and cut out complete records.

    Args:
        buffer: Incomplete record left over from the previous read.
        text: Newly decoded text.

    Returns:
        Complete records in arrival order, and the trailing incomplete
        record to carry into the next call.
    """
    combined = (buffer + text).replace("\r\n", "\n")
    parts = combined.split(RECORD_SEPARATOR)
    return parts[:-1], parts[-1]


def iter_data(record: str) -> Iterator[str]:
    """Yield the data payloads of one record, skipping the [DONE] sentinel."""
    for line in record.split("\n"):
        line = line.strip()
        if not line.startswith(DATA_PREFIX):
            continue
        payload = line[len(DATA_PREFIX) :].strip()
        if payload == DONE_SENTINEL:
            continue
        yield payload


def extract_delta(payload: str) -> str | None:
    """Extract the first choice's incremental text from a data payload.

    Args:
        payload: JSON text following the ``data:`` marker.

    Returns:
        The delta text, or None when the chunk carries no text
        (role announcements, finish reasons, usage reports).

    Raises:
        MalformedRecordError: If the payload is not valid JSON.
    """
    try:
        chunk = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedRecordError(f"Invalid JSON in stream record: {e}") from e

    if not isinstance(chunk, dict):
        return None
    choices = chunk.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class SSEDecoder:
    """Stateful wrapper around split_records for a byte stream.

    Decodes UTF-8 incrementally so characters split across reads survive.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text of the incomplete record currently buffered."""
        return self._buffer

    def feed(self, data: bytes) -> list[str]:
        """Consume bytes and return the records they complete."""
        records, self._buffer = split_records(self._buffer, self._decoder.decode(data))
        return records

    def flush(self) -> list[str]:
        """Return the last record when the stream ended without a blank line."""
        records, rest = split_records(self._buffer, self._decoder.decode(b"", final=True))
        self._buffer = ""
        if rest.strip():
            records.append(rest)
        return records
