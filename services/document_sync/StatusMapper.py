"""Translation of remote RAG payloads into the local canonical representation.

Every extractor is total: it takes a raw payload and a key and returns either a
well-typed value or None ("field not present"). Callers only assign values that
are not None, so malformed upstream fields never overwrite what the local store
already knows.
"""

from datetime import datetime
from email.utils import parsedate_to_datetime
import math
from typing import Any, Mapping

import pytz

from shared.models.document import Chunk, Document, DocumentStatus

# strptime fallbacks for strings that are neither ISO 8601 nor RFC 1123
_DATE_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y",
)


##########################################
############ SCALAR VALUES ###############
##########################################

def parse_number(value: Any) -> float | None:
    """Returns value as a float if it is a finite number or a numeric string, else None.

    Booleans are not numbers here, even though Python treats them as ints.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def extract_string(payload: Mapping, key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) else None


def extract_int(payload: Mapping, key: str) -> int | None:
    value = payload.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    number = parse_number(value)
    return int(number) if number is not None else None


def extract_float(payload: Mapping, key: str) -> float | None:
    return parse_number(payload.get(key))


##########################################
############### TIMESTAMPS ###############
##########################################

def _parse_date_string(text: str) -> datetime | None:
    text = text.strip()
    if not text:
        return None

    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        pass

    if parsed is None:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            pass

    if parsed is None:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed


def convert_timestamp(value: Any) -> int:
    """Converts a remote timestamp into epoch seconds.

    Numbers and numeric strings are millisecond epochs and are divided by 1000
    (truncated). Other strings are parsed as dates (ISO 8601, "Y-m-d H:i:s",
    RFC 1123); naive dates are taken as UTC. Anything unparseable yields 0, which
    callers must treat as "unknown".

    Args:
        value (Any): The raw timestamp field.

    Returns:
        int: Epoch seconds, or 0.
    """
    number = parse_number(value)
    if number is not None:
        return int(number / 1000)
    if isinstance(value, str):
        parsed = _parse_date_string(value)
        if parsed is None:
            return 0
        try:
            return int(parsed.timestamp())
        except (OverflowError, OSError, ValueError):
            return 0
    return 0


def extract_timestamp(payload: Mapping, key: str) -> datetime | None:
    """Returns the field as an aware UTC datetime, or None when the field is absent.

    A present but unparseable value maps to the epoch (1970-01-01 UTC).
    """
    if payload.get(key) is None:
        return None
    seconds = convert_timestamp(payload.get(key))
    try:
        return datetime.fromtimestamp(seconds, tz=pytz.utc)
    except (OverflowError, OSError, ValueError):
        return datetime.fromtimestamp(0, tz=pytz.utc)


##########################################
################# ARRAYS #################
##########################################

def extract_string_list(payload: Mapping, key: str) -> list[str] | None:
    """Keeps the string elements of a list field. Absent or non-list -> None, all invalid -> []."""
    value = payload.get(key)
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def extract_float_list(payload: Mapping, key: str) -> list[float] | None:
    """Keeps the numeric elements of a list field as floats. Absent or non-list -> None."""
    value = payload.get(key)
    if not isinstance(value, list):
        return None
    numbers = (parse_number(item) for item in value)
    return [number for number in numbers if number is not None]


def extract_list(payload: Mapping, key: str) -> list[list] | None:
    """Keeps the list elements of a list field (e.g. positions). Absent or non-list -> None."""
    value = payload.get(key)
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, list)]


def extract_mapping(payload: Mapping, key: str) -> dict | None:
    """Keeps the string-keyed entries of a mapping field. Absent or non-mapping -> None."""
    value = payload.get(key)
    if not isinstance(value, dict):
        return None
    return {k: v for k, v in value.items() if isinstance(k, str)}


##########################################
########### STATUS & PROGRESS ############
##########################################

def normalize_progress(raw: float) -> float:
    """Converts a remote progress value into a percentage.

    The service reports a fraction in [0, 1]; values above 1 are taken as
    already being a percentage.
    """
    return raw * 100 if raw <= 1.0 else raw


def map_run_status(value: Any) -> DocumentStatus | None:
    """Maps a remote run state (or legacy numeric code) onto a local status.

    Returns:
        DocumentStatus | None: The local status, or None for unknown values.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int) or (isinstance(value, str) and value.strip().isdigit()):
        match int(value):
            case 0:
                return DocumentStatus.PENDING
            case 1:
                return DocumentStatus.UPLOADED
            case 2:
                return DocumentStatus.PROCESSING
            case 3:
                return DocumentStatus.COMPLETED
            case 4:
                return DocumentStatus.SYNC_FAILED
            case _:
                return None
    if not isinstance(value, str):
        return None

    match value.strip().upper():
        case "UNSTART":
            return DocumentStatus.UPLOADED
        case "RUNNING" | "PARSING":
            return DocumentStatus.PROCESSING
        case "CANCEL":
            return DocumentStatus.PENDING
        case "DONE" | "PARSED":
            return DocumentStatus.COMPLETED
        case "FAIL" | "PARSE_FAILED":
            return DocumentStatus.SYNC_FAILED
        case _:
            try:
                return DocumentStatus(value.strip().lower())
            except ValueError:
                return None


##########################################
################ MAPPERS #################
##########################################

def apply_parse_status(document: Document, status: Mapping) -> None:
    """Copies progress, progress message and chunk count of a parse status onto the document.

    The document status itself is left untouched.
    """
    progress = extract_float(status, "progress")
    if progress is not None:
        document.progress = normalize_progress(progress)

    progress_msg = extract_string(status, "progress_msg")
    if progress_msg is not None:
        document.progress_msg = progress_msg

    chunk_count = extract_int(status, "chunk_num")
    if chunk_count is not None:
        document.chunk_count = chunk_count


def apply_document_payload(document: Document, payload: Mapping) -> None:
    """Maps one entry of a remote document listing onto a local document."""
    remote_id = extract_string(payload, "id")
    if remote_id:
        document.remote_id = remote_id

    name = extract_string(payload, "name")
    if name is not None:
        document.name = name
    filename = extract_string(payload, "location") or extract_string(payload, "filename")
    if filename is not None:
        document.filename = filename
    for field in ("type", "language"):
        value = extract_string(payload, field)
        if value is not None:
            setattr(document, field, value)

    size = extract_int(payload, "size")
    if size is not None:
        document.size = size
    chunk_count = extract_int(payload, "chunk_count")
    if chunk_count is None:
        chunk_count = extract_int(payload, "chunk_num")
    if chunk_count is not None:
        document.chunk_count = chunk_count

    status = map_run_status(payload.get("run"))
    if status is not None:
        document.status = status
    progress = extract_float(payload, "progress")
    if progress is not None:
        document.progress = normalize_progress(progress)
    progress_msg = extract_string(payload, "progress_msg")
    if progress_msg is not None:
        document.progress_msg = progress_msg

    create_time = extract_timestamp(payload, "create_time")
    if create_time is not None:
        document.remote_create_time = create_time
    update_time = extract_timestamp(payload, "update_time")
    if update_time is not None:
        document.remote_update_time = update_time


def apply_chunk_payload(chunk: Chunk, payload: Mapping) -> None:
    """Maps one remote chunk entry onto a local chunk."""
    content = extract_string(payload, "content")
    if content is not None:
        chunk.content = content
    content_with_weight = extract_string(payload, "content_with_weight")
    if content_with_weight is not None:
        chunk.content_with_weight = content_with_weight

    for field in ("page_number", "position", "start_pos", "end_pos", "token_count", "size"):
        value = extract_int(payload, field)
        if value is not None:
            setattr(chunk, field, value)

    similarity = extract_float(payload, "similarity_score")
    if similarity is None:
        similarity = extract_float(payload, "similarity")
    if similarity is not None:
        chunk.similarity_score = similarity

    positions = extract_list(payload, "positions")
    if positions is not None:
        chunk.positions = positions
    vector = extract_float_list(payload, "embedding_vector")
    if vector is not None:
        chunk.embedding_vector = vector
    keywords = extract_string_list(payload, "keywords")
    if keywords is None:
        keywords = extract_string_list(payload, "important_keywords")
    if keywords is not None:
        chunk.keywords = keywords
    metadata = extract_mapping(payload, "metadata")
    if metadata is not None:
        chunk.metadata = metadata

    create_time = extract_timestamp(payload, "create_time")
    if create_time is not None:
        chunk.remote_create_time = create_time
    update_time = extract_timestamp(payload, "update_time")
    if update_time is not None:
        chunk.remote_update_time = update_time


def build_chunk(document_id: int, payload: Any, now: datetime | None = None) -> Chunk | None:
    """Builds a local chunk from a remote chunk entry.

    Returns:
        Chunk | None: The chunk, or None if the entry has no usable remote id.
    """
    if not isinstance(payload, Mapping):
        return None
    remote_id = extract_string(payload, "id")
    if not remote_id:
        return None
    chunk = Chunk(remote_id=remote_id, document_id=document_id, last_sync_time=now)
    apply_chunk_payload(chunk, payload)
    return chunk
