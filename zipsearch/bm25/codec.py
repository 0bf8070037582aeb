"""
Persistence codec for the index (msgpack).

The blob is a single msgpack map with named fields, so the reader never
depends on field order and a foreign or outdated blob is detected instead
of being misread:

    {
        "format": "zipsearch-index",
        "version": 1,
        "documents": [name, ...],
        "terms": {term: {"postings": {doc_id: tf}, "idf": float}},
        "doc_length": {doc_id: length},
        "avg_doc_length": float
    }

Floats are packed as 64-bit doubles, so IDF and average length round-trip
bit-for-bit (any drift would change rankings).
"""

import logging
import math
import time
from pathlib import Path
from typing import Any, Dict, Union

import msgpack

from .errors import CodecError
from .index import Index, TermData

logger = logging.getLogger(__name__)

FORMAT_MARKER = "zipsearch-index"
FORMAT_VERSION = 1


def encode_index(index: Index) -> bytes:
    """Serialize the whole index to a msgpack blob"""
    payload = {
        "format": FORMAT_MARKER,
        "version": FORMAT_VERSION,
        "documents": index.documents,
        "terms": {
            term: {"postings": td.postings, "idf": float(td.idf)}
            for term, td in index.terms.items()
        },
        "doc_length": index.doc_length,
        "avg_doc_length": float(index.avg_doc_length),
    }
    return msgpack.packb(payload, use_bin_type=True)


def _field(payload: Dict[str, Any], name: str, expected: type) -> Any:
    if name not in payload:
        raise CodecError(f"Index blob is missing field '{name}'")
    value = payload[name]
    if not isinstance(value, expected) or isinstance(value, bool):
        raise CodecError(f"Index field '{name}' has type {type(value).__name__}, expected {expected.__name__}")
    return value


def _int_map(value: Any, what: str, minimum: int) -> Dict[int, int]:
    if not isinstance(value, dict):
        raise CodecError(f"{what} must be a map")
    for key, count in value.items():
        if type(key) is not int or type(count) is not int:
            raise CodecError(f"{what} must map integer IDs to integer counts")
        if count < minimum:
            raise CodecError(f"{what} has count {count} for ID {key} (minimum {minimum})")
    return value


def decode_index(blob: bytes) -> Index:
    """
    Deserialize a blob produced by encode_index.

    Raises:
        CodecError: Blob is not msgpack, not an index, of an unsupported
            version, or structurally inconsistent
    """
    try:
        payload = msgpack.unpackb(blob, raw=False, strict_map_key=False)
    except (ValueError, TypeError, msgpack.exceptions.UnpackException) as e:
        raise CodecError(f"Index blob is not valid msgpack: {e}") from e

    if not isinstance(payload, dict):
        raise CodecError("Index blob is not a field-tagged record")
    if payload.get("format") != FORMAT_MARKER:
        raise CodecError(f"Unrecognized index format marker: {payload.get('format')!r}")
    version = payload.get("version")
    if version != FORMAT_VERSION:
        raise CodecError(f"Unsupported index format version {version!r} (expected {FORMAT_VERSION})")

    documents = _field(payload, "documents", list)
    if not all(isinstance(name, str) for name in documents):
        raise CodecError("Document names must be strings")

    doc_length = _int_map(_field(payload, "doc_length", dict), "doc_length", minimum=0)
    for doc_id in doc_length:
        if not 0 <= doc_id < len(documents):
            raise CodecError(f"Document ID {doc_id} out of range ({len(documents)} documents)")

    avg_doc_length = _field(payload, "avg_doc_length", float)

    terms: Dict[str, TermData] = {}
    for term, entry in _field(payload, "terms", dict).items():
        if not isinstance(term, str) or not isinstance(entry, dict):
            raise CodecError("Terms must map strings to term records")
        postings = _int_map(_field(entry, "postings", dict), f"postings of {term!r}", minimum=1)
        for doc_id in postings:
            if doc_id not in doc_length:
                raise CodecError(f"Term {term!r} references unknown document ID {doc_id}")
        terms[term] = TermData(postings=postings, idf=_field(entry, "idf", float))

    # Scoring divides by the average length
    if terms and not (math.isfinite(avg_doc_length) and avg_doc_length > 0):
        raise CodecError(f"avg_doc_length must be positive and finite for a non-empty index, got {avg_doc_length}")

    return Index(
        documents=documents,
        terms=terms,
        doc_length=doc_length,
        avg_doc_length=avg_doc_length,
    )


def save_index(index: Index, path: Union[str, Path]) -> int:
    """
    Write the encoded index to disk.

    Returns:
        Number of bytes written

    Raises:
        OSError: File cannot be written
    """
    blob = encode_index(index)
    Path(path).write_bytes(blob)
    logger.info(f"Saved index to {path} ({len(blob) / (1024 * 1024):.1f} MB)")
    return len(blob)


def load_index(path: Union[str, Path]) -> Index:
    """
    Read and decode an index file.

    Raises:
        OSError: File cannot be read
        CodecError: File content is not a compatible index
    """
    start = time.perf_counter()
    index = decode_index(Path(path).read_bytes())
    logger.info(
        f"Loaded index from {path} in {time.perf_counter() - start:.2f}s: "
        f"{index.document_count} documents, {index.term_count} terms"
    )
    return index
