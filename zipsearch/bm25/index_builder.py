"""
BM25 index builder - aggregates term frequencies from archive listings.

Input is JSON lines, one archive per line:
    {"name": "<md5 of the archive>", "files": ["path/in/archive", ...]}

Any malformed line aborts the build. There is no skip-and-continue mode:
an index silently missing documents is worse than no index.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import EmptyCollectionError, InputParseError
from .index import Index, TermData
from .statistics import compute_idf
from .tokenizer import tokenize_items

logger = logging.getLogger(__name__)

# Log build progress every N records
PROGRESS_EVERY = 100_000

Record = Tuple[str, Sequence[str]]


class ArchiveRecord(BaseModel):
    """One line of build input"""

    model_config = ConfigDict(strict=True)

    name: str = Field(..., description="Document identifier (e.g. archive MD5)")
    files: List[str] = Field(..., description="File paths contained in the archive")


def parse_record(line: str, line_no: int) -> ArchiveRecord:
    """
    Validate one JSON line against the record schema.

    Args:
        line: Raw line (JSON object)
        line_no: 1-based line number, reported on failure

    Raises:
        InputParseError: Invalid JSON or wrong field types
    """
    try:
        return ArchiveRecord.model_validate_json(line)
    except ValidationError as e:
        errors = e.errors()
        reason = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}"
            for err in errors
        )
        raise InputParseError(line_no, reason) from e


def read_records(path: Union[str, Path]) -> Iterator[Record]:
    """
    Stream (name, files) records from a JSON-lines file.

    Raises:
        OSError: File cannot be opened or read
        InputParseError: A line is malformed or not valid UTF-8 (raised when
            that line is reached)
    """
    with open(path, "rb") as f:
        for line_no, raw_line in enumerate(f, start=1):
            try:
                line = raw_line.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InputParseError(line_no, f"invalid UTF-8: {e}") from e
            record = parse_record(line.rstrip("\n"), line_no)
            yield record.name, record.files


def build_index(records: Iterable[Record]) -> Index:
    """
    Build a complete index (postings, lengths, IDF) from archive records.

    Internal document IDs follow ingestion order (0-based). The average
    document length is only computed once the stream is exhausted, then the
    IDF statistics pass runs over the final document count.

    Args:
        records: (document_name, raw_items) pairs

    Returns:
        Finished Index

    Raises:
        EmptyCollectionError: No records
        InputParseError: Propagated from a lazy record source

    Example:
        >>> index = build_index([("doc_a", ["a/b", "c"]), ("doc_b", ["a/b"])])
        >>> index.avg_doc_length
        2.5
    """
    index = Index()
    total_length = 0

    for doc_name, items in records:
        doc_id = len(index.documents)
        index.documents.append(doc_name)

        terms = tokenize_items(items)
        for term in terms:
            term_data = index.terms.get(term)
            if term_data is None:
                term_data = TermData()
                index.terms[term] = term_data
            term_data.postings[doc_id] = term_data.postings.get(doc_id, 0) + 1

        index.doc_length[doc_id] = len(terms)
        total_length += len(terms)

        if (doc_id + 1) % PROGRESS_EVERY == 0:
            logger.info(f"Indexed {doc_id + 1} documents, {index.term_count} unique terms so far")

    if not index.documents:
        raise EmptyCollectionError()

    index.avg_doc_length = total_length / index.document_count
    compute_idf(index)

    logger.info(
        f"Built index: {index.document_count} documents, {index.term_count} unique terms, "
        f"avg length {index.avg_doc_length:.2f}"
    )
    return index


def build_index_from_file(path: Union[str, Path]) -> Index:
    """Build an index from a JSON-lines file (see read_records)"""
    logger.info(f"Building index from {path}")
    return build_index(read_records(path))
