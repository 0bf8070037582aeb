"""
BM25 ranked retrieval over archive file listings.

Components:
- tokenizer: Path-delimiter term extraction
- index_builder: Postings and document lengths from JSON-lines records
- statistics: Collection-wide IDF pass
- codec: msgpack persistence of the whole index
- scorer: BM25 ranking with threshold/limit selection

An index is built once (offline), saved, and from then on only loaded.
It is never edited in place.
"""

from .tokenizer import tokenize_items, query_terms_from_entries
from .index import Index, TermData
from .index_builder import ArchiveRecord, build_index, build_index_from_file
from .statistics import compute_idf
from .codec import encode_index, decode_index, save_index, load_index
from .scorer import BM25Scorer, SearchOutcome, select_matches
from .errors import SearchIndexError, InputParseError, CodecError, EmptyCollectionError

__all__ = [
    "tokenize_items",
    "query_terms_from_entries",
    "Index",
    "TermData",
    "ArchiveRecord",
    "build_index",
    "build_index_from_file",
    "compute_idf",
    "encode_index",
    "decode_index",
    "save_index",
    "load_index",
    "BM25Scorer",
    "SearchOutcome",
    "select_matches",
    "SearchIndexError",
    "InputParseError",
    "CodecError",
    "EmptyCollectionError",
]
