"""
In-memory inverted index over archive file listings.

Structure:
    documents       [doc_name, ...]            internal ID = list position
    terms           {term: TermData}           postings + IDF per term
    doc_length      {internal_id: term_count}
    avg_doc_length  mean of doc_length values

Internal IDs are assigned by insertion order every time an index is built or
loaded. They are not stable across rebuilds; only the document name is.
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class TermData:
    """Postings for one term: {internal_id: term_frequency} plus its IDF weight"""

    postings: Dict[int, int] = field(default_factory=dict)
    idf: float = 0.0


@dataclass
class Index:
    """
    Ranked-retrieval index.

    Treat as immutable once built or loaded. The only supported way to change
    the served index is to build a new one and swap it in (see ServingState).
    """

    documents: List[str] = field(default_factory=list)
    terms: Dict[str, TermData] = field(default_factory=dict)
    doc_length: Dict[int, int] = field(default_factory=dict)
    avg_doc_length: float = 0.0

    @property
    def document_count(self) -> int:
        return len(self.documents)

    @property
    def term_count(self) -> int:
        return len(self.terms)

    def pair_count(self) -> int:
        """Number of (term, document) pairs across all postings"""
        return sum(len(td.postings) for td in self.terms.values())
