"""
IDF statistics pass.

Runs once, after every document has been ingested:

    idf(term) = ln( (N - nq + 0.5) / (nq + 0.5) + 1.0 )

Where:
    N  = total number of documents
    nq = number of documents containing the term

The +1.0 keeps IDF non-negative for nq <= N (even for terms present in every
document). Running this before ingestion completes gives wrong weights.
"""

import logging
import math

from .index import Index

logger = logging.getLogger(__name__)


def idf(total_documents: int, doc_frequency: int) -> float:
    """BM25 IDF with the +1 guard"""
    n = float(total_documents)
    nq = float(doc_frequency)
    return math.log((n - nq + 0.5) / (nq + 0.5) + 1.0)


def compute_idf(index: Index) -> None:
    """Compute and store IDF for every term of the index (in place)"""
    n = index.document_count
    for term_data in index.terms.values():
        term_data.idf = idf(n, len(term_data.postings))

    logger.debug(f"Computed IDF for {index.term_count} terms over {n} documents")
