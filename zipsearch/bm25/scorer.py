"""
BM25 scorer over the in-memory index.

Formula (per query term occurrence t, per document d in t's postings):
    score(d) += idf(t) × (f × (k1 + 1)) / (f + k1 × (1 - b + b × len(d)/avgdl))

Where:
    f = frequency of t in d
    k1 = term frequency saturation parameter (1.6)
    b = length normalization parameter (0.75)
    avgdl = average document length of the collection

Repeated query terms are scored once per occurrence. Documents that match
no query term are left out of the result rather than scored as zero.
"""

import math
import time
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .index import Index

K1 = 1.6
B = 0.75

ScoredDocument = Tuple[str, float]


def _descending_total_order(item: ScoredDocument) -> Tuple[int, float]:
    # NaN sorts above +inf (IEEE 754 total order) instead of breaking the sort
    score = item[1]
    if math.isnan(score):
        return (1, 0.0)
    return (0, score)


@dataclass
class SearchOutcome:
    """Ranked, filtered and limited result of one query"""

    matches: List[ScoredDocument]
    total: int
    time_ms: int


class BM25Scorer:
    """
    BM25 with collection-wide IDF.

    Stateless apart from the parameters; safe to share between threads.
    """

    def __init__(self, k1: float = K1, b: float = B):
        """
        Initialize BM25 scorer.

        Args:
            k1: Term frequency saturation parameter
            b: Length normalization parameter
        """
        self.k1 = k1
        self.b = b

    def rank(self, index: Index, query_terms: Iterable[str]) -> List[ScoredDocument]:
        """
        Score every document touched by the query and sort by score.

        Args:
            index: Index to search (read only)
            query_terms: Query terms, repeats counted

        Returns:
            [(document_name, score), ...] sorted by score descending

        Example:
            >>> index = build_index([("doc_a", ["a/b", "c"]), ("doc_b", ["a/b"])])
            >>> BM25Scorer().rank(index, ["a"])
            [('doc_b', 0.20086...), ('doc_a', 0.16691...)]
        """
        scores: Dict[int, float] = {}
        k1 = self.k1
        b = self.b

        for term in query_terms:
            term_data = index.terms.get(term)
            if term_data is None:
                continue

            for doc_id, tf in term_data.postings.items():
                norm = 1 - b + b * index.doc_length[doc_id] / index.avg_doc_length
                term_score = term_data.idf * (tf * (k1 + 1)) / (tf + k1 * norm)
                scores[doc_id] = scores.get(doc_id, 0.0) + term_score

        ranked = [(index.documents[doc_id], score) for doc_id, score in scores.items()]
        ranked.sort(key=_descending_total_order, reverse=True)
        return ranked

    def search(
        self,
        index: Index,
        query_terms: Iterable[str],
        min_score: Optional[float] = None,
        max_length: Optional[int] = None,
    ) -> SearchOutcome:
        """Rank, then apply threshold and limit (see select_matches)"""
        start = time.perf_counter()
        matches = select_matches(self.rank(index, query_terms), min_score, max_length)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        return SearchOutcome(matches=matches, total=len(matches), time_ms=elapsed_ms)


def select_matches(
    ranked: List[ScoredDocument],
    min_score: Optional[float] = None,
    max_length: Optional[int] = None,
) -> List[ScoredDocument]:
    """
    Filter ranked results by score threshold, then limit their number.

    Args:
        ranked: Output of BM25Scorer.rank (best first)
        min_score: Keep only scores strictly greater than this
            Default: 0.0 (NaN is treated as unset)
        max_length: Maximum number of results
            Default: unbounded

    Returns:
        Best-scoring results that passed the threshold
    """
    threshold = 0.0 if min_score is None or math.isnan(min_score) else min_score
    passed = [(doc, score) for doc, score in ranked if score > threshold]
    if max_length is not None:
        passed = passed[:max_length]
    return passed
