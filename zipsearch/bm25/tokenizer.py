"""
Tokenizer for archive file listings.

Terms are the path components of each file name, split on '/':
    "src/main/App.java" → ["src", "main", "App.java"]

No lowercasing, stemming or stopword removal. Empty components produced by
leading, trailing or repeated delimiters are kept as terms, so a directory
entry ("docs/") and a file ("docs") tokenize differently:
    "docs/"  → ["docs", ""]
    "a//b"   → ["a", "", "b"]
"""

from typing import Iterable, List

PATH_DELIMITER = "/"


def split_item(item: str) -> List[str]:
    """
    Split one raw item (file path) into terms.

    Examples:
        >>> split_item("a/b")
        ['a', 'b']
        >>> split_item("/a/")
        ['', 'a', '']
        >>> split_item("")
        ['']
    """
    return item.split(PATH_DELIMITER)


def tokenize_items(items: Iterable[str]) -> List[str]:
    """
    Tokenize a document's raw items into its term sequence.

    Terms of every item are concatenated in input order. The length of the
    result is the document length used for BM25 normalization.

    Example:
        >>> tokenize_items(["a/b", "c"])
        ['a', 'b', 'c']
    """
    terms: List[str] = []
    for item in items:
        terms.extend(split_item(item))
    return terms


def query_terms_from_entries(entry_names: Iterable[str]) -> List[str]:
    """
    Derive query terms from the entry names of an uploaded archive.

    Every entry name is followed by the delimiter, the result is treated as a
    single raw item and split with the same rule used at index time.

    Example:
        >>> query_terms_from_entries(["lib/", "lib/a.jar"])
        ['lib', '', 'lib', 'a.jar', '']
    """
    joined = "".join(f"{name}{PATH_DELIMITER}" for name in entry_names)
    return split_item(joined)
