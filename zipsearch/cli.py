"""
Command line entry point.

Usage:
    zipsearch --save <records.jsonl> <index.msgpack>    Build and save an index
    zipsearch <index.msgpack>                           Serve a saved index

Build input is JSON lines: {"name": "<archive md5>", "files": ["a/b", ...]}
"""

import logging
import sys
import time

from . import config
from .main import app, install_serving_state
from .bm25 import BM25Scorer, SearchIndexError, build_index_from_file, load_index, save_index
from .serving import ServingState

logger = logging.getLogger(__name__)

# Query run after a build to sanity-check the fresh index
SMOKE_QUERY = ["lombok", "AUTHORS", "README.md"]

USAGE = (
    "Usage:\n"
    "  zipsearch --save <records.jsonl> <index.msgpack>\n"
    "  zipsearch <index.msgpack>"
)


def save(records_path: str, index_path: str) -> None:
    """
    Build an index from JSON-lines records and write it to disk.

    Raises:
        InputParseError: Malformed record (build aborted, nothing written)
        EmptyCollectionError: No records
        OSError: Input unreadable or output unwritable
    """
    start = time.perf_counter()
    index = build_index_from_file(records_path)
    logger.info(f"Loaded data for {index.term_count} terms")
    logger.info(f"Elapsed time: {time.perf_counter() - start:.2f}s")
    logger.info(f"There are {index.pair_count()} term-docid pairs")

    start = time.perf_counter()
    matches = BM25Scorer().rank(index, SMOKE_QUERY)
    logger.info(f"Search found {len(matches)} matches in {time.perf_counter() - start:.2f}s")

    save_index(index, index_path)


def serve(index_path: str) -> None:
    """Load the index (fail fast) and serve it until terminated"""
    import uvicorn

    start = time.perf_counter()
    index = load_index(index_path)
    logger.info(f"Load from msgpack in {time.perf_counter() - start:.2f}s")

    install_serving_state(ServingState(index, source=index_path))
    uvicorn.run(app, host=config.HOST, port=config.PORT)


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv

    if not args or args[0] in ("-h", "--help"):
        print(USAGE)
        return 0 if args else 2

    try:
        if args[0] == "--save":
            if len(args) != 3:
                print(USAGE)
                return 2
            save(args[1], args[2])
        else:
            if len(args) != 1:
                print(USAGE)
                return 2
            serve(args[0])
    except (SearchIndexError, OSError) as e:
        logger.error(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
