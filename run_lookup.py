"""Look words up in a word list from the command line.

Example:
    python run_lookup.py --dictionary words.txt misspeled david

"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from src.custom_data_structures.Trie.fuzzy_search import (
    DEFAULT_MAX_DISTANCE,
    InvalidMaxDistanceError,
)
from src.server.dictionary_service import (
    DictionaryService,
    render_lookup_result,
)
from src.server.logger import LOG_FORMAT
from src.server.word_loader import (
    DictionaryLoadError,
    load_dictionary,
    normalize_word,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check words against a dictionary and suggest "
        "corrections for misspellings.",
    )
    parser.add_argument(
        "--dictionary",
        type=Path,
        required=True,
        help="Word list to load, one word per line.",
    )
    parser.add_argument(
        "--max-distance",
        type=int,
        default=DEFAULT_MAX_DISTANCE,
        help="Largest edit distance for suggestions (default: 2).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log loading details to stderr.",
    )
    parser.add_argument("words", nargs="+", help="Words to look up.")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run the lookups and print one line per word.

    Args:
        argv (list[str], optional): Command line arguments without the
            program name. Defaults to `sys.argv[1:]`.

    Returns:
        int: The process exit code.

    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        store = load_dictionary(args.dictionary)
        service = DictionaryService(store, args.max_distance)
    except (FileNotFoundError, DictionaryLoadError) as e:
        print(f"Could not load dictionary: {e}", file=sys.stderr)
        return 1
    except InvalidMaxDistanceError as e:
        print(f"Invalid --max-distance: {e}", file=sys.stderr)
        return 2

    for word in args.words:
        print(render_lookup_result(service.lookup(normalize_word(word))))
    return 0


if __name__ == "__main__":
    sys.exit(main())
