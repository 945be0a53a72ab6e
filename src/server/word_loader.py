"""Read a word list from disk into a dictionary trie."""

import logging
from collections.abc import Iterator
from pathlib import Path

from src.custom_data_structures.Trie.Trie import (
    TrieStore,
    is_alphabet_letter,
)


class DictionaryLoadError(Exception):
    """Raised when the word list exists but could not be read."""


def normalize_word(raw: str) -> str:
    """Trim surrounding whitespace and lowercase a word.

    Args:
        raw (str): The word as read from a file or a client.

    Returns:
        str: The normalized word.

    """
    return raw.strip().lower()


def iter_words(data_path: Path) -> Iterator[str]:
    """Yield the normalized, non-empty lines of a word list.

    Args:
        data_path (Path): The path of the word list, one word per line.

    Raises:
        FileNotFoundError: If the file specified by `data_path` does not exist.
        DictionaryLoadError: If the file could not be read or decoded.

    Yields:
        str: One normalized word per non-blank line.

    """
    try:
        with data_path.open("r", encoding="utf-8") as file:
            for line in file:
                word = normalize_word(line)
                if word:
                    yield word

    except FileNotFoundError as e:
        raise FileNotFoundError(f"File not found: {data_path}") from e

    except (OSError, UnicodeDecodeError) as e:
        raise DictionaryLoadError(
            f"Could not read dictionary {data_path}: {e!s}",
        ) from e


def load_dictionary(data_path: Path) -> TrieStore:
    """Build a dictionary trie from a word list.

    Non-letter characters inside a word are dropped by the trie, so
    "don't" is stored as "dont". Load failures propagate to the caller;
    an unreadable file never results in an empty dictionary.

    Args:
        data_path (Path): The path of the word list.

    Raises:
        FileNotFoundError: If the file specified by `data_path` does not exist.
        DictionaryLoadError: If the file could not be read or decoded.

    Returns:
        TrieStore: The populated trie.

    """
    store = TrieStore()
    lines = 0
    for word in iter_words(data_path):
        lines += 1
        # A line without letters would mark the empty word as present
        if not any(is_alphabet_letter(char) for char in word):
            logging.debug("Skipping line without letters: %r", word)
            continue
        store.insert(word)

    logging.info(
        "Loaded %d distinct words from %d lines of '%s'",
        len(store),
        lines,
        data_path,
    )
    if store.is_empty():
        logging.warning("Dictionary '%s' contains no words", data_path)
    return store
