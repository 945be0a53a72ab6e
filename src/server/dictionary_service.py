"""Answer dictionary lookups: exact match first, suggestions on a miss."""

import enum

from src.custom_data_structures.Trie.fuzzy_search import (
    DEFAULT_MAX_DISTANCE,
    FuzzySearchEngine,
)
from src.custom_data_structures.Trie.Trie import TrieStore


class LookupStatus(enum.Enum):
    """Outcome of a dictionary lookup."""

    FOUND = "found"
    NOT_FOUND_WITH_SUGGESTIONS = "not_found_with_suggestions"
    NOT_FOUND_NO_SUGGESTIONS = "not_found_no_suggestions"


class LookupResult:
    """The structured answer to a single lookup."""

    def __init__(
        self,
        word: str,
        status: LookupStatus,
        suggestions: list[str],
    ) -> None:
        """Initialize the lookup result.

        Args:
            word (str): The word that was looked up.
            status (LookupStatus): Whether it was found, and if not,
            whether any suggestions came up.
            suggestions (list[str]): Words within the edit-distance
            bound, empty when the word itself was found.

        """
        self.word = word
        self.status = status
        self.suggestions = suggestions

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LookupResult):
            return NotImplemented
        return (
            self.word == other.word
            and self.status is other.status
            and self.suggestions == other.suggestions
        )

    def __repr__(self) -> str:
        return (
            f"LookupResult(word={self.word!r}, status={self.status.name}, "
            f"suggestions={self.suggestions!r})"
        )


class DictionaryService:
    """Look words up in a read-only dictionary trie."""

    def __init__(
        self,
        store: TrieStore,
        max_distance: int = DEFAULT_MAX_DISTANCE,
    ) -> None:
        """Initialize the service.

        Args:
            store (TrieStore): The fully built dictionary.
            max_distance (int, optional): Edit-distance bound used for
            suggestions. Defaults to 2.

        Raises:
            InvalidMaxDistanceError: If `max_distance` is invalid.

        """
        self.store = store
        self.engine = FuzzySearchEngine(store, max_distance)

    @property
    def max_distance(self) -> int:
        return self.engine.max_distance

    def lookup(self, word: str) -> LookupResult:
        """Look a word up, falling back to suggestions when it is missing.

        Args:
            word (str): A trimmed, lowercased word.

        Returns:
            LookupResult: The classified outcome.

        """
        if self.store.contains(word):
            return LookupResult(word, LookupStatus.FOUND, [])

        suggestions = self.engine.suggest(word)
        if suggestions:
            return LookupResult(
                word,
                LookupStatus.NOT_FOUND_WITH_SUGGESTIONS,
                suggestions,
            )
        return LookupResult(word, LookupStatus.NOT_FOUND_NO_SUGGESTIONS, [])


def render_lookup_result(result: LookupResult) -> str:
    """Format a lookup result as a single human readable line.

    Args:
        result (LookupResult): The result to format.

    Returns:
        str: The formatted line, without a trailing newline.

    """
    if result.status is LookupStatus.FOUND:
        return f"'{result.word}' found in dictionary."
    if result.status is LookupStatus.NOT_FOUND_WITH_SUGGESTIONS:
        return (
            f"'{result.word}' not found. Did you mean: "
            f"{', '.join(result.suggestions)}?"
        )
    return f"'{result.word}' not found and no suggestions available."
