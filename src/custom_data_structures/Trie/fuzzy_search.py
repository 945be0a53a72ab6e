"""Edit-distance bounded search over a `TrieStore`.

The search walks the trie depth first and keeps one row of the
Levenshtein table per level. Every prefix shared by several dictionary
words is therefore scored once, and a branch is abandoned as soon as the
smallest value of its row exceeds the allowed distance: appending more
letters can never bring the distance back under that minimum.
"""

from typing import Optional

from src.custom_data_structures.Trie.Trie import TrieNode, TrieStore

DEFAULT_MAX_DISTANCE = 2


class InvalidMaxDistanceError(ValueError):
    """Raised when the maximum edit distance is not a non-negative integer."""


def validate_max_distance(max_distance: int) -> int:
    """Validate an edit-distance bound.

    Args:
        max_distance (int): The bound to validate.

    Raises:
        InvalidMaxDistanceError: If the bound is negative or not an int.

    Returns:
        int: The validated bound.

    """
    # bool is an int subclass but never a meaningful distance
    if isinstance(max_distance, bool) or not isinstance(max_distance, int):
        raise InvalidMaxDistanceError(
            f"Maximum edit distance must be an integer, got {max_distance!r}.",
        )
    if max_distance < 0:
        raise InvalidMaxDistanceError(
            f"Maximum edit distance must be non-negative, got {max_distance}.",
        )
    return max_distance


def edit_distance(source: str, target: str) -> int:
    """Compute the Levenshtein distance between two strings.

    Only insertions, deletions and substitutions are counted; swapping
    two adjacent characters costs two edits.

    Args:
        source (str): The first string.
        target (str): The second string.

    Returns:
        int: The minimum number of single-character edits.

    """
    previous_row = list(range(len(target) + 1))
    for row_index, source_char in enumerate(source, start=1):
        current_row = [row_index]
        for column, target_char in enumerate(target, start=1):
            current_row.append(
                min(
                    current_row[column - 1] + 1,
                    previous_row[column] + 1,
                    previous_row[column - 1] + (source_char != target_char),
                ),
            )
        previous_row = current_row
    return previous_row[-1]


class FuzzySearchEngine:
    """Find dictionary words within an edit distance of a query."""

    def __init__(
        self,
        store: TrieStore,
        max_distance: int = DEFAULT_MAX_DISTANCE,
    ) -> None:
        """Initialize the engine.

        Args:
            store (TrieStore): The populated dictionary trie.
            max_distance (int, optional): Default upper bound on the edit
                distance of accepted suggestions. Larger values widen
                recall and make the traversal more expensive.
                Defaults to 2.

        Raises:
            InvalidMaxDistanceError: If `max_distance` is invalid.

        """
        self.store = store
        self.max_distance = validate_max_distance(max_distance)

    def suggest(
        self,
        word: str,
        max_distance: Optional[int] = None,
    ) -> list[str]:
        """Return every dictionary word within `max_distance` of `word`.

        The query is expected to be lowercase letters already. Any other
        character is compared literally and, since it never labels a trie
        edge, always costs one edit. An empty query is valid as well.

        Args:
            word (str): The (possibly misspelled) query word.
            max_distance (int, optional): Overrides the engine's bound for
                this call.

        Raises:
            InvalidMaxDistanceError: If `max_distance` is invalid.

        Returns:
            list[str]: Distinct matching words in ascending letter order
            of the trie walk. Not sorted by distance. May be empty.

        """
        if max_distance is None:
            max_distance = self.max_distance
        else:
            max_distance = validate_max_distance(max_distance)

        suggestions: list[str] = []
        root = self.store.root
        # Row for the empty prefix: build the target by pure insertion
        first_row = list(range(len(word) + 1))

        if root.is_terminal and first_row[-1] <= max_distance:
            suggestions.append("")

        for letter in sorted(root.children):
            self._search_recursive(
                root.children[letter],
                letter,
                word,
                first_row,
                max_distance,
                suggestions,
            )
        return suggestions

    def _search_recursive(
        self,
        node: TrieNode,
        prefix: str,
        target: str,
        previous_row: list[int],
        max_distance: int,
        suggestions: list[str],
    ) -> None:
        """Score `prefix` against `target` and descend while it can match.

        Args:
            node (TrieNode): The node reached by `prefix`.
            prefix (str): The letters spelled from the root to `node`.
            target (str): The query word.
            previous_row (list[int]): The distance row of the parent
                prefix. It is only read, so siblings share it safely.
            max_distance (int): The accepted edit-distance bound.
            suggestions (list[str]): Accumulator for accepted words.

        """
        last_letter = prefix[-1]
        current_row = [len(prefix)]
        for column in range(1, len(target) + 1):
            insert_cost = current_row[column - 1] + 1
            delete_cost = previous_row[column] + 1
            replace_cost = previous_row[column - 1]
            if target[column - 1] != last_letter:
                replace_cost += 1
            current_row.append(min(insert_cost, delete_cost, replace_cost))

        if node.is_terminal and current_row[-1] <= max_distance:
            suggestions.append(prefix)

        # Prune: no extension of this prefix can beat the row minimum
        if min(current_row) > max_distance:
            return

        for letter in sorted(node.children):
            self._search_recursive(
                node.children[letter],
                prefix + letter,
                target,
                current_row,
                max_distance,
                suggestions,
            )
