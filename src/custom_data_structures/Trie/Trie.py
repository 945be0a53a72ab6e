"""This module represents the implementation of a Trie structure that's
used for checking whether a word belongs to the dictionary.

Only the lowercase letters `a`-`z` are stored. Callers are expected to
trim and lowercase words before handing them over; any other character
is ignored on insertion and never matches on lookup.
"""

ALPHABET = "abcdefghijklmnopqrstuvwxyz"


def is_alphabet_letter(char: str) -> bool:
    """Check whether a character can label an edge of the trie.

    Args:
        char (str): A single character.

    Returns:
        bool: True for the lowercase ASCII letters `a` to `z`.

    """
    return "a" <= char <= "z"


class TrieNode:
    """Represent a node in the trie structure."""

    __slots__ = ("children", "is_terminal")

    def __init__(self) -> None:
        """Initialize a new Trie node.

        Attributes:
            children (dict): A dictionary mapping a lowercase letter to
            the child TrieNode it owns. Holds at most 26 entries.
            is_terminal (bool): Indicates whether the path from the root
            to this node spells a complete dictionary word.

        """
        self.children: dict[str, TrieNode] = {}
        self.is_terminal = False


class TrieStore:
    """Represents the dictionary trie.

    The store is filled once through `insert` and treated as read-only
    afterwards, so it can be handed to readers without locking.
    """

    def __init__(self) -> None:
        """Initialize the root node of the Trie."""
        self.root = TrieNode()
        self._size = 0

    def insert(self, word: str) -> None:
        """Insert a new word into the Trie structure.

        Characters outside `a`-`z` are skipped: they neither advance the
        position in the trie nor appear in the stored path. Inserting a
        word that is already present only sets its terminal flag again.

        Args:
            word (str): The word to be inserted into the Trie structure.

        """
        node = self.root
        for char in word:
            if not is_alphabet_letter(char):
                continue
            # If the letter is not already a child, add a new TrieNode
            if char not in node.children:
                node.children[char] = TrieNode()
            node = node.children[char]

        if not node.is_terminal:
            self._size += 1
        node.is_terminal = True

    def contains(self, word: str) -> bool:
        """Check for the existence of a given word in the Trie structure.

        Args:
            word (str): The word to search for in the Trie structure.

        Returns:
            bool: True if the exact `word` is present in the trie as a
            complete word, False otherwise. A character outside `a`-`z`
            has no matching child, so such words are never found.

        """
        node = self.root
        for char in word:
            child = node.children.get(char)
            if child is None:
                return False
            node = child
        return node.is_terminal

    def is_empty(self) -> bool:
        """Return True when no word has been inserted."""
        return self._size == 0

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.contains(word)

    def __len__(self) -> int:
        return self._size
