"""Benchmark suggestion search over a word list for growing edit distances."""

import argparse
import gc
import json
import time
import tracemalloc
from pathlib import Path

import matplotlib.pyplot as plt
import psutil

from src.custom_data_structures.Trie.fuzzy_search import (
    FuzzySearchEngine,
    edit_distance,
)
from src.custom_data_structures.Trie.Trie import is_alphabet_letter
from src.server.word_loader import iter_words, load_dictionary

RESULTS_DIR = Path(__file__).parent / "results"
MAX_DISTANCES = [0, 1, 2, 3]
DEFAULT_QUERIES = [
    "misspeled",
    "recieve",
    "definately",
    "seperate",
    "occurence",
    "acommodate",
    "wierd",
    "untill",
    "goverment",
    "tommorow",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Time suggestion search for several edit distances.",
    )
    parser.add_argument(
        "--dictionary",
        type=Path,
        default=Path("/usr/share/dict/words"),
        help="Word list to benchmark against.",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Cross-check every result against a brute-force scan.",
    )
    parser.add_argument("queries", nargs="*", default=DEFAULT_QUERIES)
    return parser


def brute_force_suggestions(
    words: set[str],
    query: str,
    max_distance: int,
) -> set[str]:
    """Return every word within `max_distance` of `query` by full scan."""
    return {
        word for word in words if edit_distance(word, query) <= max_distance
    }


def benchmark_distance(
    engine: FuzzySearchEngine,
    queries: list[str],
    max_distance: int,
) -> dict[str, float]:
    """Time `suggest` for every query at one distance bound.

    Args:
        engine (FuzzySearchEngine): The engine under test.
        queries (list[str]): The query words.
        max_distance (int): The edit-distance bound.

    Returns:
        dict[str, float]: Average time in ms and average suggestion count.

    """
    elapsed_times: list[float] = []
    suggestion_counts: list[int] = []
    for query in queries:
        start = time.perf_counter()
        suggestions = engine.suggest(query, max_distance)
        elapsed_times.append((time.perf_counter() - start) * 1000)
        suggestion_counts.append(len(suggestions))

    return {
        "average_execution_time": sum(elapsed_times) / len(elapsed_times),
        "average_suggestions": sum(suggestion_counts) / len(suggestion_counts),
    }


def plot_results(results: dict[int, dict[str, float]], path: Path) -> None:
    """Save a bar chart of the average search time per distance."""
    y_values = [results[d]["average_execution_time"] for d in MAX_DISTANCES]
    try:
        plt.figure(figsize=(8, 5))
        x = range(len(MAX_DISTANCES))
        plt.bar(x, y_values, color="steelblue")
        plt.xticks(x, [str(item) for item in MAX_DISTANCES])
        plt.xlabel("Maximum edit distance")
        plt.ylabel("Execution Time (ms)")
        plt.title("Suggestion search time per query")

        for i, v in enumerate(y_values):
            plt.text(i, v + 0.01, f"{v:.2f}", ha="center", va="bottom")

        plt.tight_layout()
        plt.savefig(path)
    finally:
        plt.close("all")


def main() -> None:
    """Main function."""
    args = build_parser().parse_args()
    queries = [query.strip().lower() for query in args.queries]
    process = psutil.Process()

    rss_before = process.memory_info().rss
    tracemalloc.start()
    start = time.perf_counter()
    store = load_dictionary(args.dictionary)
    build_time_ms = (time.perf_counter() - start) * 1000
    _, peak_traced = tracemalloc.get_traced_memory()
    tracemalloc.stop()
    rss_after = process.memory_info().rss

    print(
        f"Loaded {len(store)} words in {build_time_ms:.2f} ms "
        f"(RSS +{(rss_after - rss_before) / 1024 / 1024:.1f} MiB, "
        f"traced peak {peak_traced / 1024 / 1024:.1f} MiB)",
    )

    engine = FuzzySearchEngine(store)
    results: dict[int, dict[str, float]] = {}
    for max_distance in MAX_DISTANCES:
        results[max_distance] = benchmark_distance(
            engine,
            queries,
            max_distance,
        )
        print(
            f"max_distance={max_distance} => "
            f"{results[max_distance]['average_execution_time']:.2f} ms, "
            f"{results[max_distance]['average_suggestions']:.1f} suggestions",
        )
        gc.collect()

    if args.verify:
        # Compare against the words as the trie stores them
        words = {
            "".join(filter(is_alphabet_letter, word))
            for word in iter_words(args.dictionary)
        }
        words.discard("")
        for max_distance in MAX_DISTANCES:
            for query in queries:
                expected = brute_force_suggestions(words, query, max_distance)
                actual = set(engine.suggest(query, max_distance))
                if actual != expected:
                    print(
                        f"MISMATCH for '{query}' at {max_distance}: "
                        f"missing {sorted(expected - actual)}, "
                        f"extra {sorted(actual - expected)}",
                    )
        print("Verification finished.")

    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    plot_results(results, RESULTS_DIR / "suggestion_search_time.png")

    with open(RESULTS_DIR / "results.json", "w", encoding="utf-8") as f:
        json.dump(
            {
                "dictionary": str(args.dictionary),
                "words": len(store),
                "build_time_ms": build_time_ms,
                "rss_growth_bytes": rss_after - rss_before,
                "traced_peak_bytes": peak_traced,
                "distances": results,
            },
            f,
            indent=4,
        )


if __name__ == "__main__":
    main()
