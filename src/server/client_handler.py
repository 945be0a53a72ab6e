"""Answer a client's lookup inside a worker process."""

import logging
import os
import time
from typing import Any, Optional

from .dictionary_service import DictionaryService, LookupResult
from .logger import setup_worker_process_logging

GLOBAL_SERVICE: Optional[DictionaryService] = None


def initialize_worker_process(
    service: DictionaryService,
    log_queue: Optional[Any] = None,
) -> None:
    """Initialize each worker process in the ProcessPoolExecutor.

    The dictionary is fully built before the pool starts, so every worker
    receives a finished copy once and only ever reads from it.

    Args:
        service (DictionaryService): The dictionary service to publish.
        log_queue (Any, optional): The shared logging queue. When given,
            the worker's records are forwarded to the main process.

    """
    global GLOBAL_SERVICE
    GLOBAL_SERVICE = service
    if log_queue is not None:
        setup_worker_process_logging(log_queue)
    logging.info(
        f"Worker process {os.getpid()} initialized with "
        f"{len(service.store)} dictionary words",
    )


def lookup_word(service: DictionaryService, query: str) -> LookupResult:
    """Look up `query` and log how long it took.

    Args:
        service (DictionaryService): The service to query.
        query (str): The normalized query word.

    Returns:
        LookupResult: The lookup outcome.

    """
    start_time = time.perf_counter()
    result = service.lookup(query)
    duration = (time.perf_counter() - start_time) * 1000  # in milliseconds
    logging.info(
        f"Process {os.getpid()}: Lookup for '{query}' finished in "
        f"{duration:.2f} ms. Status: {result.status.name}, "
        f"suggestions: {len(result.suggestions)}",
    )
    return result


def perform_lookup_sync(query: str) -> LookupResult:
    """Look up `query` in the dictionary published to this worker.

    Args:
        query (str): The normalized query word.

    Raises:
        RuntimeError: If the worker was started without a dictionary.

    Returns:
        LookupResult: The lookup outcome.

    """
    if GLOBAL_SERVICE is None:
        logging.error(
            f"Process {os.getpid()}: Dictionary service not initialized.",
        )
        raise RuntimeError("Dictionary not initialized in worker process.")

    return lookup_word(GLOBAL_SERVICE, query)
