"""Structured query logging (timestamp, IP, lookup outcome, latency).

Worker processes and the event loop only enqueue records. A single
listener in the main process owns the rotating log file.
"""

import logging
import logging.handlers
import multiprocessing
import sys
from pathlib import Path
from typing import Any, Optional, Union, cast

LOG_FILE_PATH = Path(__file__).parent.parent.parent / "logs/lookup_server.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5
_LOG_LEVEL = logging.INFO
LOG_FORMAT = (
    "level=%(levelname)s | time=%(asctime)s | process=%(process)d | "
    "thread=%(thread)d | module=%(module)s | funcName=%(funcName)s | "
    "lineno=%(lineno)d | message=%(message)s"
)

_log_queue: Union["multiprocessing.Queue[Any]", None] = None
_listener: Optional[logging.handlers.QueueListener] = None


def setup_logging_queue() -> None:
    """Create the queue shared by every process that logs lookups.

    A manager queue is used because its proxy can be pickled into the
    initializer of a ProcessPoolExecutor. Calling this twice is harmless.
    """
    global _log_queue
    if _log_queue is None:
        _log_queue = cast(
            "multiprocessing.Queue[Any]",
            multiprocessing.Manager().Queue(-1),
        )


def get_log_queue() -> "multiprocessing.Queue[Any]":
    """Return the logging queue so it can be handed to worker processes.

    Raises:
        RuntimeError: If `setup_logging_queue` has not been called.

    """
    if _log_queue is None:
        raise RuntimeError(
            "Log queue not initialized. Call setup_logging_queue() first.",
        )
    return _log_queue


def _build_file_handler(log_file_path: Path) -> logging.Handler:
    log_file_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(_LOG_LEVEL)
    file_handler.setFormatter(
        logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"),
    )
    return file_handler


def start_logging_listener(log_file_path: Path = LOG_FILE_PATH) -> None:
    """Drain the logging queue into `log_file_path` on a background thread.

    The listener hands records straight to the file handler. It never
    goes through the root logger, whose handler in the main process is
    the QueueHandler feeding this same queue.

    Args:
        log_file_path (Path, optional): Where to write the records.
            Defaults to `LOG_FILE_PATH`.

    """
    global _listener
    if _listener is not None:
        return

    _listener = logging.handlers.QueueListener(
        get_log_queue(),
        _build_file_handler(log_file_path),
        respect_handler_level=True,
    )
    _listener.start()
    print(f"[LOGGER] Listener started, writing to {log_file_path}")


def stop_logging_listener() -> None:
    """Flush the queued records, close the log file and forget the queue."""
    global _listener, _log_queue
    if _listener is not None:
        try:
            _listener.stop()
        except Exception as e:
            print(
                f"[LOGGER WARNING] Logging listener did not stop cleanly: {e}",
                file=sys.stderr,
            )
        for handler in _listener.handlers:
            handler.close()
        _listener = None
        print("[LOGGER] Listener stopped.")
    _log_queue = None


def setup_worker_process_logging(
    log_queue: Optional["multiprocessing.Queue[Any]"] = None,
) -> None:
    """Route every record of the current process into the logging queue.

    Args:
        log_queue (multiprocessing.Queue, optional): The queue to use.
            Worker processes receive it from their initializer; the main
            process falls back to the global queue.

    """
    if log_queue is None:
        log_queue = get_log_queue()

    root_logger = logging.getLogger()
    root_logger.setLevel(_LOG_LEVEL)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(logging.handlers.QueueHandler(log_queue))


def log(
    time_stamp: str,
    client_ip: str,
    query: str,
    status: str,
    execution_time_ms: float,
) -> None:
    """Write one lookup line to the query log.

    Args:
        time_stamp (str): When the lookup was answered.
        client_ip (str): The IP address of the client.
        query (str): The normalized query word.
        status (str): The lookup outcome, or "ERROR".
        execution_time_ms (float): The execution time in milliseconds.

    """
    logging.info(
        "Timestamp: %s, Client IP: %s, Query: '%s', Status: %s, "
        "Execution Time: %.2f ms",
        time_stamp,
        client_ip,
        query,
        status,
        execution_time_ms,
    )
