"""Configuration parser for the lookup server."""

from pathlib import Path
from typing import Any, Callable

from src.custom_data_structures.Trie.fuzzy_search import DEFAULT_MAX_DISTANCE

MAX_PORT = 65535


class ConfigBoolParsingError(Exception):
    """Raised when the parsing of bool strings in
    the config file was not successful.
    """


class ConfigIntParsingError(Exception):
    """Raised when an integer setting is malformed or out of range."""


class ConfigNotFoundError(Exception):
    """Raised when any of the required configuration settings is missing."""


class ServerConfig:
    """A class to save server configuration settings."""

    def __init__(
        self,
        dictionary_path: Path,
        port: int,
        use_ssl: bool,
        max_distance: int = DEFAULT_MAX_DISTANCE,
    ) -> None:
        """Initialize the server configuration.

        Args:
            dictionary_path (Path): The word list to load, one word
            per line.
            port (int): The port number the server will listen to.
            use_ssl (bool): Whether the server should use SSL.
            max_distance (int, optional): Edit-distance bound for
            suggestions. Defaults to 2.

        """
        self.dictionary_path = dictionary_path
        self.port = port
        self.use_ssl = use_ssl
        self.max_distance = max_distance

    def __repr__(self) -> str:
        """Return a string representation of the configuration object.

        Returns:
            str: A formatted string representing the configuration settings.

        """
        return f"""
                Server configuration settings:
                Dictionary path: {self.dictionary_path}
                Suggestion distance: {self.max_distance}
                SSL enabled: {"YES" if self.use_ssl else "NO"}
                Used port number: {self.port}
            """


def parse_bool(key: str, val: str) -> bool:
    """Parse given values into boolean ones (True or False).

    Args:
        key (str): The key to parse the boolean for.
        val (str): The value to be parsed to boolean.

    Raises:
        ConfigBoolParsingError: If an error occured
        while parsing the value to boolean.

    Returns:
        bool: True or False depending on the output of the parser.

    """
    if val.strip().lower() in {"true", "1", "yes"}:
        return True
    if val.strip().lower() in {"false", "0", "no"}:
        return False

    raise ConfigBoolParsingError(
        f"Invalid boolean value for key '{key}' in the configuration file. "
        "Expected 'true', 'false', '1', '0', 'yes', or 'no' "
        "(case-insensitive).",
    )


def parse_non_negative_int(key: str, val: str) -> int:
    """Parse a value into an integer that is zero or greater.

    Args:
        key (str): The key to parse the integer for.
        val (str): The value to be parsed.

    Raises:
        ConfigIntParsingError: If the value is not an integer or is negative.

    Returns:
        int: The parsed value.

    """
    try:
        number = int(val.strip())
    except ValueError as e:
        raise ConfigIntParsingError(
            f"Invalid integer value for key '{key}' in the configuration "
            f"file: '{val}'.",
        ) from e

    if number < 0:
        raise ConfigIntParsingError(
            f"Value for key '{key}' must be zero or greater, got {number}.",
        )
    return number


def parse_port(key: str, val: str) -> int:
    """Parse a TCP port number.

    Raises:
        ConfigIntParsingError: If the value is not a valid port.

    """
    port = parse_non_negative_int(key, val)
    if port > MAX_PORT:
        raise ConfigIntParsingError(
            f"Value for key '{key}' must be at most {MAX_PORT}, got {port}.",
        )
    return port


# Config file key -> (ServerConfig argument, parser)
_FIELDS: dict[str, tuple[str, Callable[[str, str], Any]]] = {
    "dictionarypath": ("dictionary_path", lambda _key, val: Path(val)),
    "port": ("port", parse_port),
    "use_ssl": ("use_ssl", parse_bool),
    "max_distance": ("max_distance", parse_non_negative_int),
}
_REQUIRED = ("dictionarypath", "port", "use_ssl")


def read_config_pairs(config_file_path: Path) -> dict[str, str]:
    """Read the `key=value` lines of a config file.

    Keys are lowercased. Blank lines, comments and lines without an
    equals sign are skipped, and a repeated key keeps its last value.

    Args:
        config_file_path (Path): Path to the config file.

    Returns:
        dict[str, str]: The raw, stripped values by key.

    """
    pairs: dict[str, str] = {}
    with config_file_path.open("r", encoding="utf-8") as file:
        for line in file:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            key, sep, value = line.partition("=")
            if sep:
                pairs[key.strip().lower()] = value.strip()
    return pairs


def load_config_file(config_file_path: Path) -> ServerConfig:
    """Load and validate the server configuration.

    A relative `dictionarypath` is taken relative to the config file
    rather than the working directory.

    Args:
        config_file_path (Path): Path to the config file.

    Raises:
        ConfigNotFoundError: If required settings are missing.
        ConfigBoolParsingError: If a boolean setting is malformed.
        ConfigIntParsingError: If an integer setting is malformed.
        FileNotFoundError: If the config file or the dictionary it
            names does not exist.

    Returns:
        ServerConfig: Parsed config object.

    """
    if not config_file_path.exists():
        raise FileNotFoundError(
            f"Missing required configuration file: '{config_file_path}'. "
            "Please ensure the file exists and the path is correct.",
        )

    pairs = read_config_pairs(config_file_path)

    for key in _REQUIRED:
        if key not in pairs:
            setting, _ = _FIELDS[key]
            raise ConfigNotFoundError(
                f"Missing required configuration: '{setting}'. "
                "Please ensure the config file includes a valid line for "
                f"'{key}'.",
            )

    settings = {
        setting: parse(key, pairs[key])
        for key, (setting, parse) in _FIELDS.items()
        if key in pairs
    }

    dictionary_path = settings["dictionary_path"]
    if not dictionary_path.is_absolute():
        dictionary_path = config_file_path.parent / dictionary_path
        settings["dictionary_path"] = dictionary_path
    if not dictionary_path.exists():
        raise FileNotFoundError(
            f"The required file {dictionary_path} doesn't exist.",
        )

    return ServerConfig(**settings)
