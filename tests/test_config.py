from pathlib import Path

import pytest

from src.server.config import (
    ConfigBoolParsingError,
    ConfigIntParsingError,
    ConfigNotFoundError,
    ServerConfig,
    load_config_file,
    parse_bool,
    parse_non_negative_int,
    parse_port,
    read_config_pairs,
)

# Test data for valid configurations
VALID_CONFIG = """
# Lookup server configuration
dictionarypath = {dictionary_path}
port = 8888
use_ssl = yes
max_distance = 3
"""

MISSING_KEY_CONFIG = """
dictionarypath = {dictionary_path}
use_ssl = false
"""

INVALID_BOOL_CONFIG = """
dictionarypath = {dictionary_path}
port = 8888
use_ssl = maybe
"""

INVALID_PORT_CONFIG = """
dictionarypath = {dictionary_path}
port = abc
use_ssl = false
"""

NEGATIVE_DISTANCE_CONFIG = """
dictionarypath = {dictionary_path}
port = 8888
use_ssl = false
max_distance = -1
"""


@pytest.fixture
def dictionary_file(tmp_path):
    file_path = tmp_path / "words.txt"
    file_path.write_text("cat\ndog\n", encoding="utf-8")
    return file_path


def write_config(tmp_path, template, dictionary_path):
    config_path = tmp_path / "config.txt"
    config_path.write_text(template.format(dictionary_path=dictionary_path))
    return config_path


@pytest.mark.parametrize(
    "value, expected",
    [
        ("true", True),
        ("TRUE", True),
        ("1", True),
        ("yes", True),
        ("false", False),
        ("False", False),
        ("0", False),
        ("no", False),
    ],
)
def test_parse_bool_valid(value, expected):
    """Test valid boolean values."""
    assert parse_bool("test_key", value) == expected


@pytest.mark.parametrize("value", ["maybe", "2", "yess", "tru", ""])
def test_parse_bool_invalid(value):
    """Test invalid boolean values."""
    with pytest.raises(ConfigBoolParsingError) as excinfo:
        parse_bool("test_key", value)
    assert "Invalid boolean value for key 'test_key'" in str(excinfo.value)


@pytest.mark.parametrize("value, expected", [("0", 0), (" 2 ", 2), ("10", 10)])
def test_parse_non_negative_int_valid(value, expected):
    assert parse_non_negative_int("max_distance", value) == expected


@pytest.mark.parametrize("value", ["-1", "1.5", "two", ""])
def test_parse_non_negative_int_invalid(value):
    with pytest.raises(ConfigIntParsingError) as excinfo:
        parse_non_negative_int("max_distance", value)
    assert "'max_distance'" in str(excinfo.value)


def test_server_config_defaults(dictionary_file):
    """Test ServerConfig initialization and its default distance."""
    config = ServerConfig(
        dictionary_path=dictionary_file,
        port=8888,
        use_ssl=False,
    )

    assert config.dictionary_path == dictionary_file
    assert config.port == 8888
    assert config.use_ssl is False
    assert config.max_distance == 2


def test_server_config_repr(dictionary_file):
    """Test the string representation of ServerConfig."""
    config = ServerConfig(dictionary_file, 8888, True, 1)

    repr_str = repr(config)
    assert "Server configuration settings" in repr_str
    assert str(dictionary_file) in repr_str
    assert "Suggestion distance: 1" in repr_str
    assert "SSL enabled: YES" in repr_str
    assert "Used port number: 8888" in repr_str


def test_load_valid_config(tmp_path, dictionary_file):
    """Test loading a valid configuration file."""
    config_path = write_config(tmp_path, VALID_CONFIG, dictionary_file)

    config = load_config_file(config_path)

    assert config.dictionary_path == dictionary_file
    assert config.port == 8888
    assert config.use_ssl is True
    assert config.max_distance == 3


def test_max_distance_is_optional(tmp_path, dictionary_file):
    config_content = f"""
    dictionarypath = {dictionary_file}
    port = 9999
    use_ssl = 0
    """
    config_path = tmp_path / "config.txt"
    config_path.write_text(config_content)

    assert load_config_file(config_path).max_distance == 2


def test_load_config_missing_file():
    """Test loading a configuration from a non-existent file."""
    with pytest.raises(FileNotFoundError) as excinfo:
        load_config_file(Path("/non/existent/path"))
    assert "Missing required configuration file" in str(excinfo.value)


def test_load_config_missing_key(tmp_path, dictionary_file):
    """Test configuration with a missing required key."""
    config_path = write_config(tmp_path, MISSING_KEY_CONFIG, dictionary_file)

    with pytest.raises(ConfigNotFoundError) as excinfo:
        load_config_file(config_path)
    assert "Missing required configuration: 'port'" in str(excinfo.value)


def test_load_config_missing_dictionary_key(tmp_path):
    config_path = tmp_path / "config.txt"
    config_path.write_text("port = 1\nuse_ssl = no\n")

    with pytest.raises(ConfigNotFoundError) as excinfo:
        load_config_file(config_path)
    assert "'dictionarypath'" in str(excinfo.value)


def test_load_config_invalid_bool(tmp_path, dictionary_file):
    """Test configuration with an invalid boolean value."""
    config_path = write_config(tmp_path, INVALID_BOOL_CONFIG, dictionary_file)

    with pytest.raises(ConfigBoolParsingError) as excinfo:
        load_config_file(config_path)
    assert "Invalid boolean value for key 'use_ssl'" in str(excinfo.value)


def test_load_config_invalid_port(tmp_path, dictionary_file):
    """Test configuration with an invalid port value."""
    config_path = write_config(tmp_path, INVALID_PORT_CONFIG, dictionary_file)

    with pytest.raises(ConfigIntParsingError):
        load_config_file(config_path)


def test_load_config_negative_distance(tmp_path, dictionary_file):
    config_path = write_config(
        tmp_path,
        NEGATIVE_DISTANCE_CONFIG,
        dictionary_file,
    )

    with pytest.raises(ConfigIntParsingError) as excinfo:
        load_config_file(config_path)
    assert "must be zero or greater" in str(excinfo.value)


def test_load_config_comments_and_case(tmp_path, dictionary_file):
    """Test that comments, malformed lines and key case are handled."""
    config_content = f"""
    # This is a comment
    DICTIONARYPATH = {dictionary_file}
    invalid_line_without_equals
    Port = 1234
    # Another comment
    USE_SSL = false
    MAX_DISTANCE = 0
    """
    config_path = tmp_path / "config.txt"
    config_path.write_text(config_content)

    config = load_config_file(config_path)

    assert config.dictionary_path == dictionary_file
    assert config.port == 1234
    assert config.use_ssl is False
    assert config.max_distance == 0


def test_relative_dictionary_path_follows_config_dir(
    tmp_path,
    dictionary_file,
    monkeypatch,
):
    config_path = write_config(tmp_path, VALID_CONFIG, "words.txt")
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    config = load_config_file(config_path)

    assert config.dictionary_path == tmp_path / "words.txt"
    assert config.dictionary_path.exists()


def test_relative_missing_dictionary_names_config_dir(tmp_path):
    config_path = write_config(tmp_path, VALID_CONFIG, "gone.txt")

    with pytest.raises(FileNotFoundError) as excinfo:
        load_config_file(config_path)
    assert f"The required file {tmp_path / 'gone.txt'} " in str(excinfo.value)


def test_load_config_missing_dictionary_file(tmp_path):
    """Test that FileNotFoundError is raised if the word list is missing."""
    non_existent = tmp_path / "non_existent.txt"
    config_path = write_config(tmp_path, VALID_CONFIG, non_existent)

    with pytest.raises(FileNotFoundError) as excinfo:
        load_config_file(config_path)
    assert (
        f"The required file {non_existent} "
        "doesn't exist" in str(excinfo.value)
    )


@pytest.mark.parametrize("value, expected", [("0", 0), ("65535", 65535)])
def test_parse_port_valid(value, expected):
    assert parse_port("port", value) == expected


def test_parse_port_out_of_range():
    with pytest.raises(ConfigIntParsingError) as excinfo:
        parse_port("port", "65536")
    assert "must be at most 65535" in str(excinfo.value)


def test_read_config_pairs_last_value_wins(tmp_path):
    config_path = tmp_path / "config.txt"
    config_path.write_text(
        "# comment\nPort = 1\nno equals here\nport=2\nempty=\n",
    )

    assert read_config_pairs(config_path) == {"port": "2", "empty": ""}
