"""Tests for configuration resolution and validation."""

from pathlib import Path

import pytest

from wdgraph.config import (
    DEFAULT_TEXTIFIER_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    WikidataConfig,
    first_non_empty,
    validate_config,
)
from wdgraph.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each test from an empty directory so no wdgraph.toml is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestFromEnv:
    """Tests for WikidataConfig.from_env() precedence."""

    def test_defaults(self) -> None:
        """Test that an empty environment yields the built-in defaults."""
        config = WikidataConfig.from_env(environ={})

        assert config == WikidataConfig()
        assert config.textifier_url == DEFAULT_TEXTIFIER_URL
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.user_agent == DEFAULT_USER_AGENT

    def test_environment(self) -> None:
        """Test that every environment variable is read and trimmed."""
        config = WikidataConfig.from_env(
            environ={
                "WD_API_URI": " http://api.test/w/api.php ",
                "WD_QUERY_URI": "http://query.test/sparql",
                "TEXTIFIER_URI": "http://textify.test",
                "VECTOR_SEARCH_URI": "http://vector.test",
                "WD_VECTORDB_API_SECRET": "secret",
                "USER_AGENT": "agent/2",
                "REQUEST_TIMEOUT_SECONDS": "2.5",
            }
        )

        assert config.wikidata_api_url == "http://api.test/w/api.php"
        assert config.wikidata_query_url == "http://query.test/sparql"
        assert config.textifier_url == "http://textify.test"
        assert config.vector_search_url == "http://vector.test"
        assert config.vector_api_secret == "secret"
        assert config.user_agent == "agent/2"
        assert config.timeout == 2.5

    def test_misspelled_textifier_variable_wins(self) -> None:
        """Test that TEXTIFER_URI is checked before TEXTIFIER_URI."""
        config = WikidataConfig.from_env(
            environ={"TEXTIFER_URI": "http://legacy.test", "TEXTIFIER_URI": "http://new.test"}
        )
        assert config.textifier_url == "http://legacy.test"

    @pytest.mark.parametrize("raw", ["abc", "0", "-3", ""])
    def test_invalid_timeout_ignored(self, raw: str) -> None:
        """Test that an unusable REQUEST_TIMEOUT_SECONDS falls back to the default."""
        config = WikidataConfig.from_env(environ={"REQUEST_TIMEOUT_SECONDS": raw})
        assert config.timeout == DEFAULT_TIMEOUT

    def test_overrides_beat_environment(self) -> None:
        """Test that non-blank overrides win and blank ones fall through."""
        config = WikidataConfig.from_env(
            overrides={"user_agent": "flag/1", "timeout": 9.0, "textifier_url": None, "wikidata_api_url": "  "},
            environ={"USER_AGENT": "env/1", "TEXTIFIER_URI": "http://textify.test"},
        )

        assert config.user_agent == "flag/1"
        assert config.timeout == 9.0
        assert config.textifier_url == "http://textify.test"
        assert config.wikidata_api_url == WikidataConfig().wikidata_api_url

    def test_config_file(self, isolated_cwd: Path) -> None:
        """Test that wdgraph.toml in the working directory is read below the environment."""
        (isolated_cwd / "wdgraph.toml").write_text(
            '[wikidata]\ntextifier_url = "http://file.test"\ntimeout = 4\nuser_agent = "file/1"\n'
        )

        config = WikidataConfig.from_env(environ={"USER_AGENT": "env/1"})

        assert config.textifier_url == "http://file.test"
        assert config.timeout == 4.0
        assert config.user_agent == "env/1"

    def test_config_file_from_env_path(self, tmp_path: Path) -> None:
        """Test that WDGRAPH_CONFIG points at an alternative file."""
        path = tmp_path / "custom.toml"
        path.write_text('[wikidata]\nvector_search_url = "http://custom.test"\n')

        config = WikidataConfig.from_env(environ={"WDGRAPH_CONFIG": str(path)})

        assert config.vector_search_url == "http://custom.test"

    def test_unreadable_config_file_ignored(self, isolated_cwd: Path) -> None:
        """Test that an invalid TOML file is ignored."""
        (isolated_cwd / "wdgraph.toml").write_text("this is [not toml")

        assert WikidataConfig.from_env(environ={}) == WikidataConfig()


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_defaults_are_valid(self) -> None:
        validate_config(WikidataConfig())

    @pytest.mark.parametrize(
        "changes,message",
        [
            ({"wikidata_query_url": "query.test/sparql"}, "invalid wikidata query url"),
            ({"vector_search_url": ""}, "invalid vector search url"),
            ({"timeout": -1.0}, "timeout must be greater than zero"),
            ({"user_agent": ""}, "user agent cannot be empty"),
        ],
    )
    def test_invalid(self, changes: dict, message: str) -> None:
        """Test each validation failure message."""
        with pytest.raises(ConfigError, match=message):
            validate_config(WikidataConfig(**changes))


def test_first_non_empty() -> None:
    assert first_non_empty(None, "  ", " x ", "y") == "x"
    assert first_non_empty() == ""
