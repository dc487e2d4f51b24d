"""Client configuration.

Settings are resolved in this order (first non-blank value wins):
  1. Explicit overrides (e.g. CLI flags)
  2. Environment variables (WD_API_URI, WD_QUERY_URI, TEXTIFER_URI /
     TEXTIFIER_URI, VECTOR_SEARCH_URI, WD_VECTORDB_API_SECRET, USER_AGENT,
     REQUEST_TIMEOUT_SECONDS)
  3. The [wikidata] table of a TOML file: the path in WDGRAPH_CONFIG if set,
     otherwise wdgraph.toml in the current working directory
  4. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from wdgraph.errors import ConfigError

DEFAULT_WIKIDATA_API_URL = "https://www.wikidata.org/w/api.php"
DEFAULT_WIKIDATA_QUERY_URL = "https://query.wikidata.org/sparql"
DEFAULT_TEXTIFIER_URL = "https://wd-textify.wmcloud.org"
DEFAULT_VECTOR_SEARCH_URL = "https://wd-vectordb.wmcloud.org"
DEFAULT_TIMEOUT = 15.0
DEFAULT_USER_AGENT = "wdgraph/0.1 (python-httpx)"

CONFIG_PATH_ENV = "WDGRAPH_CONFIG"
CONFIG_FILE_NAME = "wdgraph.toml"

# field name -> environment variables, checked in order
_ENV_VARS: dict[str, tuple[str, ...]] = {
    "wikidata_api_url": ("WD_API_URI",),
    "wikidata_query_url": ("WD_QUERY_URI",),
    # TEXTIFER_URI is the historical (misspelled) name and still takes precedence
    "textifier_url": ("TEXTIFER_URI", "TEXTIFIER_URI"),
    "vector_search_url": ("VECTOR_SEARCH_URI",),
    "vector_api_secret": ("WD_VECTORDB_API_SECRET",),
    "user_agent": ("USER_AGENT",),
    "timeout": ("REQUEST_TIMEOUT_SECONDS",),
}


def first_non_empty(*values: str | None) -> str:
    """Return the first value that is not blank, stripped, or "" if none."""
    for value in values:
        if value is not None and value.strip():
            return value.strip()
    return ""


class WikidataConfig(BaseModel, frozen=True):
    """Endpoints and HTTP settings shared by every request."""

    wikidata_api_url: str = Field(
        default=DEFAULT_WIKIDATA_API_URL,
        description="MediaWiki action API used for keyword search and labels.",
    )
    wikidata_query_url: str = Field(
        default=DEFAULT_WIKIDATA_QUERY_URL,
        description="Wikidata Query Service SPARQL endpoint.",
    )
    textifier_url: str = Field(
        default=DEFAULT_TEXTIFIER_URL,
        description="Textifier service returning claims as JSON or text.",
    )
    vector_search_url: str = Field(
        default=DEFAULT_VECTOR_SEARCH_URL,
        description="Vector search service for semantic entity lookup.",
    )
    vector_api_secret: str = Field(
        default="",
        description="Optional secret sent as the x-api-secret header to vector search.",
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    timeout: float = Field(default=DEFAULT_TIMEOUT, description="Per-request timeout in seconds.")

    @classmethod
    def from_env(
        cls,
        overrides: Mapping[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "WikidataConfig":
        """Build a configuration from overrides, environment, config file and defaults.

        Blank or None overrides are ignored so unset CLI flags fall through.
        An unparseable or non-positive REQUEST_TIMEOUT_SECONDS is ignored, as
        is an unreadable config file.
        """
        env = os.environ if environ is None else environ
        file_values = _load_config_file(env)
        values: dict[str, Any] = {}

        for name, env_names in _ENV_VARS.items():
            override = (overrides or {}).get(name)
            if override is not None and str(override).strip():
                values[name] = override.strip() if isinstance(override, str) else override
                continue

            if name == "timeout":
                timeout = _parse_timeout(env.get("REQUEST_TIMEOUT_SECONDS"))
                if timeout is None:
                    timeout = _parse_timeout(file_values.get("timeout"))
                if timeout is not None:
                    values[name] = timeout
                continue

            from_env = first_non_empty(*(env.get(var) for var in env_names))
            from_file = file_values.get(name)
            resolved = first_non_empty(from_env, from_file if isinstance(from_file, str) else None)
            if resolved:
                values[name] = resolved

        return cls(**values)


def _parse_timeout(raw: Any) -> float | None:
    if raw is None:
        return None
    try:
        parsed = float(str(raw).strip())
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _default_config_paths(env: Mapping[str, str]) -> list[Path]:
    """Return paths to check for wdgraph.toml (first existing wins)."""
    paths: list[Path] = []
    if env.get(CONFIG_PATH_ENV, "").strip():
        paths.append(Path(env[CONFIG_PATH_ENV].strip()))
    paths.append(Path.cwd() / CONFIG_FILE_NAME)
    return paths


def _load_config_file(env: Mapping[str, str]) -> dict[str, Any]:
    for path in _default_config_paths(env):
        if not path.is_file():
            continue
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, ValueError):
            continue
        section = data.get("wikidata")
        return dict(section) if isinstance(section, dict) else {}
    return {}


def _is_request_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc)


def validate_config(config: WikidataConfig) -> None:
    """Raise ConfigError if the configuration cannot be used to make requests."""
    for field_name, label in (
        ("wikidata_api_url", "wikidata api url"),
        ("wikidata_query_url", "wikidata query url"),
        ("textifier_url", "textifier url"),
        ("vector_search_url", "vector search url"),
    ):
        value = getattr(config, field_name)
        if not _is_request_url(value):
            raise ConfigError(f"invalid {label}: {value!r}")
    if config.timeout <= 0:
        raise ConfigError("timeout must be greater than zero")
    if not config.user_agent.strip():
        raise ConfigError("user agent cannot be empty")
