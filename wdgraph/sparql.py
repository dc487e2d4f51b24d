"""SPARQL queries against the Wikidata Query Service."""

import csv
import io
import re

from wdgraph.client import WikidataClient
from wdgraph.errors import InputError, RemoteError
from wdgraph.models import SPARQLResponse, SPARQLResult, decode_payload

DEFAULT_LIMIT = 10
ENTITY_URI_RE = re.compile(r"^http://www\.wikidata\.org/entity/([A-Z]\d+)$")


def execute_sparql(client: WikidataClient, query: str, limit: int = DEFAULT_LIMIT) -> SPARQLResult:
    """Run ``query`` and return at most ``limit`` rows plus a semicolon CSV rendering.

    A query rejected by the service (HTTP 400) is returned as a result with a
    cleaned-up ``message`` rather than raised.
    """
    query = query.strip()
    if not query:
        raise InputError("SPARQL query cannot be empty")
    if limit <= 0:
        limit = DEFAULT_LIMIT

    try:
        response = client.get_json(client.config.wikidata_query_url, {"query": query, "format": "json"})
    except RemoteError as e:
        if e.status_code == 400:
            return SPARQLResult(message=clean_sparql_error_message(e.body))
        raise

    decoded = decode_payload(SPARQLResponse, response)
    variables = decoded.head.vars

    rows: list[dict[str, str]] = []
    for binding in decoded.results.bindings[:limit]:
        row = {}
        for variable in variables:
            cell = binding.get(variable)
            row[variable] = shorten_entity_uri(cell.value) if cell is not None else ""
        rows.append(row)

    return SPARQLResult(vars=variables, rows=rows, csv=to_semicolon_csv(variables, rows))


def clean_sparql_error_message(body: str) -> str:
    """Reduce a query service stack trace to its first meaningful line."""
    body = body.strip()
    if not body:
        return "SPARQL query failed"
    first = body.split("\n")[0].strip()
    if not first:
        return "SPARQL query failed"
    return first.split("\tat ")[0].strip()


def shorten_entity_uri(value: str) -> str:
    match = ENTITY_URI_RE.match(value)
    return match.group(1) if match else value


def to_semicolon_csv(variables: list[str], rows: list[dict[str, str]]) -> str:
    """Render rows as CSV with ";" separators and a leading row-index column."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=";", lineterminator="\n")
    writer.writerow(["", *variables])
    for index, row in enumerate(rows):
        writer.writerow([str(index), *(row.get(variable, "") for variable in variables)])
    return buffer.getvalue()
