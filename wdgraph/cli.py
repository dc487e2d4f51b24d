"""Command-line interface.

Examples:
  # Items and properties
  wdgraph search-items "Douglas Adams"
  wdgraph sp "date of birth" --no-vector

  # Statements
  wdgraph get-statements Q42
  wdgraph values Q42 P106 --json

  # Instance-of / subclass-of hierarchy, two levels deep
  wdgraph hierarchy Q42 --max-depth 2

  # SPARQL, semicolon-separated CSV
  wdgraph sparql -q 'SELECT ?h WHERE { ?h wdt:P31 wd:Q5 } LIMIT 3'

Global options may be given before or after the subcommand.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional, TextIO

import httpx

from wdgraph.client import WikidataClient
from wdgraph.config import WikidataConfig
from wdgraph.errors import InputError, WikidataError
from wdgraph.fetcher import TextifierRelationFetcher
from wdgraph.hierarchy import get_instance_and_subclass_hierarchy
from wdgraph.logging import setup_logging
from wdgraph.search import search_items, search_properties
from wdgraph.sparql import execute_sparql
from wdgraph.statements import get_statement_values, get_statements
from wdgraph.version import BuildInfo

logger = setup_logging()


class CommandContext:
    """State shared by the subcommand handlers for one invocation."""

    def __init__(
        self,
        args: argparse.Namespace,
        stdout: TextIO,
        build_info: BuildInfo,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.args = args
        self.stdout = stdout
        self.build_info = build_info
        self._transport = transport

    @property
    def json(self) -> bool:
        return bool(self.args.json)

    def client(self) -> WikidataClient:
        config = WikidataConfig.from_env(
            overrides={
                "wikidata_api_url": self.args.wikidata_api_url,
                "wikidata_query_url": self.args.wikidata_query_url,
                "textifier_url": self.args.textifier_url,
                "vector_search_url": self.args.vector_search_url,
                "vector_api_secret": self.args.vector_api_secret,
                "user_agent": self.args.user_agent,
                "timeout": self.args.timeout,
            }
        )
        return WikidataClient(config, transport=self._transport)

    def print_json(self, value: Any) -> None:
        self.stdout.write(json.dumps(value, indent=2, ensure_ascii=False) + "\n")

    def print_text(self, text: str) -> None:
        self.stdout.write(text if text.endswith("\n") else text + "\n")


# --- Handlers ---


def _run_search(ctx: CommandContext, kind: str, search: Callable) -> None:
    args = ctx.args
    with ctx.client() as client:
        result = search(client, args.query, args.lang, args.limit, args.no_vector)

    no_match = f"No matching Wikidata {kind}s found."
    if ctx.json:
        payload: dict[str, Any] = {
            "query": args.query,
            "lang": args.lang,
            "limit": args.limit,
            **result.model_dump(mode="json"),
        }
        if not result.results:
            payload["message"] = no_match
        ctx.print_json(payload)
        return

    if not result.results:
        ctx.print_text(no_match)
        return

    lines = []
    for item in result.results:
        label, description = item.label.strip(), item.description.strip()
        if not label and not description:
            lines.append(item.id)
        else:
            lines.append(f"{item.id}: {label} — {description}")
    ctx.print_text("\n".join(lines))


def cmd_search_items(ctx: CommandContext) -> None:
    _run_search(ctx, "item", search_items)


def cmd_search_properties(ctx: CommandContext) -> None:
    _run_search(ctx, "property", search_properties)


def cmd_get_statements(ctx: CommandContext) -> None:
    args = ctx.args
    with ctx.client() as client:
        result = get_statements(client, args.entity_id, args.include_external_ids, args.lang)

    if ctx.json:
        ctx.print_json(
            {
                "entity_id": args.entity_id,
                "include_external_ids": args.include_external_ids,
                "lang": args.lang,
                "result": result,
            }
        )
        return
    ctx.print_text(result)


def cmd_get_statement_values(ctx: CommandContext) -> None:
    args = ctx.args
    with ctx.client() as client:
        result = get_statement_values(TextifierRelationFetcher(client), args.entity_id, args.property_id, args.lang)

    if ctx.json:
        ctx.print_json(
            {
                "entity_id": args.entity_id,
                "property_id": args.property_id,
                "lang": args.lang,
                "result": result,
            }
        )
        return
    ctx.print_text(result)


def cmd_get_hierarchy(ctx: CommandContext) -> None:
    args = ctx.args
    with ctx.client() as client:
        result = get_instance_and_subclass_hierarchy(
            TextifierRelationFetcher(client), args.entity_id, args.max_depth, args.lang
        )

    if ctx.json:
        ctx.print_json(
            {
                "entity_id": args.entity_id,
                "max_depth": args.max_depth,
                "lang": args.lang,
                "result": result.model_dump(exclude_none=True),
            }
        )
        return
    if result.message:
        ctx.print_text(result.message)
        return
    ctx.print_text(json.dumps(result.tree, indent=2, ensure_ascii=False))


def resolve_sparql_query(positional: Optional[str], query_flag: Optional[str], query_file: Optional[str]) -> str:
    """Pick the query from exactly one of: positional argument, --query, --file."""
    sources = 0
    query = ""
    if positional and positional.strip():
        sources += 1
        query = positional
    if query_flag and query_flag.strip():
        sources += 1
        query = query_flag
    if query_file and query_file.strip():
        sources += 1
        try:
            query = Path(query_file).read_text(encoding="utf-8")
        except OSError as e:
            raise InputError(f"failed to read query file: {e}") from e

    if sources == 0:
        raise InputError("provide a query as an argument, via --query, or via --file")
    if sources > 1:
        raise InputError("provide only one query source among positional arg, --query, and --file")
    query = query.strip()
    if not query:
        raise InputError("SPARQL query cannot be empty")
    return query


def cmd_execute_sparql(ctx: CommandContext) -> None:
    args = ctx.args
    query = resolve_sparql_query(args.sparql, args.query, args.file)
    with ctx.client() as client:
        result = execute_sparql(client, query, args.k)

    if ctx.json:
        ctx.print_json({"query": query, "limit": args.k, "result": result.model_dump(exclude_defaults=True)})
        return
    if result.message:
        ctx.print_text(result.message)
        return
    ctx.print_text(result.csv)


def cmd_version(ctx: CommandContext) -> None:
    if ctx.json:
        ctx.print_json(ctx.build_info.as_dict())
        return
    ctx.print_text(ctx.build_info.as_text())


# --- Parser ---


def _add_global_options(parser: argparse.ArgumentParser, suppress: bool) -> None:
    """Add the global flags; subparsers use SUPPRESS so they don't reset top-level values."""

    def default(value: Any) -> Any:
        return argparse.SUPPRESS if suppress else value

    parser.add_argument("--json", action="store_true", default=default(False), help="Output JSON to stdout")
    parser.add_argument("--timeout", type=float, default=default(None), help="HTTP timeout in seconds for outbound requests")
    parser.add_argument("--user-agent", default=default(None), help="User-Agent header used for Wikidata services")
    parser.add_argument("--wikidata-api-url", default=default(None), help="Wikidata API base URL")
    parser.add_argument("--wikidata-query-url", default=default(None), help="Wikidata Query Service URL")
    parser.add_argument("--textifier-url", default=default(None), help="Wikidata textifier API URL")
    parser.add_argument("--vector-search-url", default=default(None), help="Wikidata vector search API URL")
    parser.add_argument("--vector-api-secret", default=default(None), help="Optional API secret for vector search")
    parser.add_argument("-v", "--verbose", action="store_true", default=default(False), help="Log requests to stderr")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wdgraph",
        description="Wikidata command-line client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    _add_global_options(parser, suppress=False)

    common = argparse.ArgumentParser(add_help=False)
    _add_global_options(common, suppress=True)

    subparsers = parser.add_subparsers(dest="command", metavar="<command>", required=True)

    def add(name: str, aliases: list[str], help_text: str, handler: Callable) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, aliases=aliases, help=help_text, description=help_text, parents=[common])
        sub.set_defaults(handler=handler)
        return sub

    for name, alias, kind, handler in (
        ("search-items", "si", "items (QIDs)", cmd_search_items),
        ("search-properties", "sp", "properties (PIDs)", cmd_search_properties),
    ):
        sub = add(name, [alias], f"Search Wikidata {kind}", handler)
        sub.add_argument("query")
        sub.add_argument("--lang", default="en", help="Language code for labels/descriptions")
        sub.add_argument("--limit", type=int, default=10, help="Maximum search results")
        sub.add_argument("--no-vector", action="store_true", help="Disable vector search and use keyword search only")

    sub = add("get-statements", ["statements"], "Return direct Wikidata statements for an entity", cmd_get_statements)
    sub.add_argument("entity_id")
    sub.add_argument("--include-external-ids", action="store_true", help="Include external identifier statements")
    sub.add_argument("--lang", default="en", help="Language code for labels/descriptions")

    sub = add(
        "get-statement-values",
        ["statement-values", "values"],
        "Return detailed values, qualifiers, ranks, and references for a statement",
        cmd_get_statement_values,
    )
    sub.add_argument("entity_id")
    sub.add_argument("property_id")
    sub.add_argument("--lang", default="en", help="Language code for labels/descriptions")

    sub = add(
        "get-instance-and-subclass-hierarchy",
        ["hierarchy"],
        "Return a hierarchy based on P31 (instance of) and P279 (subclass of)",
        cmd_get_hierarchy,
    )
    sub.add_argument("entity_id")
    sub.add_argument("--max-depth", type=int, default=5, help="Maximum hierarchy depth (default: 5)")
    sub.add_argument("--lang", default="en", help="Language code for labels/descriptions")

    sub = add(
        "execute-sparql",
        ["sparql"],
        "Execute SPARQL against Wikidata and return semicolon-separated CSV",
        cmd_execute_sparql,
    )
    sub.add_argument("sparql", nargs="?", metavar="query", help="SPARQL query text")
    sub.add_argument("-q", "--query", help="SPARQL query string (alternative to positional query argument)")
    sub.add_argument("--file", help="Path to file containing SPARQL query text")
    sub.add_argument("--k", type=int, default=10, help="Maximum rows to return")

    add("version", [], "Print build version", cmd_version)
    return parser


def run(
    argv: Optional[list[str]] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    build_info: Optional[BuildInfo] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> int:
    """Parse ``argv``, run the selected command and return the exit status."""
    args = build_parser().parse_args(argv)
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    if args.verbose:
        setup_logging(logging.DEBUG)

    ctx = CommandContext(args, stdout, build_info or BuildInfo(), transport)
    try:
        args.handler(ctx)
    except WikidataError as e:
        logger.debug({"message": "command failed", "command": args.command, "error": repr(e)})
        stderr.write(f"error: {e}\n")
        return 1
    return 0


def main() -> None:
    sys.exit(run(build_info=BuildInfo.detect()))


if __name__ == "__main__":
    main()
