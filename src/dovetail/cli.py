"""CLI entry point for dovetail."""

import json
import re
from pathlib import Path
from typing import Any

import click

from dovetail.config import build_client, load_settings
from dovetail.dispatcher import Dovetail
from dovetail.errors import DovetailError, NotAuthorized, ValidationError
from dovetail.log import configure_logging
from dovetail.resources.handler import BindingError
from dovetail.resources.loader import default_registry
from dovetail.resources.spec import OperationSpec

EXIT_FAILED = 1
EXIT_INVALID = 2
EXIT_NOT_AUTHORIZED = 3

_DECIMAL = re.compile(r"[0-9]+")


def _exit_code(error: DovetailError) -> int:
    if isinstance(error, NotAuthorized):
        return EXIT_NOT_AUTHORIZED
    if isinstance(error, ValidationError):
        return EXIT_INVALID
    return EXIT_FAILED


def _coerce_args(op: OperationSpec, args: tuple[str, ...]) -> list[Any]:
    """Decimal values for id arguments become integers; everything else stays a string."""
    kinds = [arg.kind for arg in op.args]
    coerced: list[Any] = []
    for i, value in enumerate(args):
        if i < len(kinds) and kinds[i] == "id" and _DECIMAL.fullmatch(value):
            coerced.append(int(value))
        else:
            coerced.append(value)
    return coerced


def _parse_query(pairs: tuple[str, ...]) -> dict[str, str] | None:
    if not pairs:
        return None
    query = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint="--query")
        query[key] = value
    return query


def _parse_data(data: str | None) -> dict[str, Any] | None:
    if data is None:
        return None
    try:
        params = json.loads(data)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--data") from e
    if not isinstance(params, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--data")
    return params


@click.group()
@click.option("--api-key", default=None, help="Teamwork API key.")
@click.option("--base-url", default=None, help="Teamwork installation URL, e.g. https://mycompany.teamwork.com.")
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path), help="YAML config file.")
@click.option("--timeout", default=None, type=float, help="Request timeout in seconds.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug events to stderr.")
@click.option("--json-logs", is_flag=True, help="Log as JSON lines instead of console output.")
@click.pass_context
def main(ctx: click.Context, api_key, base_url, config_path, timeout, verbose, json_logs):
    """Dovetail: call the Teamwork.com API from the command line."""
    configure_logging(verbose=verbose, use_json=json_logs)
    ctx.obj = {
        "config_path": config_path,
        "api_key": api_key,
        "base_url": base_url,
        "timeout": timeout,
    }


@main.command()
@click.argument("name", required=False)
def resources(name: str | None):
    """List resources, or the operations of one resource."""
    registry = default_registry()
    if name is None:
        for spec in registry:
            summary = f"  {spec.summary}" if spec.summary else ""
            click.echo(f"{spec.name}{summary}")
        return

    try:
        spec = registry.get(name)
    except DovetailError as e:
        raise click.UsageError(e.message) from e

    for op in spec.operations.values():
        signature = ", ".join(op.slots)
        line = f"{op.method:<6} {op.name}({signature})  {op.path}"
        if op.summary:
            line += f"  # {op.summary}"
        click.echo(line)


@main.command()
@click.argument("resource")
@click.argument("operation")
@click.argument("args", nargs=-1)
@click.option("--data", default=None, help="JSON object with the request fields.")
@click.option("--query", "query_pairs", multiple=True, help="Query parameter as KEY=VALUE (repeatable).")
@click.pass_context
def call(ctx: click.Context, resource: str, operation: str, args: tuple[str, ...], data: str | None, query_pairs: tuple[str, ...]):
    """Run one operation and print the JSON result.

    Example: dovetail call projects get 42 --query includePeople=true
    """
    params = _parse_data(data)
    query = _parse_query(query_pairs)

    try:
        settings = load_settings(**ctx.obj)
        client = Dovetail(build_client(settings))
        handler = client.dispatch(resource)
        if operation not in handler.operations:
            raise click.UsageError(f"Resource '{handler.name}' has no operation '{operation}'")
        op = handler.spec.operations[operation]

        kwargs: dict[str, Any] = {}
        if params is not None:
            kwargs["params"] = params
        if query is not None:
            kwargs["query"] = query

        try:
            result = handler.call(operation, *_coerce_args(op, args), **kwargs)
        except BindingError as e:
            raise click.UsageError(str(e)) from e
    except DovetailError as e:
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(_exit_code(e))

    click.echo(json.dumps(result, indent=2, ensure_ascii=False))
