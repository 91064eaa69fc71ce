from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from rpcexport.codec.url import encode_secret, parse_endpoint_url, validate_endpoint_url
from rpcexport.domain.models import EndpointRecord, FlatOptions
from rpcexport.errors import InvalidUrlError
from rpcexport.projector.export import project_endpoints


app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()

_RECORDS = TypeAdapter(List[EndpointRecord])


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    pkg_logger = logging.getLogger("rpcexport")
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in pkg_logger.handlers):
        pkg_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def _read_json_file(path: str, what: str) -> str:
    p = Path(path).expanduser()
    if not p.is_file():
        raise typer.BadParameter(f"{what} file does not exist: {p}")
    return p.read_text(encoding="utf-8")


def _load_records(path: str) -> list[EndpointRecord]:
    try:
        return _RECORDS.validate_json(_read_json_file(path, "Records"))
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid records file {path}: {e}")


def _load_base(path: Optional[str]) -> Optional[FlatOptions]:
    if not path:
        return None
    try:
        return FlatOptions.model_validate_json(_read_json_file(path, "Base options"))
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid base options file {path}: {e}")


@app.command()
def export(
    records: str = typer.Argument(..., help="JSON file with [{name, url, pattern}, ...]"),
    base: Optional[str] = typer.Option(None, help="Existing options JSON to merge into"),
    out: Optional[str] = typer.Option(None, help="Output path (default: print to stdout)"),
    strict: bool = typer.Option(False, help="Fail instead of falling back on a bad url"),
) -> None:
    """Project an RPC list onto flat UI options."""
    rows = _load_records(records)
    result = project_endpoints(rows, base=_load_base(base))

    if result.options is None:
        console.print("[yellow]Nothing to export:[/yellow] the record list is empty.")
        raise typer.Exit(code=1)

    if result.error is not None:
        if strict:
            console.print(f"[bold red]Export failed:[/bold red] {escape(str(result.error))}")
            raise typer.Exit(code=2)
        logging.getLogger(__name__).warning("%s; keeping previous options", result.error)

    text = json.dumps(result.options.to_payload(), indent=2)

    if out:
        out_path = Path(out).expanduser()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        console.print(f"[bold green]Wrote[/bold green] options to: {out_path}")
    else:
        console.print_json(text)


@app.command()
def validate(
    urls: List[str] = typer.Argument(..., help="RPC urls to check"),
) -> None:
    """Check urls are usable as RPC endpoints."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("URL")
    table.add_column("VALID", no_wrap=True)

    all_valid = True
    for u in urls:
        ok = validate_endpoint_url(u)
        all_valid = all_valid and ok
        shown = parse_endpoint_url(u).url if ok else u
        table.add_row(shown, "[green]yes[/green]" if ok else "[red]no[/red]")

    console.print(table)
    if not all_valid:
        raise typer.Exit(code=1)


@app.command()
def combine(
    url: str = typer.Argument(..., help="RPC url without credentials"),
    secret: str = typer.Option("", envvar="RPCEXPORT_SECRET", help="Secret token to embed"),
) -> None:
    """Print `url` with the secret embedded as token:<secret>@."""
    try:
        console.print(encode_secret(secret, url), markup=False, highlight=False, soft_wrap=True)
    except InvalidUrlError as e:
        raise typer.BadParameter(str(e))


@app.command()
def parse(
    url: str = typer.Argument(..., help="RPC url, possibly with credentials"),
) -> None:
    """Split a stored url into the bare url and its secret."""
    try:
        parsed = parse_endpoint_url(url)
    except InvalidUrlError as e:
        raise typer.BadParameter(str(e))

    console.print(f"URL: {parsed.url}", markup=False, highlight=False, soft_wrap=True)
    console.print(f"Secret: {'*' * 8 if parsed.secret else '(none)'}", markup=False)


@app.command()
def ping() -> None:
    console.print("pong")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
