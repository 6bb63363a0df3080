"""Command line interface for the StreamVault catalog API."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import httpx
import typer

from ..catalog_api.services.indexnow import (
    IndexNowClient,
    IndexNowError,
    extract_sitemap_urls,
    load_or_create_key,
)
from ..catalog_api.stores.catalog_store import (
    CatalogPersistenceError,
    read_catalog_file,
    write_catalog_file,
)
from ..catalog_api.settings import CatalogSettings
from ..catalog_api.utils.paths import default_state_dir, ensure_parent_directory
from .bulk_import import prepare_directory
from .client import create_client


DEFAULT_API_BASE = "http://localhost:5000"
TOKEN_FILE_NAME = "admin-token"
INDEXNOW_KEY_FILE_NAME = "indexnow-key.txt"

app = typer.Typer(help="Interact with the StreamVault catalog service.")
shows_app = typer.Typer(help="Browse and manage shows.")
app.add_typer(shows_app, name="shows")
episodes_app = typer.Typer(help="Manage episodes.")
app.add_typer(episodes_app, name="episodes")
indexnow_app = typer.Typer(help="Notify search engines about catalog pages.")
app.add_typer(indexnow_app, name="indexnow")


def _api_base_option() -> typer.Option:
    return typer.Option(
        DEFAULT_API_BASE,
        "--api-base",
        help="Base URL for the StreamVault API service.",
        show_default=True,
        envvar="STREAMVAULT_API_BASE",
    )


def _token_option() -> typer.Option:
    return typer.Option(
        None,
        "--token",
        help="Admin token; defaults to the token saved by the login command.",
        envvar="STREAMVAULT_ADMIN_TOKEN",
    )


def _token_path() -> Path:
    return default_state_dir() / TOKEN_FILE_NAME


def _resolve_token(token: Optional[str]) -> str:
    if token:
        return token
    path = _token_path()
    if path.exists():
        saved = path.read_text(encoding="utf-8").strip()
        if saved:
            return saved
    typer.echo("No admin token available. Run the login command first.", err=True)
    raise typer.Exit(code=1)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _check(response: httpx.Response, *, not_found: str | None = None) -> Any:
    """Exit with the API's error detail for failed responses, else return the JSON body."""

    if response.status_code == 404 and not_found:
        typer.echo(not_found, err=True)
        raise typer.Exit(code=1)
    if response.status_code == 401:
        typer.echo("Unauthorized: admin token missing or expired.", err=True)
        raise typer.Exit(code=1)
    if response.is_error:
        try:
            detail = response.json().get("detail", response.text)
        except ValueError:
            detail = response.text
        typer.echo(f"Request failed ({response.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return response.json()


def _read_json_file(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        typer.echo(f"Unable to read {path}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except json.JSONDecodeError as exc:
        typer.echo(f"Invalid JSON in {path}: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def health(api_base: str = _api_base_option()) -> None:
    """Call the /health endpoint and pretty-print the response."""

    with create_client(api_base) as client:
        response = client.get("/health")
        response.raise_for_status()
        _echo_json(response.json())


@app.command()
def login(
    username: str = typer.Option("admin", help="Admin username."),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Admin password."),
    api_base: str = _api_base_option(),
) -> None:
    """Log in as admin, save the token locally and print it."""

    with create_client(api_base) as client:
        response = client.post("/api/admin/login", json={"username": username, "password": password})
        if response.status_code == 401:
            typer.echo("Invalid credentials", err=True)
            raise typer.Exit(code=1)
        payload = _check(response)

    token = payload["token"]
    ensure_parent_directory(_token_path()).write_text(token, encoding="utf-8")
    typer.echo(token)


@shows_app.command("list")
def list_shows(
    category: Optional[str] = typer.Option(None, help="Only shows in this category."),
    featured: Optional[bool] = typer.Option(
        None, "--featured/--not-featured", help="Filter on the featured flag.", show_default=False
    ),
    trending: Optional[bool] = typer.Option(
        None, "--trending/--not-trending", help="Filter on the trending flag.", show_default=False
    ),
    api_base: str = _api_base_option(),
) -> None:
    """List shows in the catalog."""

    params: dict[str, object] = {}
    if category:
        params["category"] = category
    if featured is not None:
        params["featured"] = featured
    if trending is not None:
        params["trending"] = trending

    with create_client(api_base) as client:
        _echo_json(_check(client.get("/api/shows", params=params)))


@shows_app.command("search")
def search_shows(
    query: str = typer.Argument(..., help="Search term matched against titles, genres and cast."),
    api_base: str = _api_base_option(),
) -> None:
    with create_client(api_base) as client:
        _echo_json(_check(client.get("/api/shows/search", params={"q": query})))


@shows_app.command("show")
def show_show(
    slug: str = typer.Argument(..., help="Slug of the show to display."),
    episodes: bool = typer.Option(False, "--episodes", help="Include the show's episodes."),
    api_base: str = _api_base_option(),
) -> None:
    """Display a single show, optionally with its episodes."""

    with create_client(api_base) as client:
        show = _check(client.get(f"/api/shows/{slug}"), not_found="Show not found")
        if episodes:
            show["episodes"] = _check(client.get(f"/api/episodes/{show['id']}"))
        _echo_json(show)


@shows_app.command("delete")
def delete_show(
    show_id: str = typer.Argument(..., help="Identifier of the show to delete."),
    token: Optional[str] = _token_option(),
    api_base: str = _api_base_option(),
) -> None:
    """Delete a show and all of its episodes."""

    with create_client(api_base, admin_token=_resolve_token(token)) as client:
        _echo_json(_check(client.delete(f"/api/admin/shows/{show_id}"), not_found="Show not found"))


@shows_app.command("add-from-tmdb")
def add_from_tmdb(
    title: Optional[str] = typer.Argument(None, help="Title to search for on TMDB."),
    tmdb_id: Optional[int] = typer.Option(None, "--tmdb-id", help="Exact TMDB id to use instead."),
    token: Optional[str] = _token_option(),
    api_base: str = _api_base_option(),
) -> None:
    """Create a show from TMDB metadata."""

    if title is None and tmdb_id is None:
        typer.echo("Provide a title or --tmdb-id.", err=True)
        raise typer.Exit(code=1)

    payload: dict[str, object] = {}
    if tmdb_id is not None:
        payload["tmdbId"] = tmdb_id
    else:
        payload["title"] = title

    with create_client(api_base, admin_token=_resolve_token(token)) as client:
        response = client.post("/api/admin/shows/tmdb", json=payload)
        _echo_json(_check(response, not_found="No matching show on TMDB"))


@episodes_app.command("import")
def import_episodes(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with episode rows."),
    slug: Optional[str] = typer.Option(
        None, "--slug", help="Target show slug; defaults to the file's showSlug."
    ),
    token: Optional[str] = _token_option(),
    api_base: str = _api_base_option(),
) -> None:
    """Bulk add episodes from a list of rows or a single-show import file."""

    data = _read_json_file(file)
    rows = data.get("episodes") if isinstance(data, dict) else data
    target = slug or (data.get("showSlug") if isinstance(data, dict) else None)
    if not target or not isinstance(rows, list):
        typer.echo("The file must contain an episode list and a --slug must be given.", err=True)
        raise typer.Exit(code=1)

    with create_client(api_base, admin_token=_resolve_token(token)) as client:
        response = client.post("/api/admin/episodes/bulk", json={"slug": target, "episodes": rows})
        _echo_json(_check(response, not_found=f'Show with slug "{target}" not found'))


@app.command("import-file")
def import_file(
    file: Path = typer.Argument(..., help="Single-show or multi-show export file."),
    create_missing: bool = typer.Option(
        False, "--create-missing", help="Create shows that are not in the catalog yet."
    ),
    on_server: bool = typer.Option(
        False, "--on-server", help="Treat FILE as a path on the API server instead of uploading it."
    ),
    token: Optional[str] = _token_option(),
    api_base: str = _api_base_option(),
) -> None:
    """Import a catalog export into the running service."""

    with create_client(api_base, admin_token=_resolve_token(token)) as client:
        if on_server:
            response = client.post(
                "/api/admin/import-file",
                json={"filePath": str(file), "createMissingShows": create_missing},
            )
        else:
            response = client.post(
                "/api/admin/import",
                params={"createMissingShows": create_missing},
                json=_read_json_file(file),
            )
        _echo_json(_check(response))


@app.command("prepare-bulk-import")
def prepare_bulk_import(
    source_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Scraper export directory."),
    output_dir: Path = typer.Argument(..., help="Directory receiving the import files."),
) -> None:
    """Reshape per-show scraper exports into single-show import files."""

    report = prepare_directory(source_dir, output_dir)
    for prepared in report.prepared:
        typer.echo(f"{prepared.title} -> {prepared.show_slug}.json ({len(prepared.episodes)} episodes)")
    typer.echo(f"Processed: {len(report.prepared)} shows, failed or skipped: {len(report.failed)}")


@app.command("migrate-data")
def migrate_data(
    data_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Catalog data file."),
) -> None:
    """Rewrite a catalog file with legacy fields normalized."""

    try:
        shows, episodes, _ = read_catalog_file(data_file)
        write_catalog_file(data_file, shows, episodes)
    except CatalogPersistenceError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Migrated {len(shows)} shows and {len(episodes)} episodes in {data_file}")


@indexnow_app.command("submit")
def indexnow_submit(
    site_url: Optional[str] = typer.Option(
        None, "--site-url", help="Public site URL; defaults to the configured base URL."
    ),
    key_file: Optional[Path] = typer.Option(
        None, "--key-file", help="IndexNow key file; created when missing."
    ),
    endpoint: Optional[str] = typer.Option(
        None, "--endpoint", help="IndexNow endpoint; defaults to the configured endpoint."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="List the URLs without submitting them."),
    api_base: str = _api_base_option(),
) -> None:
    """Submit every sitemap URL to IndexNow."""

    with create_client(api_base) as client:
        response = client.get("/sitemap.xml")
        response.raise_for_status()
        xml_text = response.text

    try:
        urls = extract_sitemap_urls(xml_text)
    except IndexNowError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if dry_run:
        typer.echo("\n".join(urls))
        typer.echo(f"{len(urls)} URLs found")
        return

    settings = CatalogSettings()
    key = load_or_create_key(key_file or default_state_dir() / INDEXNOW_KEY_FILE_NAME)
    result = IndexNowClient(
        site_url=site_url or settings.base_url,
        key=key,
        endpoint=endpoint or settings.indexnow_endpoint,
    ).submit(urls)
    _echo_json(
        {"submitted": result.submitted, "batches": result.batches, "failedBatches": result.failed_batches}
    )
    if result.failed_batches:
        raise typer.Exit(code=1)
