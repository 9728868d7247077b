"""Typer application and CLI entry point for spotapi.

Exposes the endpoint catalog for manual use::

    export SPOTAPI_TOKEN=...        # obtained by your OAuth flow
    spotapi artist 0OdUWJ0sBjDrqHygGUXeCF
    spotapi search "daft punk" --limit 5
    spotapi save-album 4m2880jivSbbyEGAKfITCa

GET commands go through the response cache unless ``--no-cache`` is
given. The :func:`main` function is the console-script entry point; it
maps :class:`~spotapi.exceptions.SpotApiError` to its exit code and
writes a crash log for anything unexpected.
"""

from __future__ import annotations

import asyncio
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Callable, Optional

import typer
from pydantic import TypeAdapter

from spotapi import __version__
from spotapi.exceptions import SpotApiError
from spotapi.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE
from spotapi.models import ClientConfig


app = typer.Typer(
    name="spotapi",
    help="Query the Spotify Web API from the command line.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
cache_app = typer.Typer(no_args_is_help=True)
app.add_typer(cache_app, name="cache", help="Response cache management.")
config_app = typer.Typer(no_args_is_help=True)
app.add_typer(config_app, name="config", help="View and change settings.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"spotapi {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the response cache."),
) -> None:
    """Resolve configuration and initialise output and logging from global flags.

    The resolved :class:`~spotapi.models.ClientConfig` and shared options
    are stored in ``ctx.obj`` for the sub-commands.
    """
    from spotapi.config import resolve_config
    from spotapi.output import OutputFormat, OutputManager, configure_logging, error, set_output

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    def _install(fmt: str) -> None:
        set_output(
            OutputManager(format=OutputFormat(fmt), no_color=no_color, quiet=quiet, verbose=verbose)
        )

    configure_logging(verbose)
    try:
        config = resolve_config(cli_format)
    except SpotApiError as exc:
        _install(cli_format or OutputFormat.AUTO.value)
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    _install(config.output.format)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["no_cache"] = no_cache


# ------------------------------------------------------------------ #
# Plumbing
# ------------------------------------------------------------------ #


def _make_client(config: ClientConfig):
    """Create the client used by commands (replaced in tests)."""
    from spotapi.client import SpotifyClient

    return SpotifyClient(config)


def _open_cache(config: ClientConfig):
    from pathlib import Path

    from spotapi.cache import ResponseCache
    from spotapi.config import get_cache_dir

    directory = Path(config.cache.directory) if config.cache.directory else get_cache_dir()
    return ResponseCache(directory, config.cache)


def _config(ctx: typer.Context) -> ClientConfig:
    return ctx.obj["config"]


def _execute(ctx: typer.Context, build: Callable[[Any], Any], expect_body: bool = True) -> Any:
    """Build a request with *build*, send it, and return the decoded payload.

    Returns ``None`` for requests sent without a body.
    """
    from spotapi.auth import load_token
    from spotapi.cache import fetch_cached
    from spotapi.output import error, response_info, warning

    config = _config(ctx)
    use_cache = expect_body and config.cache.enabled and not ctx.obj.get("no_cache")

    async def _run() -> Any:
        cache = _open_cache(config) if use_cache else None
        try:
            async with _make_client(config) as client:
                load_token(client.token_store, config)
                request = build(client)
                if not expect_body:
                    await request.send_no_response()
                    return None
                if cache is not None:
                    response = await fetch_cached(request, cache)
                else:
                    response = await request.send()
        finally:
            if cache is not None:
                cache.close()

        response_info(response.max_age, response.etag, response.from_cache)
        if response.is_not_modified:
            warning("Server reported 304 Not Modified and no cached copy exists")
            return None
        parsed = response.deserialize()
        if parsed is None:
            warning("Response did not match the expected shape; showing raw JSON")
            return response.json()
        return TypeAdapter(response.response_type).dump_python(
            parsed, mode="json", exclude_none=True
        )

    try:
        return asyncio.run(_run())
    except SpotApiError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _show(ctx: typer.Context, build: Callable[[Any], Any]) -> None:
    from spotapi.output import format_response

    data = _execute(ctx, build)
    if data is not None:
        format_response(data)


# ------------------------------------------------------------------ #
# Catalog commands
# ------------------------------------------------------------------ #


@app.command("artist")
def artist_command(ctx: typer.Context, artist_id: str = typer.Argument(help="Artist ID.")) -> None:
    """Show an artist."""
    _show(ctx, lambda client: client.get_artist(artist_id))


@app.command("artist-albums")
def artist_albums_command(
    ctx: typer.Context,
    artist_id: str = typer.Argument(help="Artist ID."),
    offset: int = typer.Option(0, "--offset", min=0),
    limit: int = typer.Option(20, "--limit", min=1, max=50),
) -> None:
    """List an artist's albums and singles."""
    _show(ctx, lambda client: client.get_artist_albums(artist_id, offset, limit))


@app.command("top-tracks")
def top_tracks_command(ctx: typer.Context, artist_id: str = typer.Argument(help="Artist ID.")) -> None:
    """Show an artist's top tracks in the token owner's market."""
    _show(ctx, lambda client: client.get_artist_top_tracks(artist_id))


@app.command("album")
def album_command(ctx: typer.Context, album_id: str = typer.Argument(help="Album ID.")) -> None:
    """Show an album."""
    _show(ctx, lambda client: client.get_album(album_id))


@app.command("playlist")
def playlist_command(
    ctx: typer.Context,
    playlist_id: str = typer.Argument(help="Playlist ID."),
    tracks: bool = typer.Option(False, "--tracks", help="List tracks page instead of the playlist."),
    offset: int = typer.Option(0, "--offset", min=0),
    limit: int = typer.Option(100, "--limit", min=1, max=100),
) -> None:
    """Show a playlist or one page of its tracks."""
    if tracks:
        _show(ctx, lambda client: client.get_playlist_tracks(playlist_id, offset, limit))
    else:
        _show(ctx, lambda client: client.get_playlist(playlist_id))


@app.command("user")
def user_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(help="User ID."),
    playlists: bool = typer.Option(False, "--playlists", help="List the user's playlists."),
    offset: int = typer.Option(0, "--offset", min=0),
    limit: int = typer.Option(20, "--limit", min=1, max=50),
) -> None:
    """Show a user profile or their public playlists."""
    if playlists:
        _show(ctx, lambda client: client.get_user_playlists(user_id, offset, limit))
    else:
        _show(ctx, lambda client: client.get_user(user_id))


@app.command("search")
def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(help="Search text."),
    offset: int = typer.Option(0, "--offset", min=0),
    limit: int = typer.Option(20, "--limit", min=1, max=50),
) -> None:
    """Search albums and artists."""
    _show(ctx, lambda client: client.search(query, offset, limit))


@app.command("saved-albums")
def saved_albums_command(
    ctx: typer.Context,
    offset: int = typer.Option(0, "--offset", min=0),
    limit: int = typer.Option(20, "--limit", min=1, max=50),
) -> None:
    """List albums saved in the token owner's library."""
    _show(ctx, lambda client: client.get_saved_albums(offset, limit))


@app.command("saved-playlists")
def saved_playlists_command(
    ctx: typer.Context,
    offset: int = typer.Option(0, "--offset", min=0),
    limit: int = typer.Option(20, "--limit", min=1, max=50),
) -> None:
    """List playlists followed by the token owner."""
    _show(ctx, lambda client: client.get_saved_playlists(offset, limit))


@app.command("album-saved")
def album_saved_command(ctx: typer.Context, album_id: str = typer.Argument(help="Album ID.")) -> None:
    """Check whether an album is in the token owner's library."""
    from spotapi.output import print_table

    data = _execute(ctx, lambda client: client.is_album_saved(album_id))
    if data is not None:
        saved = bool(data and data[0])
        print_table(["album", "saved"], [[album_id, "yes" if saved else "no"]])


@app.command("save-album")
def save_album_command(ctx: typer.Context, album_id: str = typer.Argument(help="Album ID.")) -> None:
    """Add an album to the token owner's library."""
    from spotapi.output import success

    _execute(ctx, lambda client: client.save_album(album_id), expect_body=False)
    success(f"Saved album {album_id}.")


@app.command("remove-album")
def remove_album_command(ctx: typer.Context, album_id: str = typer.Argument(help="Album ID.")) -> None:
    """Remove an album from the token owner's library."""
    from spotapi.output import success

    _execute(ctx, lambda client: client.remove_saved_album(album_id), expect_body=False)
    success(f"Removed album {album_id}.")


# ------------------------------------------------------------------ #
# Cache commands
# ------------------------------------------------------------------ #


@cache_app.command("stats")
def cache_stats_command(ctx: typer.Context) -> None:
    """Show response cache statistics."""
    from spotapi.output import error, print_table

    config = _config(ctx)
    try:
        cache = _open_cache(config)
        stats = cache.stats()
        cache.close()
    except SpotApiError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    print_table(["key", "value"], [[k, str(v)] for k, v in stats.items()])


@cache_app.command("clear")
def cache_clear_command(ctx: typer.Context) -> None:
    """Delete every cached response."""
    from spotapi.output import error, success

    config = _config(ctx)
    try:
        cache = _open_cache(config)
        removed = cache.clear()
        cache.close()
    except SpotApiError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f"Removed {removed} cached response(s).")


# ------------------------------------------------------------------ #
# Config commands
# ------------------------------------------------------------------ #


def _coerce_setting(current: Any, value: str) -> Any:
    """Convert *value* to the type of the setting it replaces."""
    if isinstance(current, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value


@config_app.command("show")
def config_show_command(ctx: typer.Context) -> None:
    """Show the effective configuration (file plus environment overrides)."""
    from spotapi.config import config_path
    from spotapi.output import format_response, info

    info(f"Config file: {config_path()}")
    format_response(_config(ctx).model_dump(mode="json"))


@config_app.command("set")
def config_set_command(
    key: str = typer.Argument(help="Dotted setting name, e.g. 'cache.enabled' or 'output.format'."),
    value: str = typer.Argument(help="New value."),
) -> None:
    """Write one setting to the config file.

    Example::

        spotapi config set output.format json
        spotapi config set request.timeout 10
        spotapi config set token_source file:~/.spotify-token
    """
    from pydantic import ValidationError

    from spotapi.config import load_config, save_config
    from spotapi.output import error, success

    data = load_config().model_dump(mode="json")
    *parents, name = key.split(".")
    target = data
    for part in parents:
        if not isinstance(target.get(part), dict):
            error(f"Unknown config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[part]
    if name not in target or isinstance(target[name], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    try:
        target[name] = _coerce_setting(target[name], value)
        config = ClientConfig.model_validate(data)
    except (ValueError, ValidationError) as exc:
        error(f"Invalid value for {key}: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_config(config)
    success(f"Set {key} = {target[name]}")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback under the data directory and return its path."""
    from spotapi.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point invoked by the ``spotapi`` console script.

    :class:`~spotapi.exceptions.SpotApiError` instances that escape a
    command exit with the error's ``exit_code``. Any other exception
    produces a crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app(args=argv)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from spotapi.output import error

        if isinstance(exc, SpotApiError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
