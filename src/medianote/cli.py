"""CLI entry point: subtitle import, timestamp links, screenshots, and OCR."""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from medianote import __version__
from medianote.config import CONFIG_PATH, PLAYER_BACKENDS, Settings, init_config_if_missing, load_config
from medianote.errors import MediaNoteError, PlayerUnavailableError
from medianote.links import annotate_timestamps, iter_links, next_link, previous_link
from medianote.logging_setup import setup_logging
from medianote.media import find_media_for_subtitle, is_url, link_scheme_for
from medianote.notes import NoteLog, NoteTaker
from medianote.ocr import run_ocr
from medianote.output import copy_to_clipboard, insert_text, subtitle_heading
from medianote.player import Player, create_player
from medianote.subtitles import load_subtitle_file
from medianote.timestamps import format_timestamp

logger = logging.getLogger(__name__)

console = Console(highlight=False)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _reports_errors(func):
    """Print medianote errors as one red line and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MediaNoteError as exc:
            logger.debug("Command failed", exc_info=True)
            console.print(f"  [red bold]Error:[/red bold] {escape(str(exc))}")
            sys.exit(1)

    return wrapper


def _settings(ctx: click.Context) -> Settings:
    return ctx.find_root().obj["settings"]


def _player(ctx: click.Context) -> Player:
    """The player adapter for this invocation, created on first use."""
    obj = ctx.find_root().obj
    if obj.get("player") is None:
        obj["player"] = create_player(obj["settings"])
    return obj["player"]


def _emit(
    text: str,
    settings: Settings,
    org_file: str | None = None,
    heading: str | None = None,
    clipboard: bool = False,
) -> None:
    """Send generated text to the Org file (or stdout) and maybe the clipboard."""
    if org_file:
        path = insert_text(org_file, text, heading=heading)
        console.print(f"  [green]Saved[/green]       [dim]{escape(str(path))}[/dim]")
    else:
        click.echo(text if text.endswith("\n") else text + "\n", nl=False)

    # stdout carries the text itself when there is no Org file
    if (clipboard or settings.auto_clipboard) and copy_to_clipboard(text) and org_file:
        console.print("  [green]Clipboard[/green]   copied")


def _resolve_media(ctx: click.Context, media: str | None, subtitle: Path) -> str:
    """Media reference for subtitle links: --media, a file beside the subtitle, or the player."""
    if media:
        return media if is_url(media) else str(Path(media).expanduser().resolve())

    found = find_media_for_subtitle(subtitle)
    if found is not None:
        return str(found.resolve())

    try:
        playing = _player(ctx).get_path()
    except PlayerUnavailableError:
        playing = None
    if playing:
        return playing
    raise click.UsageError(
        f"No media found for {subtitle.name}. Pass --media or start the player first."
    )


# ---------------------------------------------------------------------------
# Main command group
# ---------------------------------------------------------------------------

@click.group()
@click.option(
    "--backend",
    type=click.Choice(PLAYER_BACKENDS),
    default=None,
    help="Player backend (default from config).",
)
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging.")
@click.version_option(__version__, prog_name="medianote")
@click.pass_context
@_reports_errors
def main(ctx: click.Context, backend: str | None, debug: bool) -> None:
    """medianote: timestamped Org notes for audio and video."""
    setup_logging(debug=debug, command=ctx.invoked_subcommand)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = Settings.from_config(player_backend=backend)
    ctx.obj["player"] = None


# ---------------------------------------------------------------------------
# import subcommand
# ---------------------------------------------------------------------------

@main.command(name="import")
@click.argument("subtitle", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--link/--no-link", default=False, help="Turn paragraph timestamps into media links.")
@click.option("--media", type=str, default=None, help="Media file or URL the links point to.")
@click.option("-o", "--org", "org_file", type=click.Path(dir_okay=False), help="Append to this Org file.")
@click.option("--heading", type=str, default=None, help="Heading for the imported text.")
@click.option("--fill-column", type=click.IntRange(min=1), default=None, help="Paragraph fill width.")
@click.option("--clipboard", is_flag=True, default=False, help="Also copy the text to the clipboard.")
@click.pass_context
@_reports_errors
def import_cmd(
    ctx: click.Context,
    subtitle: Path,
    link: bool,
    media: str | None,
    org_file: str | None,
    heading: str | None,
    fill_column: int | None,
    clipboard: bool,
) -> None:
    """Import a subtitle file (srv1, srv2, srv3, ttml, vtt) as note paragraphs."""
    settings = _settings(ctx)
    text = load_subtitle_file(subtitle, fill_column or settings.fill_column)

    if link:
        media_ref = _resolve_media(ctx, media, subtitle)
        text = annotate_timestamps(text, media_ref, link_scheme_for(media_ref))

    if not text:
        console.print(f"  [yellow]No captions found in {escape(subtitle.name)}.[/yellow]")
        return

    _emit(
        text,
        settings,
        org_file=org_file,
        heading=heading or (subtitle_heading(subtitle) if org_file else None),
        clipboard=clipboard,
    )


# ---------------------------------------------------------------------------
# player-driven subcommands
# ---------------------------------------------------------------------------

@main.command()
@click.option("-o", "--org", "org_file", type=click.Path(dir_okay=False), help="Append to this Org file.")
@click.option("--clipboard", is_flag=True, default=False, help="Also copy the link to the clipboard.")
@click.pass_context
@_reports_errors
def link(ctx: click.Context, org_file: str | None, clipboard: bool) -> None:
    """Timestamp link for the current playback position."""
    settings = _settings(ctx)
    text = NoteTaker(_player(ctx), settings).insert_link()
    _emit(text, settings, org_file=org_file, clipboard=clipboard)


@main.command()
@click.argument("target")
@click.pass_context
@_reports_errors
def play(ctx: click.Context, target: str) -> None:
    """Open a timestamp link: [[video:file::00:01:02][...]] or video:file::00:01:02."""
    followed = NoteTaker(_player(ctx), _settings(ctx)).follow_link(target)
    where = format_timestamp(followed.offset) if followed.offset else "start"
    console.print(f"  [green]Playing[/green]     {escape(Path(followed.path).name)} at {where}")


@main.command()
@click.argument("org_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--after", type=click.IntRange(min=0), default=None, help="Show the first link after this line.")
@click.option("--before", type=click.IntRange(min=1), default=None, help="Show the last link before this line.")
@click.option("--play", "play_it", is_flag=True, default=False, help="Open the link found with --after/--before.")
@click.pass_context
@_reports_errors
def links(
    ctx: click.Context,
    org_file: Path,
    after: int | None,
    before: int | None,
    play_it: bool,
) -> None:
    """List media links in an Org file, or find the next/previous one."""
    if after is not None and before is not None:
        raise click.UsageError("Use either --after or --before, not both.")
    text = org_file.read_text(encoding="utf-8")

    if after is None and before is None:
        if play_it:
            raise click.UsageError("--play needs --after or --before.")
        found = list(iter_links(text))
        if not found:
            console.print("  [dim]No media links.[/dim]")
        for item in found:
            stamp = format_timestamp(item.offset) if item.offset is not None else "--:--:--"
            console.print(f"  {item.line:>5}  {stamp}  [dim]{escape(item.path)}[/dim]")
        return

    item = next_link(text, after) if after is not None else previous_link(text, before)
    if item is None:
        console.print("  [dim]No link in that direction.[/dim]")
        sys.exit(1)
    stamp = format_timestamp(item.offset) if item.offset is not None else "--:--:--"
    console.print(f"  {item.line:>5}  {stamp}  [dim]{escape(item.path)}[/dim]")
    if play_it:
        NoteTaker(_player(ctx), _settings(ctx)).follow_link(item)


@main.command()
@click.option("-o", "--org", "org_file", type=click.Path(dir_okay=False), help="Append to this Org file.")
@click.option("--dir", "directory", type=click.Path(file_okay=False), default=None, help="Screenshot folder.")
@click.option("--ocr", "with_ocr", is_flag=True, default=False, help="Also OCR the screenshot.")
@click.pass_context
@_reports_errors
def screenshot(ctx: click.Context, org_file: str | None, directory: str | None, with_ocr: bool) -> None:
    """Capture the current frame and print an Org file link to it."""
    settings = _settings(ctx)
    taker = NoteTaker(_player(ctx), settings)
    image, text = taker.screenshot(directory)
    if with_ocr:
        ocr_text = run_ocr(image, settings)
        if ocr_text:
            text = f"{text}\n{ocr_text}"
    _emit(text, settings, org_file=org_file)


@main.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--org", "org_file", type=click.Path(dir_okay=False), help="Append to this Org file.")
@click.pass_context
@_reports_errors
def ocr(ctx: click.Context, image: Path, org_file: str | None) -> None:
    """Run OCR on an image file."""
    settings = _settings(ctx)
    text = run_ocr(image, settings)
    if not text:
        console.print("  [yellow]No text recognised.[/yellow]")
        return
    _emit(text, settings, org_file=org_file)


@main.command()
@click.pass_context
@_reports_errors
def pause(ctx: click.Context) -> None:
    """Toggle pause."""
    paused = _player(ctx).toggle_pause()
    console.print("  Paused" if paused else "  Playing")


@main.command()
@click.pass_context
@_reports_errors
def stop(ctx: click.Context) -> None:
    """Stop the player."""
    _player(ctx).kill()
    console.print("  Stopped")


# ---------------------------------------------------------------------------
# session subcommand
# ---------------------------------------------------------------------------

_SESSION_HELP = "l=link  s=screenshot  o=ocr  p=pause  q=quit  (other text: note with link)"


@main.command()
@click.argument("media")
@click.option("-o", "--org", "org_file", type=click.Path(dir_okay=False), help="Append notes to this Org file.")
@click.pass_context
@_reports_errors
def session(ctx: click.Context, media: str, org_file: str | None) -> None:
    """Play MEDIA and take notes interactively."""
    settings = _settings(ctx)
    player = _player(ctx)
    taker = NoteTaker(player, settings)
    log = NoteLog()

    target = media if is_url(media) else str(Path(media).expanduser().resolve())
    player.start(target)
    console.print(f"  [green]Playing[/green]     {escape(Path(target).name)}")
    console.print(f"  [dim]{_SESSION_HELP}[/dim]")

    while True:
        command = click.prompt("  note", default="l", show_default=False).strip()
        if command == "q":
            break
        try:
            if command == "p":
                console.print("  Paused" if player.toggle_pause() else "  Playing")
                continue
            _, offset = taker.current()
            if command == "l":
                snippet = log.add("link", taker.insert_link(), offset)
            elif command == "s":
                snippet = log.add("screenshot", taker.screenshot()[1], offset)
            elif command == "o":
                _, text = taker.ocr_screenshot()
                snippet = log.add("ocr", text, offset)
            else:
                snippet = log.add("link", f"{taker.insert_link()}{command}", offset)
        except MediaNoteError as exc:
            console.print(f"  [red]{escape(str(exc))}[/red]")
            continue

        if org_file:
            insert_text(org_file, snippet.text)
        console.print(f"  [dim]{format_timestamp(snippet.offset)}[/dim] {escape(snippet.text)}")

    player.kill()
    console.print(f"  {len(log.snippets)} notes taken.")
    if not org_file and log.snippets:
        click.echo(log.as_text())


# ---------------------------------------------------------------------------
# setup / config subcommands
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def setup(ctx: click.Context) -> None:
    """Check dependencies and create the default config."""
    from medianote.platform_setup import run_all_checks

    created = init_config_if_missing()
    if created:
        console.print(f"  Created default config at [dim]{CONFIG_PATH}[/dim]")
    else:
        console.print(f"  Config already exists at [dim]{CONFIG_PATH}[/dim]")

    console.print()
    all_ok = True
    for name, ok, msg in run_all_checks(_settings(ctx)):
        icon = "[green]OK[/green]" if ok else "[red]MISSING[/red]"
        console.print(f"  [{icon}] {name}: {escape(msg)}")
        if not ok:
            all_ok = False

    console.print()
    if all_ok:
        console.print("  [green]All checks passed.[/green]")
    else:
        console.print("  [yellow]Some checks failed.[/yellow] See above for install instructions.")


@main.command()
@click.option("--show", is_flag=True, help="Show current config values.")
def config(show: bool) -> None:
    """Show or edit configuration."""
    if show:
        cfg = load_config()
        for key, val in cfg.items():
            console.print(f"  [bold]{key}:[/bold] {escape(repr(val))}")
    else:
        console.print(f"  Config file: [dim]{CONFIG_PATH}[/dim]")
        console.print("  Edit it directly, or use [bold]'medianote config --show'[/bold] to view current values.")
