"""figuredbass CLI entry point."""

import logging
import sys

import click

from figuredbass import __version__
from figuredbass.annotation import parse_annotation
from figuredbass.config import LayoutSettings, load_config
from figuredbass.errors import ConfigError
from figuredbass.glyph_table import GlyphRegistry
from figuredbass.interchange import musicxml_string, to_musicxml
from figuredbass.item_encoder import display_text_by_name
from figuredbass.layout import StackLayout
from figuredbass.models import FiguredBass
from figuredbass.timeline import TickTimeline


def _decode_text(text: str) -> str:
    r"""Let users type line breaks as a literal ``\n`` on the command line."""
    return text.replace("\\n", "\n")


def _parse_ticks(value: str) -> list[int]:
    """Convert a comma-separated tick list such as ``0,480,960``."""
    if not value.strip():
        return []
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError as exc:
        raise click.BadParameter(f"expected comma-separated integers, got {value!r}") from exc


def _load(config_path: str | None) -> tuple[GlyphRegistry, LayoutSettings]:
    try:
        cfg = load_config(config_path)
        return GlyphRegistry.from_config(cfg), LayoutSettings.from_config(cfg)
    except ConfigError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)


def _echo_fallback(annotation: FiguredBass) -> None:
    click.echo("  Status : not parsed, kept as plain text")
    for line in annotation.raw_text.splitlines() or [""]:
        click.echo(f"    | {line}")


config_option = click.option(
    "--config",
    "config_path",
    default=None,
    metavar="PATH",
    type=click.Path(dir_okay=False),
    help="YAML configuration merged over the packaged font tables.",
)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="figuredbass")
@click.option("--verbose", "-v", is_flag=True, help="Log parser fallbacks and layout decisions.")
def main(verbose: bool) -> None:
    """figuredbass — figured-bass annotation parser and stack layout."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── parse subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("text")
@click.option("--font", default=None, metavar="NAME", help="Glyph table used for display text.")
@config_option
def parse(text: str, font: str | None, config_path: str | None) -> None:
    r"""
    Parse an annotation and show its items, normalized and display text.

    TEXT holds one item per line; type line breaks as \n.

    \b
    Examples:
      figuredbass parse "6\n4"
      figuredbass parse "#6\\" --font ASCII
    """
    registry, settings = _load(config_path)
    glyphs = registry.get_or_default(font)
    annotation = parse_annotation(_decode_text(text))

    click.echo(f"figuredbass v{__version__}")
    click.echo(f"  Font   : {glyphs.display_name}")
    if not annotation.is_parsed:
        _echo_fallback(annotation)
        sys.exit(1)

    click.echo(f"  Items  : {len(annotation.items)}")
    for item in annotation.items:
        digit = "-" if item.digit is None else str(item.digit)
        parens = " ".join(p.name.lower() for p in item.parentheses)
        click.echo(
            f"    [{item.order}] prefix={item.prefix.name.lower():<12} digit={digit} "
            f"suffix={item.suffix.name.lower():<12} line={'yes' if item.continuation_line else 'no'}"
        )
        click.echo(f"        parentheses: {parens}")
        click.echo(f"        normalized : {item.normalized_text}")
        click.echo(f"        display    : {display_text_by_name(item, registry, glyphs.display_name, settings.style)}")


# ── fonts subcommand ───────────────────────────────────────────────────────────

@main.command()
@config_option
def fonts(config_path: str | None) -> None:
    """List the configured glyph tables."""
    registry, _ = _load(config_path)
    for name in registry.names():
        font = registry.get(name)
        marker = "*" if name == registry.default_name else " "
        click.echo(
            f"{marker} {name:<16} family={font.family!r}  pitch={font.default_pitch:g}  "
            f"line height={font.default_line_height:g}"
        )


# ── layout subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("text")
@click.option("--tick", type=click.IntRange(min=0), default=0, show_default=True, help="Position of the annotation.")
@click.option(
    "--ticks",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Duration the annotation spans.",
)
@click.option("--onsets", default="", metavar="LIST", help="Comma-separated note onset ticks on the staff.")
@click.option(
    "--figured-bass",
    "figured_bass",
    default="",
    metavar="LIST",
    help="Comma-separated ticks of the other figured bass annotations on the staff.",
)
@click.option("--end", "end_tick", type=click.IntRange(min=0), default=None, help="End of the piece in ticks.")
@click.option("--font", default=None, metavar="NAME", help="Glyph table used for widths.")
@config_option
def layout(
    text: str,
    tick: int,
    ticks: int,
    onsets: str,
    figured_bass: str,
    end_tick: int | None,
    font: str | None,
    config_path: str | None,
) -> None:
    r"""
    Lay out one annotation: alignment offsets, widths and continuation lines.

    \b
    Examples:
      figuredbass layout "6_\n4" --ticks 480 --onsets 0,960 --end 1920
    """
    registry, settings = _load(config_path)
    onset_ticks = _parse_ticks(onsets)
    fb_ticks = _parse_ticks(figured_bass)
    if end_tick is None:
        end_tick = max([tick + ticks, *onset_ticks, *fb_ticks])

    timeline = TickTimeline(
        onsets={0: onset_ticks},
        figured_bass={0: fb_ticks},
        end_tick=end_tick,
        units_per_tick=settings.units_per_tick,
    )
    annotation = parse_annotation(_decode_text(text), ticks=ticks, tick=tick)
    placement = StackLayout(registry, font, settings).layout(annotation, timeline)

    click.echo(f"figuredbass v{__version__}")
    click.echo(f"  Font   : {placement.font}")
    if not annotation.is_parsed:
        _echo_fallback(annotation)
        sys.exit(1)

    for item in placement.items:
        click.echo(
            f"    [{item.order}] {item.text:<10} offset={item.x_offset:g} width={item.width:g} "
            f"y={item.y:g} line={item.line_length:g}"
        )


# ── musicxml subcommand ────────────────────────────────────────────────────────

@main.command()
@click.argument("text")
@click.option("--ticks", type=click.IntRange(min=0), default=0, show_default=True, help="Duration in ticks.")
@click.option(
    "--divisions",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="MusicXML divisions per quarter note.",
)
def musicxml(text: str, ticks: int, divisions: int) -> None:
    """Print the MusicXML <figured-bass> element for an annotation."""
    annotation = parse_annotation(_decode_text(text), ticks=ticks)
    if not annotation.is_parsed:
        click.echo("  ERROR: annotation does not parse; nothing to export.", err=True)
        sys.exit(1)
    click.echo(musicxml_string(to_musicxml(annotation, divisions)))
