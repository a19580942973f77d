from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ndf import __version__
from ndf.collectors.disk import list_mounts
from ndf.config import DEFAULT_CONFIG, ConfigError, dump_config, load_config
from ndf.filters import FilterConfig, filter_mounts
from ndf.layouts import DisplayMode, render

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog="Example: ndf compact --exclude-mp /boot,/boot/efi",
)

log = logging.getLogger(__name__)

DEFAULT_TERMINAL_SIZE = (80, 24)


def setup_logging(verbose: bool) -> None:
    """Diagnostics go to stderr so they never mix with the rendered output."""
    logger = logging.getLogger("ndf")
    logger.handlers.clear()
    logger.addHandler(
        RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
        )
    )
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def terminal_width(override: Optional[int] = None) -> int:
    if override is not None:
        return override
    return shutil.get_terminal_size(DEFAULT_TERMINAL_SIZE).columns


@app.command()
def main(
    mode: DisplayMode = typer.Argument(DisplayMode.TABLE, help="Layout: normal, compact or table."),
    only_mp: Optional[str] = typer.Option(
        None,
        "--only-mp",
        help="Comma-separated mount points to show (all others are hidden).",
    ),
    exclude_mp: Optional[str] = typer.Option(
        None,
        "--exclude-mp",
        help="Comma-separated mount points to hide.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML file overriding built-in exclusions and bar widths.",
    ),
    width: Optional[int] = typer.Option(
        None, "--width", min=1, help="Terminal width for the table layout (default: detected)."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show diagnostics on stderr."),
    show_config: bool = typer.Option(False, "--show-config", help="Print the effective config as YAML and exit."),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Show disk usage of mounted filesystems as colored bars."""
    if version:
        typer.echo(f"ndf {__version__}")
        raise typer.Exit()

    setup_logging(verbose)

    cfg = DEFAULT_CONFIG
    if config is not None:
        try:
            cfg = load_config(config)
        except ConfigError as e:
            typer.echo(f"[ndf] {e}", err=True)
            raise typer.Exit(code=1)
        log.debug("config loaded from %s", config)

    if show_config:
        typer.echo(dump_config(cfg), nl=False)
        raise typer.Exit()

    filter_cfg = FilterConfig.from_cli(only_mp, exclude_mp, rules=cfg.rules())
    mounts = filter_mounts(list_mounts(), filter_cfg)
    log.debug("%d mount(s) after filtering", len(mounts))

    lines = render(
        mode,
        mounts,
        terminal_width(width),
        normal_bar_width=cfg.normal_bar_width,
        compact_bar_width=cfg.compact_bar_width,
        table_min_bar_width=cfg.table_min_bar_width,
    )

    console = Console(highlight=False, no_color=no_color, soft_wrap=True)
    for line in lines:
        console.print(line)


def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
