#!filepath: eod_positions/cli.py
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich import print
from rich.markup import escape

from eod_positions import __version__, logs
from eod_positions.config.app_config import AppConfig
from eod_positions.engines.events import RunStatistics
from eod_positions.utils.errors import PositionCalcError

app = typer.Typer(help="End of day position calculation CLI")


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def run(
    positions: Optional[Path] = typer.Argument(None, help="Start of day positions file"),
    transactions: Optional[Path] = typer.Argument(None, help="Transactions JSON file"),
    output: Optional[Path] = typer.Argument(None, help="End of day positions output file"),
    errors: Optional[Path] = typer.Argument(None, help="Malformed position records output file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
):
    """
    Apply the day's transactions to the start of day positions.
    Omitted paths come from the config (data.data_dir + default file names).
    """
    from eod_positions.workflows.eod_pipeline import run_eod

    try:
        cfg = AppConfig.load(str(config) if config else None)
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    logs.setup(
        log_dir=cfg.log.dir,
        rotation=cfg.log.rotation,
        retention=cfg.log.retention,
        log_level=cfg.log.level,
    )

    try:
        ctx = run_eod(positions, transactions, output, errors, cfg=cfg)
    except PositionCalcError as e:
        print("[red]End of day position calculation process is finished with issues.[/red]")
        print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    print("[green]End of day position calculation for instruments file is completed.[/green]")
    for line in report_lines(ctx.stats):
        print(escape(line))


def report_lines(stats: RunStatistics) -> list[str]:
    lines = []
    if stats.has_max:
        lines.append(f"{stats.max_instrument} has largest net transaction volume {stats.max_abs_delta}")
    if stats.has_min:
        lines.append(f"{stats.min_instrument} has lowest net transaction volume {stats.min_abs_delta}")
    return lines


if __name__ == "__main__":
    app()

# python -m eod_positions run Input_StartOfDay_Positions.txt Input_Transactions.txt \
#     Expected_EndOfDay_Positions.txt Input_StartOfDay_Positions_Error_Records.txt
