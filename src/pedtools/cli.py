"""pedtools command-line interface.

This module provides a Typer-based CLI for checking, renumbering and
computing inbreeding and A-inverse from pedigree files. Results are printed
to stdout; a run log is written to ``{outdir}/{prefix}.log.txt``.
"""

import sys
import time
from pathlib import Path
from typing import Annotated

import numpy as np
import scipy.sparse
import typer

import pedtools
from pedtools.core import OutputConfig, PedigreeFileConfig
from pedtools.inbreeding import get_inb
from pedtools.io import read_ped
from pedtools.pedigree import Pedigree, check_ped, find_ped_order, permute_ped
from pedtools.relationship import get_nrminv
from pedtools.utils import setup_logging, write_run_log

app = typer.Typer(
    name="pedtools",
    help="pedtools: pedigree checks, inbreeding and relationship matrices.",
    add_completion=False,
)

# Store global options set by callback
_global_config: OutputConfig | None = None

PedFileOption = Annotated[
    Path,
    typer.Option("-p", "--ped", help="Pedigree file (animal sire dam)"),
]
IntegerOption = Annotated[
    bool,
    typer.Option("--integer", help="IDs are integer codes"),
]
HasUpgOption = Annotated[
    bool,
    typer.Option(
        "--has-upg",
        help="Integer parent codes above the largest animal are groups",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pedtools version {pedtools.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    outdir: Annotated[
        Path,
        typer.Option("-outdir", help="Output directory"),
    ] = Path("output"),
    output: Annotated[
        str,
        typer.Option("-o", help="Output file prefix"),
    ] = "result",
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Verbose output"),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """pedtools: pedigree processing for animal breeding.

    Validates and renumbers pedigrees, and computes inbreeding coefficients
    and the inverse of the numerator relationship matrix.
    """
    global _global_config
    _global_config = OutputConfig(outdir=outdir, prefix=output, verbose=verbose)
    setup_logging(verbose=verbose, sink=sys.stderr)


def _get_config() -> OutputConfig:
    global _global_config
    if _global_config is None:
        _global_config = OutputConfig()
    return _global_config


def _load(pedfile: Path, integer: bool, has_upg: bool) -> tuple[Pedigree, list[str]]:
    """Read a pedigree file; returns the pedigree and labels for codes 1..n."""
    if not pedfile.exists():
        typer.echo(f"Error: Pedigree file not found: {pedfile}", err=True)
        raise typer.Exit(code=1)

    try:
        source = PedigreeFileConfig(pedfile, integer=integer, has_upg=has_upg)
        if source.integer:
            ped = read_ped(
                source.path, integer=True, order=source.order, has_upg=source.has_upg
            )
            labels = [str(code) for code in range(1, ped.n + 1)]
        else:
            ped, idtable = read_ped(source.path, order=source.order)
            labels = [""] * ped.n
            for id_, code in idtable.items():
                if 1 <= code <= ped.n:
                    labels[code - 1] = id_
    except ValueError as e:
        typer.echo(f"Error loading pedigree file: {e}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(f"Loaded {ped.n} individuals from {pedfile}", err=True)
    return ped, labels


@app.command("check")
def check_command(
    pedfile: PedFileOption,
    integer: IntegerOption = False,
    has_upg: HasUpgOption = False,
    parents_first: Annotated[
        bool,
        typer.Option("--parents-first", help="Also require ancestor-first codes"),
    ] = False,
) -> None:
    """Validate a pedigree.

    Checks that no individual is both a sire and a dam and that there are
    no loops, optionally also that parents are coded before progeny.
    Exits with code 1 if the pedigree fails.
    """
    start_time = time.perf_counter()
    config = _get_config()
    config.ensure_outdir()
    command_line = " ".join(sys.argv)

    ped, _labels = _load(pedfile, integer, has_upg)
    try:
        result = check_ped(ped, parents_first=parents_first, warn=False)
    except RuntimeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    if result:
        typer.echo("Pedigree OK")
    else:
        typer.echo(f"Pedigree check failed: {result.message}")

    params = {
        "pedigree_file": str(pedfile),
        "n_animals": ped.n,
        "n_upg": ped.n_upg,
        "parents_first": parents_first,
        "passed": result.passed,
        "problem": result.message,
    }
    timing = {"total": time.perf_counter() - start_time}
    log_path = write_run_log(config, params, timing, command_line)
    typer.echo(f"Log written to {log_path}", err=True)

    if not result:
        raise typer.Exit(code=1)


@app.command("renum")
def renum_command(
    pedfile: PedFileOption,
    integer: IntegerOption = False,
    has_upg: HasUpgOption = False,
) -> None:
    """Renumber a pedigree so that parents precede progeny.

    Prints ``id newcode sire dam`` in new code order, with parents given
    as new codes (0 unknown, group codes unchanged).
    """
    start_time = time.perf_counter()
    config = _get_config()
    config.ensure_outdir()
    command_line = " ".join(sys.argv)

    ped, labels = _load(pedfile, integer, has_upg)
    try:
        order = find_ped_order(ped)
        permute_ped(order.invp, ped)
    except (ValueError, RuntimeError) as e:
        typer.echo(f"Error renumbering pedigree: {e}", err=True)
        raise typer.Exit(code=1) from None

    for new in range(1, ped.n + 1):
        old = int(order.perm[new - 1])
        sire, dam = ped.parents(new)
        typer.echo(f"{labels[old - 1]} {new} {sire} {dam}")

    params = {
        "pedigree_file": str(pedfile),
        "n_animals": ped.n,
        "n_upg": ped.n_upg,
        "n_moved": int(np.count_nonzero(order.perm != np.arange(1, ped.n + 1))),
    }
    timing = {"total": time.perf_counter() - start_time}
    log_path = write_run_log(config, params, timing, command_line)
    typer.echo(f"Log written to {log_path}", err=True)


@app.command("inb")
def inb_command(
    pedfile: PedFileOption,
    integer: IntegerOption = False,
    has_upg: HasUpgOption = False,
    sort: Annotated[
        bool,
        typer.Option(
            "--sort/--no-sort",
            help="Reorder internally (default) or require ancestor-first codes",
        ),
    ] = True,
) -> None:
    """Compute inbreeding coefficients (Meuwissen & Luo).

    Prints ``id f`` for every individual in file code order.
    """
    start_time = time.perf_counter()
    config = _get_config()
    config.ensure_outdir()
    command_line = " ".join(sys.argv)

    ped, labels = _load(pedfile, integer, has_upg)
    try:
        f = get_inb(ped, check=True, sort_here=sort, show_progress=config.verbose)
    except (ValueError, RuntimeError) as e:
        typer.echo(f"Error computing inbreeding: {e}", err=True)
        raise typer.Exit(code=1) from None
    inb_time = time.perf_counter() - start_time

    for label, value in zip(labels, f):
        typer.echo(f"{label} {value:.10g}")

    params = {
        "pedigree_file": str(pedfile),
        "n_animals": ped.n,
        "n_inbred": int(np.count_nonzero(f > 0)),
        "mean_f": f"{float(f.mean()) if f.size else 0.0:.6f}",
        "max_f": f"{float(f.max()) if f.size else 0.0:.6f}",
    }
    timing = {"total": time.perf_counter() - start_time, "inbreeding": inb_time}
    log_path = write_run_log(config, params, timing, command_line)
    typer.echo(f"Log written to {log_path}", err=True)


@app.command("ainv")
def ainv_command(
    pedfile: PedFileOption,
    integer: IntegerOption = False,
    has_upg: HasUpgOption = False,
    inbreeding: Annotated[
        bool,
        typer.Option(
            "--inbreeding/--no-inbreeding",
            help="Account for inbreeding in Mendelian sampling variances",
        ),
    ] = True,
) -> None:
    """Compute the inverse of the numerator relationship matrix.

    Prints the upper triangle as ``row col value`` in code order. Group
    codes above the number of individuals get their own rows.
    """
    start_time = time.perf_counter()
    config = _get_config()
    config.ensure_outdir()
    command_line = " ".join(sys.argv)

    ped, _labels = _load(pedfile, integer, has_upg)
    try:
        f = get_inb(ped, check=True, sort_here=True) if inbreeding else None
        Ainv = get_nrminv(ped, f)
    except (ValueError, RuntimeError) as e:
        typer.echo(f"Error computing A-inverse: {e}", err=True)
        raise typer.Exit(code=1) from None

    upper = scipy.sparse.triu(Ainv).tocoo()
    order = np.lexsort((upper.col, upper.row))
    for k in order:
        typer.echo(f"{upper.row[k] + 1} {upper.col[k] + 1} {upper.data[k]:.10g}")

    params = {
        "pedigree_file": str(pedfile),
        "n_animals": ped.n,
        "n_upg": ped.n_upg,
        "inbreeding": inbreeding,
        "dimension": Ainv.shape[0],
        "n_upper_elements": upper.nnz,
    }
    timing = {"total": time.perf_counter() - start_time}
    log_path = write_run_log(config, params, timing, command_line)
    typer.echo(f"Log written to {log_path}", err=True)


if __name__ == "__main__":
    app()
