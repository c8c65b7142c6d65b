"""Command-line entry point.

    cocoharness run bbob random --dimensions 2,3 --budget 100
    cocoharness run bbob-mixint scipy:Powell --instance "year: 2020"
    cocoharness list
"""

from typing import List, Optional
import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import runtime
from .backends import BACKENDS, available_backends
from .config import load_settings
from .exceptions import HarnessError
from .experiment import ExperimentSummary, SUITE_DIMENSIONS, create_benchmark, run_experiment
from .options import parse_int_list
from .solvers import get_solver, list_solvers
from .timing import Timing

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cocoharness", description="Black-box optimization benchmark harness")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a solver on a benchmark suite")
    run.add_argument("suite", help="Suite name (e.g. bbob, bbob-mixint)")
    run.add_argument("solver", help="Solver specification (random, scipy, scipy:<method>)")
    run.add_argument("--dimensions", default=None, help="Comma-separated dimensions, e.g. 2,3,5")
    run.add_argument("--budget", type=int, default=None, help="Evaluations per dimension per problem")
    run.add_argument("--instance", default=None, help='Suite instance selector, e.g. "year: 2018"')
    run.add_argument("--backend", default=None, help="Evaluator backend")
    run.add_argument("--log-level", default=None, help="error, warning, info or debug")
    run.add_argument("--seed", type=int, default=None, help="Solver random seed")

    subparsers.add_parser("list", help="List backends, suites, observers and solvers")
    return parser


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _print_summary(console: Console, summary: ExperimentSummary) -> None:
    table = Table(title=f"{summary.algorithm_name} on {summary.suite_name}")
    table.add_column("Dimension", justify="right", style="cyan")
    table.add_column("Problems", justify="right")
    table.add_column("Solved", justify="right")
    table.add_column("Evaluations", justify="right")

    for dimension, records in summary.by_dimension().items():
        solved = sum(1 for record in records if record.final_target_hit)
        style = "green" if solved == len(records) else "yellow"
        table.add_row(
            str(dimension),
            str(len(records)),
            f"[{style}]{solved}[/{style}]",
            str(sum(record.evaluations for record in records)),
        )

    console.print(table)
    console.print(f"[bold]{summary.n_solved}/{summary.n_problems}[/bold] problems solved")


def cmd_run(args: argparse.Namespace, console: Console) -> int:
    settings = load_settings()
    backend = runtime.initialize(args.backend or settings.backend, args.log_level or settings.log_level)

    dimensions = parse_int_list(args.dimensions, context="dimension") if args.dimensions else None
    solver = get_solver(args.solver, seed=args.seed)
    benchmark = create_benchmark(
        args.suite,
        solver.name,
        f"{args.solver} via cocoharness",
        dimensions=dimensions,
        suite_instance=args.instance if args.instance is not None else settings.suite_instance,
        backend=backend,
    )

    budget = args.budget or settings.budget_multiplier
    console.print(f"Running [cyan]{solver.name}[/cyan] on [cyan]{args.suite}[/cyan] ({budget} x dimension evaluations)")
    summary = run_experiment(benchmark, solver, budget_multiplier=budget, timing=Timing(stream=console.file))
    _print_summary(console, summary)
    return 0


def cmd_list(args: argparse.Namespace, console: Console) -> int:
    backend = runtime.get_backend()
    installed = set(available_backends())

    table = Table(title="Backends")
    table.add_column("Name", style="cyan")
    table.add_column("Installed")
    for name in BACKENDS:
        table.add_row(name, "[green]yes[/green]" if name in installed else "[red]no[/red]")
    console.print(table)

    table = Table(title=f"Suites ({backend.name})")
    table.add_column("Name", style="cyan")
    table.add_column("Dimensions")
    for name in backend.list_suites():
        dimensions = SUITE_DIMENSIONS.get(name)
        table.add_row(name, ",".join(str(d) for d in dimensions) if dimensions else "-")
    console.print(table)

    console.print(f"[bold]Observers:[/bold] {', '.join(backend.list_observers())}")
    console.print(f"[bold]Solvers:[/bold] {', '.join(list_solvers())}")
    return 0


COMMANDS = {
    "run": cmd_run,
    "list": cmd_list,
}


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    """Parse arguments and dispatch. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    console = console or Console()
    _setup_logging(getattr(args, "log_level", None) or "warning")

    try:
        return COMMANDS[args.command](args, console)
    except HarnessError as e:
        console.print(f"[red]Error ({e.kind.value}):[/red] {escape(str(e))}")
        logger.debug("Harness error", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
