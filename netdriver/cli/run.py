"""CLI for running and inspecting tasks."""

from pathlib import Path
from typing import Annotated

import typer

from netdriver.cli.rendering import render_section
from netdriver.config.logging import configure_logging
from netdriver.containers import container
from netdriver.core.data import get_reader_registry
from netdriver.core.errors import TaskFileError
from netdriver.core.execution import ExecutionStatus
from netdriver.core.report import ReportSection
from netdriver.core.task import Task, load_task

app = typer.Typer()


def _echo_section(section: ReportSection) -> None:
    typer.secho(render_section(section), fg=typer.colors.RED if section.error else None)


def _load_task_or_exit(task_file: Path) -> Task:
    try:
        return load_task(task_file)
    except TaskFileError as e:
        typer.secho(f"error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from e


@app.command(name="run")
def run_task(
    task_file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="TOML file describing the task."),
    ],
    actions: Annotated[
        list[str],
        typer.Argument(help="Actions to run in order: pretrain, train, test, save, load."),
    ],
    weights: Annotated[
        Path | None,
        typer.Option("-w", "--weights", help="Weights file, overriding the task's one."),
    ] = None,
    input_size: Annotated[
        int,
        typer.Option("--input-size", min=1, help="Number of inputs of the network."),
    ] = 784,
    classes: Annotated[
        int,
        typer.Option("-c", "--classes", min=1, help="Number of output classes."),
    ] = 10,
    hidden: Annotated[
        list[int] | None,
        typer.Option("--hidden", min=1, help="Size of a pretrained hidden layer (repeatable)."),
    ] = None,
):
    """Run the actions of a task against the reference network."""
    settings = container.settings()
    configure_logging(settings)

    task = _load_task_or_exit(task_file)
    if weights is not None:
        task = task.with_weights(str(weights))

    network_args: dict = {"input_size": input_size, "n_classes": classes}
    if hidden:
        network_args["hidden_layers"] = hidden
    network = container.network_factory(**network_args)

    executor = container.task_executor()
    result = executor.execute(network, task, actions, sink=_echo_section)

    if result.status == ExecutionStatus.ABORTED:
        raise typer.Exit(code=1)


@app.command(name="check")
def check_task(
    task_file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="TOML file describing the task."),
    ],
):
    """Show which actions a task can support, without reading any data."""
    task = _load_task_or_exit(task_file)

    phases = (
        ("pretrain", "pretraining", task.pretraining.samples.is_present(), ("samples",)),
        ("train", "training", task.training.is_complete(), task.training.missing()),
        ("test", "testing", task.testing.is_complete(), task.testing.missing()),
    )
    for action, phase, ready, missing in phases:
        if ready:
            typer.echo(f"{action}: ready")
        else:
            typer.secho(
                f"{action}: missing {phase} {' and '.join(missing)}", fg=typer.colors.YELLOW
            )

    weights = Path(task.weights.file_path)
    state = "present" if weights.is_file() else "absent"
    typer.echo(f"weights: {weights} ({state})")


@app.command(name="readers")
def list_readers():
    """List the registered data reader kinds."""
    for kind, reader_cls in sorted(get_reader_registry().items()):
        typer.echo(f"{kind}: {reader_cls.__name__}")
