"""Command-line interface for virtual-screen-reader.

Provides commands for inspecting how a screen reader would present an HTML,
YAML or JSON document.
"""

from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .announcements import AnnouncementEvent
from .config import SimulatorConfig, load_config
from .raw import load_raw_tree
from .recorder import SessionRecorder, SessionRecording, replay
from .search import SearchEngine
from .session import ScreenReaderSession

app = typer.Typer(
    name="vsr",
    help="Simulate screen reader output for HTML documents.",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Path | None, typer.Option("--config", help="Path to a YAML simulator configuration")
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"vsr version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Simulate screen reader output for HTML documents."""
    pass


def _config(path: Path | None) -> SimulatorConfig:
    return load_config(path) if path is not None else SimulatorConfig()


@app.command()
def tree(
    file: Annotated[Path, typer.Argument(help="Path to an HTML, YAML or JSON document")],
    verbosity: Annotated[
        str | None,
        typer.Option("--verbosity", help="minimal, standard or full"),
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Print the accessibility tree as YAML."""
    try:
        settings = _config(config)
        session = ScreenReaderSession(load_raw_tree(file), settings)
        typer.echo(session.tree.to_yaml(verbosity or settings.verbosity), nl=False)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def walk(
    file: Annotated[Path, typer.Argument(help="Path to an HTML, YAML or JSON document")],
    commands: Annotated[
        list[str] | None,
        typer.Option("--command", "-c", help="Command to run, e.g. 'next:heading'"),
    ] = None,
    walk_all: Annotated[
        bool, typer.Option("--all", help="Read the whole document from the start")
    ] = False,
    transcript: Annotated[
        bool, typer.Option("--transcript", help="Print spoken text only")
    ] = False,
    record: Annotated[
        Path | None, typer.Option("--record", help="Save a replayable recording")
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Run navigation commands and print what would be spoken."""
    try:
        session = ScreenReaderSession(config=_config(config))
        recorder = SessionRecorder(session)

        def _print(event: AnnouncementEvent) -> None:
            if transcript:
                typer.echo(event.text)
            else:
                typer.echo(f"[{event.sequence_number}] {event.kind.value}: {event.text}")

        session.subscribe(_print)
        session.load(load_raw_tree(file))

        for command in commands or []:
            session.execute(command)
        if walk_all:
            while session.execute("next"):
                pass
        session.drain()

        if record is not None:
            record.write_text(recorder.stop().to_yaml(), encoding="utf-8")
            typer.echo(f"Recording saved to {record}", err=True)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def outline(
    file: Annotated[Path, typer.Argument(help="Path to an HTML, YAML or JSON document")],
    kind: Annotated[
        str, typer.Option("--kind", "-k", help="headings, landmarks or form-controls")
    ] = "headings",
    as_yaml: Annotated[bool, typer.Option("--yaml", help="Print as YAML")] = False,
) -> None:
    """Print a heading, landmark or form control outline."""
    try:
        engine = SearchEngine(ScreenReaderSession(load_raw_tree(file)).tree)
        result = engine.outline(kind)
        if as_yaml:
            typer.echo(result.to_yaml(), nl=False)
        else:
            typer.echo(result.to_text())
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def search(
    file: Annotated[Path, typer.Argument(help="Path to an HTML, YAML or JSON document")],
    query: Annotated[str, typer.Argument(help="Text to search for")],
    fuzzy: Annotated[bool, typer.Option("--fuzzy", help="Match approximately")] = False,
    threshold: Annotated[
        float, typer.Option("--threshold", help="Minimum fuzzy similarity (0.0 to 1.0)")
    ] = 0.8,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", help="Maximum number of results")
    ] = None,
) -> None:
    """Search names, descriptions and text of the reading order."""
    try:
        engine = SearchEngine(ScreenReaderSession(load_raw_tree(file)).tree)
        results = engine.text_search(query, fuzzy=fuzzy, threshold=threshold, max_results=limit)
        typer.echo(results.to_yaml(), nl=False)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def stats(
    file: Annotated[Path, typer.Argument(help="Path to an HTML, YAML or JSON document")],
) -> None:
    """Show document statistics and role counts."""
    try:
        document = ScreenReaderSession(load_raw_tree(file)).tree
        typer.echo(f"File: {file}")
        typer.echo(f"Nodes: {document.stats.nodes}")
        typer.echo(f"Navigable: {len(document.sequence)}")
        typer.echo(f"Headings: {document.stats.headings}")
        typer.echo(f"Landmarks: {document.stats.landmarks}")
        typer.echo("Roles:")
        for role, count in SearchEngine(document).role_statistics().items():
            typer.echo(f"  {role}: {count}")
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("replay")
def replay_command(
    recording_file: Annotated[Path, typer.Argument(help="Recording saved with walk --record")],
    file: Annotated[Path, typer.Argument(help="The document the recording was made against")],
) -> None:
    """Check that a recording still produces the same announcements."""
    try:
        recording = SessionRecording.from_yaml(recording_file.read_text(encoding="utf-8"))
        result = replay(recording, load_raw_tree(file))
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if result.matched:
        typer.echo(f"Replay matched {len(result.expected)} events")
        return

    index = result.first_mismatch
    expected = result.expected[index]["text"] if index < len(result.expected) else "(nothing)"
    actual = result.actual[index]["text"] if index < len(result.actual) else "(nothing)"
    typer.echo(f"Replay differs at event {index}", err=True)
    typer.echo(f"  expected: {expected}", err=True)
    typer.echo(f"  actual:   {actual}", err=True)
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
