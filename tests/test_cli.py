"""Tests for the command-line interface."""

import tempfile
from pathlib import Path

from typer.testing import CliRunner

from virtual_screen_reader.cli import app

runner = CliRunner()

PAGE = """<html><body>
<nav id="menu" aria-label="Main"><a id="home" href="/">Home</a></nav>
<main id="content">
  <h1 id="title">Welcome</h1>
  <p id="intro">Billing happens monthly.</p>
  <h2 id="faq">Questions</h2>
</main>
</body></html>
"""


def create_test_page(path: Path, content: str = PAGE) -> None:
    """Write an HTML document for testing."""
    path.write_text(content, encoding="utf-8")


class TestCLIVersion:
    """Tests for version flag."""

    def test_version_flag(self):
        """Test --version shows version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "vsr version 0.1.0" in result.stdout

    def test_version_short_flag(self):
        """Test -v shows version."""
        result = runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert "0.1.0" in result.stdout


class TestCLIHelp:
    """Tests for help output."""

    def test_main_help(self):
        """Test main --help lists the commands."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("tree", "walk", "outline", "search", "stats", "replay"):
            assert command in result.stdout

    def test_walk_help(self):
        """Test walk --help shows options."""
        result = runner.invoke(app, ["walk", "--help"])
        assert result.exit_code == 0
        assert "--command" in result.stdout
        assert "--all" in result.stdout
        assert "--record" in result.stdout


class TestCLITree:
    """Tests for tree command."""

    def test_tree_standard(self):
        """Test printing the tree."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["tree", str(page)])
            assert result.exit_code == 0
            assert "verbosity: standard" in result.stdout
            assert "- navigation:" in result.stdout

    def test_tree_minimal(self):
        """Test the --verbosity option."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["tree", str(page), "--verbosity", "minimal"])
            assert result.exit_code == 0
            assert '- heading "Welcome" [id=title] [level=1]' in result.stdout

    def test_tree_with_config(self):
        """Test that the configured verbosity is used."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)
            config = Path(tmp_dir) / "vsr.yaml"
            config.write_text("verbosity: full\n", encoding="utf-8")

            result = runner.invoke(app, ["tree", str(page), "--config", str(config)])
            assert result.exit_code == 0
            assert "verbosity: full" in result.stdout

    def test_tree_bad_verbosity(self):
        """Test that a bad verbosity is reported."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["tree", str(page), "--verbosity", "loud"])
            assert result.exit_code == 1
            assert "Error:" in result.output

    def test_tree_missing_file(self):
        """Test that a missing file is reported."""
        result = runner.invoke(app, ["tree", "does-not-exist.html"])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestCLIWalk:
    """Tests for walk command."""

    def test_walk_commands(self):
        """Test running commands and printing events."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["walk", str(page), "-c", "next:heading"])
            assert result.exit_code == 0
            assert "[1] document-load: Document loaded, 6 elements" in result.stdout
            assert "landmark-enter: entering main landmark" in result.stdout
            assert "node: heading level 1, Welcome" in result.stdout

    def test_walk_all_transcript(self):
        """Test reading the whole document as a transcript."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["walk", str(page), "--all", "--transcript"])
            assert result.exit_code == 0
            assert result.stdout.splitlines() == [
                "Document loaded, 6 elements",
                "entering navigation landmark, Main",
                "link, Home",
                "entering main landmark",
                "heading level 1, Welcome",
                "Billing happens monthly.",
                "heading level 2, Questions",
            ]

    def test_walk_unknown_filter(self):
        """Test that an unknown filter is reported with suggestions."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["walk", str(page), "-c", "next:headng"])
            assert result.exit_code == 1
            assert "Unknown filter 'headng'" in result.output
            assert "heading" in result.output

    def test_walk_record_and_replay(self):
        """Test that a saved recording replays against the same page."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)
            recording = Path(tmp_dir) / "walk.yaml"

            result = runner.invoke(
                app, ["walk", str(page), "-c", "next:heading", "-c", "next", "--record", str(recording)]
            )
            assert result.exit_code == 0
            assert recording.exists()

            result = runner.invoke(app, ["replay", str(recording), str(page)])
            assert result.exit_code == 0
            assert "Replay matched 5 events" in result.stdout

    def test_replay_mismatch(self):
        """Test that a changed page fails the replay."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)
            recording = Path(tmp_dir) / "walk.yaml"
            runner.invoke(app, ["walk", str(page), "-c", "next:heading", "--record", str(recording)])

            create_test_page(page, PAGE.replace("Welcome", "Hello"))
            result = runner.invoke(app, ["replay", str(recording), str(page)])
            assert result.exit_code == 1
            assert "Replay differs at event 3" in result.output
            assert "heading level 1, Welcome" in result.output

    def test_replay_invalid_recording(self):
        """Test that an unreadable recording is reported."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)
            recording = Path(tmp_dir) / "walk.yaml"
            recording.write_text("- not a recording\n", encoding="utf-8")

            result = runner.invoke(app, ["replay", str(recording), str(page)])
            assert result.exit_code == 1
            assert "Recording must be a mapping" in result.output


class TestCLIOutline:
    """Tests for outline command."""

    def test_outline_headings(self):
        """Test the default heading outline."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["outline", str(page)])
            assert result.exit_code == 0
            assert result.stdout == "1 Welcome\n  2 Questions\n"

    def test_outline_landmarks_yaml(self):
        """Test a landmark outline as YAML."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["outline", str(page), "-k", "landmarks", "--yaml"])
            assert result.exit_code == 0
            assert "kind: landmarks" in result.stdout
            assert "- id: menu" in result.stdout

    def test_outline_unknown_kind(self):
        """Test that an unknown kind is reported."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["outline", str(page), "-k", "tables"])
            assert result.exit_code == 1
            assert "Unknown outline kind 'tables'" in result.output


class TestCLISearch:
    """Tests for search command."""

    def test_search(self):
        """Test a text search."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["search", str(page), "billing"])
            assert result.exit_code == 0
            assert "- id: intro" in result.stdout
            assert "total_matches: 1" in result.stdout

    def test_search_fuzzy(self):
        """Test a fuzzy search."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["search", str(page), "Welcom", "--fuzzy"])
            assert result.exit_code == 0
            assert "- id: title" in result.stdout

    def test_search_empty_query(self):
        """Test that an empty query is reported."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["search", str(page), " "])
            assert result.exit_code == 1
            assert "must not be empty" in result.output


class TestCLIStats:
    """Tests for stats command."""

    def test_stats(self):
        """Test document statistics."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            page = Path(tmp_dir) / "page.html"
            create_test_page(page)

            result = runner.invoke(app, ["stats", str(page)])
            assert result.exit_code == 0
            assert "Navigable: 6" in result.stdout
            assert "Headings: 2" in result.stdout
            assert "Landmarks: 2" in result.stdout
            assert "  heading: 2" in result.stdout
