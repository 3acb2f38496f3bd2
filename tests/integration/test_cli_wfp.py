"""CLI tests for ``snippetscan wfp run``."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from snippetscan.infrastructure.cli.main import app

SAMPLE_TEXT = (
    "sample c code with lots of code that we should analyse\n"
    "And even more code to get connected.\n"
    "And we need to get this as long as possible, in order to trigger snippet matching.\n"
    "Here comes more code to help get this working.\n"
    "Please help get this across the line. We need all the help we can get.\n"
)

GOLDEN_WFP = (
    "file=609a24b6cd27ef8108792ca459db1b28,293,sample.c\n"
    "3=0ed5027a,a9442399,d019b836\n"
    "4=613d56c0\n"
    "5=828b5fe0\n"
)

runner = CliRunner()


@pytest.fixture
def project(isolated_env: Path) -> Path:
    root = isolated_env / "project"
    (root / "src").mkdir(parents=True)
    (root / "sample.c").write_text(SAMPLE_TEXT)
    (root / "src" / "main.c").write_text("#include <a.h>\nint main() {return 0;}\n")
    (root / "notes.txt").write_text(SAMPLE_TEXT)
    return root


def test_single_file_to_stdout(project: Path):
    result = runner.invoke(app, ["wfp", "run", str(project / "sample.c")])

    assert result.exit_code == 0, result.output
    assert GOLDEN_WFP in result.stdout


def test_folder_to_output_file(project: Path, tmp_path: Path):
    output = tmp_path / "project.wfp"

    result = runner.invoke(app, ["wfp", "run", str(project), "--output", str(output)])

    assert result.exit_code == 0, result.output
    wfp = output.read_text()
    assert wfp.startswith(GOLDEN_WFP)
    assert "file=9799c4f790062136eac835d68b3904bb,38,src/main.c\n" in wfp
    assert "notes.txt" not in wfp


def test_all_extensions_and_skip_snippets(project: Path, tmp_path: Path):
    output = tmp_path / "project.wfp"

    result = runner.invoke(
        app, ["wfp", "run", str(project), "--all-extensions", "--skip-snippets", "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    lines = output.read_text().splitlines()
    assert [line.rsplit(",", 1)[1] for line in lines] == ["notes.txt", "sample.c", "src/main.c"]


def test_obfuscated_paths(project: Path, tmp_path: Path):
    output = tmp_path / "project.wfp"

    result = runner.invoke(app, ["wfp", "run", str(project), "--obfuscate", "-o", str(output)])

    assert result.exit_code == 0, result.output
    wfp = output.read_text()
    assert "sample.c" not in wfp
    assert "src/main.c" not in wfp
    assert wfp.count("file=") == 2


def test_hpsm_from_config(project: Path, tmp_path: Path):
    config = tmp_path / "custom.toml"
    config.write_text("[winnowing]\nhpsm = true\n")
    output = tmp_path / "project.wfp"

    result = runner.invoke(
        app, ["wfp", "run", str(project / "sample.c"), "--config", str(config), "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert "hpsm=df13c104d4\n" in output.read_text()


def test_missing_config_fails(project: Path, tmp_path: Path):
    result = runner.invoke(app, ["wfp", "run", str(project), "--config", str(tmp_path / "missing.toml")])
    assert result.exit_code == 1


def test_missing_target_fails(isolated_env: Path):
    result = runner.invoke(app, ["wfp", "run", str(isolated_env / "nowhere")])
    assert result.exit_code == 1
