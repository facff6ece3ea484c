from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from dirscan.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep config files written by init out of the repository."""
    work: Path = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


def test_scan_prints_report(sample_tree: Path):
    result = runner.invoke(app, ["scan", str(sample_tree)])

    assert result.exit_code == 0
    assert "Total entries:       9" in result.stdout
    assert ".txt" in result.stdout
    assert "(none)" in result.stdout
    assert "No entries skipped." in result.stdout


def test_scan_with_depth_limit(sample_tree: Path):
    result = runner.invoke(app, ["scan", str(sample_tree), "--max-depth", "1"])

    assert result.exit_code == 0
    assert "Total entries:       5" in result.stdout
    assert "Deepest level:       1" in result.stdout


def test_scan_yaml_output(sample_tree: Path):
    result = runner.invoke(app, ["scan", str(sample_tree), "--format", "yaml"])

    assert result.exit_code == 0
    data = yaml.safe_load(result.stdout)
    assert data["total_entries"] == 9
    assert data["total_size"] == 515
    assert data["extensions"][0] == {"extension": "md", "count": 1, "total_size": 300}
    assert data["depth_counts"] == {0: 1, 1: 4, 2: 3, 3: 1}
    assert data["errors"] == []


def test_scan_reports_skipped_entries(sample_tree: Path, block_listing):
    block_listing(sample_tree / "docs")

    result = runner.invoke(app, ["scan", str(sample_tree)])

    assert result.exit_code == 0
    assert "1 entries could not be read" in result.stdout
    assert str(sample_tree / "docs") in result.stdout


def test_scan_missing_root_fails(tmp_path: Path):
    result = runner.invoke(app, ["scan", str(tmp_path / "missing")])

    assert result.exit_code == 1


def test_scan_file_root_fails(tmp_path: Path):
    file_path: Path = tmp_path / "file.txt"
    file_path.write_text("hello")

    result = runner.invoke(app, ["scan", str(file_path)])

    assert result.exit_code == 1


def test_scan_rejects_negative_depth(sample_tree: Path):
    result = runner.invoke(app, ["scan", str(sample_tree), "--max-depth", "-1"])

    assert result.exit_code == 2


def test_scan_rejects_unknown_format(sample_tree: Path):
    result = runner.invoke(app, ["scan", str(sample_tree), "--format", "xml"])

    assert result.exit_code == 2


def test_init_then_scan_uses_config(sample_tree: Path, isolated_cwd: Path):
    result = runner.invoke(app, ["init", "--max-depth", "1", "--top", "3"])
    assert result.exit_code == 0
    assert (isolated_cwd / "dirscan.yaml").exists()

    result = runner.invoke(app, ["scan", str(sample_tree)])

    assert result.exit_code == 0
    assert "Max depth:           1" in result.stdout
    assert "Total entries:       5" in result.stdout


def test_cli_options_override_config(sample_tree: Path):
    assert runner.invoke(app, ["init", "--max-depth", "1"]).exit_code == 0

    result = runner.invoke(app, ["scan", str(sample_tree), "--max-depth", "2"])

    assert result.exit_code == 0
    assert "Total entries:       8" in result.stdout


def test_init_refuses_to_overwrite():
    assert runner.invoke(app, ["init"]).exit_code == 0

    assert runner.invoke(app, ["init"]).exit_code == 1
    assert runner.invoke(app, ["init", "--force"]).exit_code == 0


def test_broken_config_fails(sample_tree: Path, isolated_cwd: Path):
    (isolated_cwd / "dirscan.yaml").write_text("config:\n  top_n: many\n", encoding="utf-8")

    result = runner.invoke(app, ["scan", str(sample_tree)])

    assert result.exit_code == 1


def test_search_command(sample_tree: Path):
    result = runner.invoke(app, ["search", str(sample_tree), "--ext", "txt", "--size", "100-"])

    assert result.exit_code == 0
    assert "Files found:         1" in result.stdout
    assert "report.txt" in result.stdout


def test_search_rejects_bad_size(sample_tree: Path):
    result = runner.invoke(app, ["search", str(sample_tree), "--size", "lots"])

    assert result.exit_code == 2


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.stdout.strip()


def test_scan_symlink_loop_root_exits_with_message(tmp_path: Path):
    loop: Path = tmp_path / "loop"
    loop.symlink_to(loop)

    result = runner.invoke(app, ["scan", str(loop)])

    assert result.exit_code == 1
    assert not isinstance(result.exception, OSError)
    assert "Error:" in result.output


def test_info_command(sample_tree: Path):
    result = runner.invoke(app, ["info", str(sample_tree / "report.txt")])

    assert result.exit_code == 0
    assert "Type:                file" in result.stdout
    assert "Size:                120 bytes" in result.stdout
    assert "Extension:           .txt" in result.stdout


def test_info_missing_path_fails(tmp_path: Path):
    result = runner.invoke(app, ["info", str(tmp_path / "missing")])

    assert result.exit_code == 1
