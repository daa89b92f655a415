import json
from pathlib import Path

import pytest

from metaindex.cli.main import dedupe_main, main, process_main
from metaindex.core.index import IndexFileNotFoundError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in (
        "METAINDEX_INPUT",
        "METAINDEX_OUTPUT",
        "METAINDEX_BACKUP",
        "METAINDEX_VALIDATE_SCHEMA",
        "METAINDEX_VERBOSE",
        "METAINDEX_EXIT_ON_ERROR",
        "METAINDEX_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _ids(path: Path):
    return [r["id"] for r in json.loads(path.read_text(encoding="utf-8"))]


def test_dedupe_rewrites_file_in_place(tmp_path: Path) -> None:
    p = _write(tmp_path / "meta.json", [{"id": "b"}, {"id": "a"}, {"id": "b"}])

    assert main(["dedupe", str(p)]) == 0

    assert _ids(p) == ["a", "b"]
    assert list(tmp_path.glob("*.backup.*")) == []


def test_dedupe_backup_flag(tmp_path: Path) -> None:
    p = _write(tmp_path / "data.json", [{"id": "b"}, {"id": "a"}])
    raw = p.read_bytes()

    assert dedupe_main(["--backup", str(p)]) == 0

    backups = list(tmp_path.glob("data.json.backup.*"))
    assert len(backups) == 1
    assert backups[0].read_bytes() == raw


def test_dedupe_defaults_to_meta_json_in_cwd(tmp_path: Path, monkeypatch) -> None:
    _write(tmp_path / "meta.json", [{"id": "b"}, {"id": "a"}])
    monkeypatch.chdir(tmp_path)

    assert dedupe_main([]) == 0

    assert _ids(tmp_path / "meta.json") == ["a", "b"]


def test_help_exits_zero(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        dedupe_main(["--help"])
    assert exc.value.code == 0
    assert "--backup" in capsys.readouterr().out

    with pytest.raises(SystemExit) as exc:
        process_main(["-h"])
    assert exc.value.code == 0
    assert "--no-schema-validation" in capsys.readouterr().out


def test_missing_file_exits_one(tmp_path: Path, capsys) -> None:
    assert dedupe_main([str(tmp_path / "absent.json")]) == 1
    assert "Input file not found" in capsys.readouterr().err

    assert process_main(["-i", str(tmp_path / "absent.json")]) == 1


def test_invalid_shape_exits_one_without_writing(tmp_path: Path) -> None:
    p = _write(tmp_path / "meta.json", {"a": 1})
    out = tmp_path / "out.json"

    assert process_main(["-i", str(p), "-o", str(out), "--backup"]) == 1

    assert not out.exists()
    assert list(tmp_path.glob("*.backup.*")) == []


def test_process_json_summary(tmp_path: Path, capsys) -> None:
    p = _write(
        tmp_path / "meta.json",
        [{"id": "b", "name": "B"}, {"id": "a", "name": "A"}, {"id": "a", "name": "A-dup"}],
    )
    out = tmp_path / "dist" / "meta.json"

    rc = process_main(["--input", str(p), "--output", str(out), "--no-schema-validation", "--json"])

    assert rc == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["original"] == 3
    assert summary["duplicates_removed"] == 1
    assert summary["final"] == 2
    assert summary["schema_violations"] == 0
    assert summary["duplicates"] == [{"id": "a", "name": "A-dup", "original_index": 2}]
    assert _ids(out) == ["a", "b"]


def test_process_counts_schema_violations(tmp_path: Path, capsys) -> None:
    p = _write(tmp_path / "meta.json", [{"id": "a", "name": "A"}])

    assert main(["process", "-i", str(p), "--json"]) == 0

    assert json.loads(capsys.readouterr().out)["schema_violations"] == 1


def test_no_backup_overrides_backup(tmp_path: Path) -> None:
    p = _write(tmp_path / "meta.json", [{"id": "a"}])

    assert process_main(["-i", str(p), "--backup", "--no-backup"]) == 0

    assert list(tmp_path.glob("*.backup.*")) == []


def test_backup_from_environment(tmp_path: Path, monkeypatch) -> None:
    p = _write(tmp_path / "meta.json", [{"id": "a"}])
    monkeypatch.setenv("METAINDEX_BACKUP", "true")

    assert process_main(["-i", str(p)]) == 0

    assert len(list(tmp_path.glob("meta.json.backup.*"))) == 1


def test_check_command_exit_codes(tmp_path: Path, capsys) -> None:
    p = _write(tmp_path / "meta.json", [{"id": "b"}, {"id": "a"}, {"id": "a"}])

    assert main(["check", str(p)]) == 3
    out = capsys.readouterr().out
    assert "Duplicates: 1" in out
    assert "Sorted: no" in out

    assert main(["dedupe", str(p)]) == 0
    capsys.readouterr()

    assert main(["check", "--json", str(p)]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["clean"] is True
    assert report["entries"] == 2


def test_check_missing_file(tmp_path: Path) -> None:
    assert main(["check", str(tmp_path / "absent.json")]) == 1


def test_repeated_runs_log_to_current_stderr(tmp_path: Path, capsys) -> None:
    missing = str(tmp_path / "absent.json")

    assert dedupe_main([missing]) == 1
    first = capsys.readouterr().err
    assert dedupe_main([missing]) == 1
    second = capsys.readouterr().err

    assert "Processing failed" in first
    assert "Processing failed" in second


def test_summary_is_printed_when_logging_is_quiet(tmp_path: Path, monkeypatch, capsys) -> None:
    p = _write(tmp_path / "meta.json", [{"id": "a"}, {"id": "a", "name": "Again"}])
    monkeypatch.setenv("METAINDEX_LOG_LEVEL", "WARNING")

    assert dedupe_main([str(p)]) == 0

    out = capsys.readouterr().out
    assert "  - Final entries: 1" in out
    assert '  - "a" (Again)' in out


def test_exit_on_error_disabled_propagates(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("METAINDEX_EXIT_ON_ERROR", "false")

    with pytest.raises(IndexFileNotFoundError):
        process_main(["-i", str(tmp_path / "absent.json")])


def test_unwritable_output_exits_one(tmp_path: Path, capsys) -> None:
    p = _write(tmp_path / "meta.json", [{"id": "a"}])
    out_dir = tmp_path / "out"
    out_dir.mkdir()

    assert process_main(["-i", str(p), "-o", str(out_dir)]) == 1

    assert "Cannot write" in capsys.readouterr().err
