import json
from pathlib import Path

import pytest

import finkreport.report as reporter


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _outdir(root: Path, analyzed: bool = True) -> Path:
    outdir = root / "analysis"
    _write(outdir / "logs" / "alpha-1.0-1.log", "configure: error\n")
    _write(outdir / "results" / "build" / "gcc-fail", "alpha-1.0-1.log compiler error\nbeta-2.0-1.log\n")
    _write(outdir / "results" / "build" / "timeout", "gamma-0.1-3.log  timeout\n")
    _write(outdir / "results" / "install-fail", "delta-4.2-1.log\n")
    if analyzed:
        _write(outdir / ".analyzed", "")
    return outdir


def _finkdir(root: Path) -> Path:
    finkdir = root / "sw"
    _write(finkdir / "etc" / "fink.conf", "Basepath: /nonexistent\nTrees: stable/main\n")
    _write(
        finkdir / "fink" / "dists" / "stable" / "main" / "finkinfo" / "alpha.info",
        "Package: alpha\nVersion: 1.0\nRevision: 1\nMaintainer: Ann Author <ann@example.org>\n",
    )
    _write(
        finkdir / "fink" / "dists" / "stable" / "main" / "finkinfo" / "gamma.info",
        "Package: gamma\nVersion: 0.1\nRevision: 3\nMaintainer: <gus@example.org>\n",
    )
    return finkdir


def _base_args(tmp_path: Path, outdir: Path, finkdir: Path) -> list:
    return [
        "--outdir",
        str(outdir),
        "--finkdir",
        str(finkdir),
        "--log-dir",
        str(tmp_path / "logs"),
    ]


def test_run_writes_reports(tmp_path, capsys):
    outdir = _outdir(tmp_path)
    finkdir = _finkdir(tmp_path)
    comments = tmp_path / "comments.txt"
    _write(comments, "Built on 10.15 with Xcode 12\n")
    catdescs = tmp_path / "catdescs"
    _write(catdescs, "gcc-fail: Compiler errors\ntimeout: Build exceeded the time limit\n")

    exit_code = reporter.run(
        _base_args(tmp_path, outdir, finkdir)
        + ["--comments", str(comments), "--catdescs", str(catdescs)]
    )

    assert exit_code == 0
    results = outdir / "results"
    for name in ["report.txt", "report.html", "pkgindex.html", "maintindex.html"]:
        assert (results / name).is_file()
    assert (results / "build" / "gcc-fail.html").is_file()
    assert (results / "install-fail.html").is_file()

    text = (results / "report.txt").read_text(encoding="utf-8")
    assert text == (
        "Built on 10.15 with Xcode 12\n"
        "\n"
        "   3 build\n"
        "\t   2 gcc-fail: Compiler errors\n"
        "\t   1 timeout: Build exceeded the time limit\n"
        "   1 install-fail\n"
    )

    page = (results / "build" / "gcc-fail.html").read_text(encoding="utf-8")
    assert '<a href="../../logs/alpha-1.0-1.log">alpha-1.0-1</a> (compiler error)' in page
    top_page = (results / "install-fail.html").read_text(encoding="utf-8")
    assert '<a href="../logs/delta-4.2-1.log">delta-4.2-1</a>' in top_page

    maintindex = (results / "maintindex.html").read_text(encoding="utf-8")
    assert "<h2>Ann Author</h2>" in maintindex
    assert "<h2>gus _at_ example.org</h2>" in maintindex
    assert "<h2>None</h2>" in maintindex

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Total weight 4 across 3 categories and 4 packages" in captured.err
    assert "has the analysis been run" not in captured.err

    log_files = list((tmp_path / "logs").glob("finkreport_*.log"))
    assert log_files
    assert "Report completed successfully" in log_files[0].read_text(encoding="utf-8")


def test_run_twice_is_byte_identical(tmp_path):
    outdir = _outdir(tmp_path)
    finkdir = _finkdir(tmp_path)
    args = _base_args(tmp_path, outdir, finkdir)
    results = outdir / "results"
    names = ["report.txt", "report.html", "pkgindex.html", "maintindex.html", "build/gcc-fail.html"]

    assert reporter.run(args) == 0
    first = {name: (results / name).read_bytes() for name in names}
    assert reporter.run(args) == 0
    second = {name: (results / name).read_bytes() for name in names}

    assert first == second


def test_run_emits_json(tmp_path, capsys):
    outdir = _outdir(tmp_path)
    finkdir = _finkdir(tmp_path)

    assert reporter.run(_base_args(tmp_path, outdir, finkdir) + ["--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["tree"]["weight"] == 4
    assert [child["name"] for child in payload["tree"]["children"]] == ["build", "install-fail"]
    assert payload["categories"]["gamma-0.1-3"] == "build/timeout"


def test_missing_analyze_marker_only_warns(tmp_path, capsys):
    outdir = _outdir(tmp_path, analyzed=False)
    finkdir = _finkdir(tmp_path)

    assert reporter.run(_base_args(tmp_path, outdir, finkdir)) == 0
    assert "has the analysis been run" in capsys.readouterr().err


def test_missing_required_flags_exit_with_usage(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        reporter.run(["--finkdir", str(_finkdir(tmp_path))])
    assert excinfo.value.code == 2
    assert "usage:" in capsys.readouterr().err


def test_nonexistent_outdir_is_rejected(tmp_path, capsys):
    finkdir = _finkdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        reporter.run(_base_args(tmp_path, tmp_path / "missing", finkdir))
    assert excinfo.value.code == 2
    assert "--outdir" in capsys.readouterr().err


def test_finkdir_without_config_is_fatal(tmp_path, capsys):
    outdir = _outdir(tmp_path)
    bare = tmp_path / "bare"
    bare.mkdir()
    with pytest.raises(SystemExit) as excinfo:
        reporter.run(_base_args(tmp_path, outdir, bare))
    assert excinfo.value.code == 2
    assert "fink.conf" in capsys.readouterr().err


def test_missing_comments_file_is_rejected(tmp_path, capsys):
    outdir = _outdir(tmp_path)
    finkdir = _finkdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        reporter.run(_base_args(tmp_path, outdir, finkdir) + ["--comments", str(tmp_path / "nope")])
    assert excinfo.value.code == 2
    assert "--comments" in capsys.readouterr().err


def test_malformed_catdescs_cites_line_number(tmp_path, capsys):
    outdir = _outdir(tmp_path)
    finkdir = _finkdir(tmp_path)
    catdescs = tmp_path / "catdescs"
    _write(catdescs, "gcc-fail: Compiler errors\ntimeout: slow\nno colon here\n")

    with pytest.raises(SystemExit) as excinfo:
        reporter.run(_base_args(tmp_path, outdir, finkdir) + ["--catdescs", str(catdescs)])

    assert excinfo.value.code == 2
    assert "line 3" in capsys.readouterr().err
    assert not (outdir / "results" / "report.txt").exists()


def test_io_failure_aborts_run(tmp_path, monkeypatch, capsys):
    outdir = _outdir(tmp_path)
    finkdir = _finkdir(tmp_path)

    def broken(*_args, **_kwargs):
        raise PermissionError("results tree is unreadable")

    monkeypatch.setattr(reporter, "aggregate_results", broken)

    assert reporter.run(_base_args(tmp_path, outdir, finkdir)) == 1
    assert "Report generation failed: results tree is unreadable" in capsys.readouterr().err
    assert not (outdir / "results" / "report.txt").exists()


def test_fink_bootstrap_warnings_reach_run_log(tmp_path):
    outdir = _outdir(tmp_path)
    finkdir = _finkdir(tmp_path)

    assert reporter.run(_base_args(tmp_path, outdir, finkdir)) == 0

    log_text = next((tmp_path / "logs").glob("finkreport_*.log")).read_text(encoding="utf-8")
    assert "WARNING Basepath /nonexistent from" in log_text


def test_non_utf8_catdescs_is_rejected(tmp_path, capsys):
    outdir = _outdir(tmp_path)
    finkdir = _finkdir(tmp_path)
    catdescs = tmp_path / "catdescs"
    catdescs.write_bytes("gcc-fail: caf\xe9 errors\n".encode("latin-1"))

    with pytest.raises(SystemExit) as excinfo:
        reporter.run(_base_args(tmp_path, outdir, finkdir) + ["--catdescs", str(catdescs)])

    assert excinfo.value.code == 2
    err = capsys.readouterr().err
    assert "--catdescs:" in err
    assert "is not valid UTF-8 text" in err


def test_non_utf8_comments_is_rejected(tmp_path, capsys):
    outdir = _outdir(tmp_path)
    finkdir = _finkdir(tmp_path)
    comments = tmp_path / "comments.txt"
    comments.write_bytes(b"\xff\xfe built by r\xe9gis\n")

    with pytest.raises(SystemExit) as excinfo:
        reporter.run(_base_args(tmp_path, outdir, finkdir) + ["--comments", str(comments)])

    assert excinfo.value.code == 2
    err = capsys.readouterr().err
    assert "--comments:" in err
    assert "is not valid UTF-8 text" in err
    assert not (outdir / "results" / "report.txt").exists()
