import json
import sys

import pytest

import cdb_parser
from cdb_builders import cdb_text, eblock, et_line, line_nodes, nblock, node_line


def run_main(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["cdb_parser.py", *args])
    with pytest.raises(SystemExit) as exc_info:
        cdb_parser.main()
    return exc_info.value.code


@pytest.fixture
def tet_file(tmp_path):
    path = tmp_path / "tet.cdb"
    path.write_text(cdb_text(et_line(285), nblock(line_nodes(4)), eblock([(1, [1, 2, 3, 4])])))
    return path


def test_no_arguments(monkeypatch, capsys):
    assert run_main(monkeypatch) == 1
    assert "Usage" in capsys.readouterr().out


def test_file_not_found(monkeypatch, capsys, tmp_path):
    assert run_main(monkeypatch, str(tmp_path / "nope.cdb")) == 1
    assert "File not found" in capsys.readouterr().out


def test_success(monkeypatch, capsys, tet_file):
    assert run_main(monkeypatch, str(tet_file)) == 0
    out = capsys.readouterr().out
    assert "ANSYS CDB MESH REPORT: tet.cdb" in out
    assert "BODY_TET4" in out


def test_parse_error(monkeypatch, capsys, tmp_path):
    path = tmp_path / "bad.cdb"
    path.write_text(cdb_text(nblock(line_nodes(4)), eblock([(1, [1, 2, 3, 4])])))
    assert run_main(monkeypatch, str(path)) == 2
    assert "Parse error" in capsys.readouterr().out


def test_export_stats(monkeypatch, tet_file, tmp_path):
    stats = tmp_path / "stats.json"
    assert run_main(monkeypatch, str(tet_file), "--export-stats", str(stats)) == 0
    data = json.loads(stats.read_text())
    assert data['source'] == "tet.cdb"
    assert data['nodes_read'] == 4
    assert data['mesh']['num_elements'] == 1
    assert data['validation']['read_completed'] is True


def test_show_issues(monkeypatch, capsys, tmp_path):
    path = tmp_path / "warn.cdb"
    path.write_text(cdb_text(nblock(line_nodes(2)), ["CMBLOCK,WALL,NODE,        3", "(8i10)", "         1"]))
    assert run_main(monkeypatch, str(path), "--show-issues") == 0
    out = capsys.readouterr().out
    assert "PARSING ISSUES" in out
    assert "declares 3 entries, found 1" in out


@pytest.fixture
def repeated_node_file(tmp_path):
    path = tmp_path / "repeat.cdb"
    lines = nblock(line_nodes(4), terminator=False) + [node_line(1, 5.0, 5.0, 5.0), "N,R5.3,LOC,       -1,"]
    path.write_text(cdb_text(et_line(285), lines, eblock([(1, [1, 2, 3, 4])])))
    return path


def test_repeated_node_rejected_by_default(monkeypatch, capsys, repeated_node_file):
    assert run_main(monkeypatch, str(repeated_node_file)) == 2
    assert "defined twice" in capsys.readouterr().out


def test_allow_duplicate_nodes(monkeypatch, capsys, repeated_node_file, tmp_path):
    stats = tmp_path / "stats.json"
    code = run_main(monkeypatch, str(repeated_node_file), "--allow-duplicate-nodes", "--verbose",
                    "--export-stats", str(stats))
    assert code == 0
    out = capsys.readouterr().out
    assert "PARSING ISSUES" in out
    assert "replaces the earlier one" in out
    assert json.loads(stats.read_text())['nodes_read'] == 5
