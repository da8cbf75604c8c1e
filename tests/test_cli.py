# tests/test_cli.py

import json

import pytest
from click.testing import CliRunner

from code_viewer.cli.main import cv
from code_viewer.core.snippet_loader import load_snippets
from code_viewer.main import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def data_file(tmp_path):
    records = [
        {"id": "debounce", "title": "Debounce", "description": "Quiet-period calls", "code": "function debounce() {}"},
        {"id": "curry", "title": "Currying", "description": "Partial application", "code": "const curry = fn => fn;"},
    ]
    path = tmp_path / "snippets.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


def test_list_shows_every_snippet(runner, data_file):
    result = runner.invoke(cv, ["list", "--data", str(data_file)])

    assert result.exit_code == 0
    assert "debounce" in result.output
    assert "curry" in result.output


def test_search_filters_snippets(runner, data_file):
    result = runner.invoke(cv, ["search", "PARTIAL", "--data", str(data_file)])

    assert result.exit_code == 0
    assert "curry" in result.output
    assert "debounce" not in result.output


def test_search_without_matches(runner, data_file):
    result = runner.invoke(cv, ["search", "heap sort", "--data", str(data_file)])

    assert result.exit_code == 0
    assert "No snippets match" in result.output


def test_show_prints_the_code(runner, data_file):
    result = runner.invoke(cv, ["show", "debounce", "--data", str(data_file)])

    assert result.exit_code == 0
    assert "function debounce()" in result.output


def test_show_unknown_id_fails(runner, data_file):
    result = runner.invoke(cv, ["show", "missing", "--data", str(data_file)])

    assert result.exit_code == 1
    assert "No snippet with id 'missing'" in result.output


def test_broken_data_file_fails(runner, tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("not json", encoding="utf-8")

    result = runner.invoke(cv, ["list", "--data", str(broken)])

    assert result.exit_code == 1


def test_build_writes_a_loadable_data_file(runner, tmp_path):
    source_dir = tmp_path / "sources"
    source_dir.mkdir()
    (source_dir / "curry.js").write_text("/**\n * Currying\n */\nfunction curry() {}\n", encoding="utf-8")
    (source_dir / "bsearch.js").write_text("function bsearch() {}\n", encoding="utf-8")
    output = tmp_path / "out.json"

    result = runner.invoke(cv, ["build", str(source_dir), "-o", str(output)])

    assert result.exit_code == 0
    snippets = load_snippets(output)
    assert [s.id for s in snippets] == ["bsearch", "curry"]
    assert snippets[1].title == "Currying"


def test_main_group_routes_to_cli(runner, data_file):
    result = runner.invoke(main, ["cli", "list", "--data", str(data_file)])

    assert result.exit_code == 0
    assert "debounce" in result.output


def test_data_file_with_invalid_utf8_fails_cleanly(runner, tmp_path):
    latin1 = tmp_path / "latin1.json"
    latin1.write_bytes(b'[{"id": "\xff"}]')

    result = runner.invoke(cv, ["list", "--data", str(latin1)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "not valid UTF-8" in result.output
