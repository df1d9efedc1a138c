"""Tests for the bmml command line."""

import json

import pytest

import bmml.config as config_mod
from bmml.cli import _build_parser, main

CLEAN_YAML = """\
version: "2.0"
meta:
  name: Clean
customer_segments:
  - id: cs-a
    name: Alpha
value_propositions:
  - id: vp-idle
    name: Idle Idea
"""


@pytest.fixture(autouse=True)
def no_project_config(tmp_path, monkeypatch):
    """Point the default config lookup at an empty directory."""
    monkeypatch.setattr(config_mod, "_project_root", lambda: tmp_path / "no-config")


@pytest.fixture()
def clean_file(tmp_path):
    path = tmp_path / "clean.bmml"
    path.write_text(CLEAN_YAML)
    return path


class TestRender:
    def test_stdout(self, bmml_file, capsys):
        assert main(["render", str(bmml_file)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("<svg ")
        assert out.rstrip().endswith("</svg>")

    def test_output_file(self, bmml_file, tmp_path, capsys):
        target = tmp_path / "out" / "canvas.svg"
        assert main(["render", str(bmml_file), "-o", str(target)]) == 0
        assert target.read_text().startswith("<svg ")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert f"Output: {target}" in captured.err

    def test_xml_declaration(self, bmml_file, capsys):
        assert main(["render", str(bmml_file), "--xml-declaration"]) == 0
        assert capsys.readouterr().out.startswith("<?xml")

    def test_config_file(self, bmml_file, tmp_path, capsys):
        config = tmp_path / "render.yaml"
        config.write_text("title: Custom Title\n")
        assert main(["render", str(bmml_file), "--config", str(config)]) == 0
        assert ">Custom Title<" in capsys.readouterr().out

    def test_missing_config(self, bmml_file, tmp_path, capsys):
        assert main(["render", str(bmml_file), "--config", str(tmp_path / "nope.yaml")]) == 1
        assert "File not found:" in capsys.readouterr().err


class TestGraph:
    def test_json(self, bmml_file, capsys):
        assert main(["graph", str(bmml_file), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["fit-buyers"] == ["cs-buyers"]
        assert data["ch-website"] == ["cs-buyers"]
        assert "cs-ghost" not in data

    def test_text(self, clean_file, capsys):
        assert main(["graph", str(clean_file)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            "  cs-a [Alpha] -> cs-a",
            "  vp-idle [Idle Idea] -> (orphaned)",
        ]


class TestCheck:
    def test_dangling_exits_nonzero(self, bmml_file, capsys):
        assert main(["check", str(bmml_file)]) == 1
        out = capsys.readouterr().out
        assert "Dangling references (1):" in out
        assert "  ! fit-buyers: for.customer_segments references unknown customer_segment 'cs-ghost'" in out

    def test_json(self, bmml_file, capsys):
        assert main(["check", str(bmml_file), "--json"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert [ref["target"] for ref in data] == ["cs-ghost"]

    def test_clean(self, clean_file, capsys):
        assert main(["check", str(clean_file)]) == 0
        assert capsys.readouterr().out.strip() == "OK"


class TestErrors:
    def test_missing_file(self, tmp_path, capsys):
        missing = tmp_path / "none.bmml"
        assert main(["render", str(missing)]) == 1
        assert f"File not found: {missing}" in capsys.readouterr().err

    def test_malformed_document(self, tmp_path, capsys):
        path = tmp_path / "old.bmml"
        path.write_text("version: '1.0'\nmeta: {name: Old}\n")
        assert main(["graph", str(path)]) == 1
        err = capsys.readouterr().err
        assert f"Invalid document: {path}" in err
        assert "/version" in err

    def test_non_utf8_file(self, tmp_path, capsys):
        path = tmp_path / "latin1.bmml"
        path.write_bytes(b"version: '2.0'\nmeta:\n  name: \"\xff\xfe\"\n")
        assert main(["check", str(path)]) == 1
        assert f"Invalid document: {path}" in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: bmml" in capsys.readouterr().out


class TestVerbose:
    @pytest.mark.parametrize("argv,expected", [
        (["-v", "render", "f.bmml"], True),
        (["render", "f.bmml", "-v"], True),
        (["render", "f.bmml"], False),
    ])
    def test_flag_position(self, argv, expected):
        assert _build_parser().parse_args(argv).verbose is expected
