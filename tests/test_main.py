import json

import pytest

from protoc_json.main import main


def _run(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


@pytest.fixture
def proto_path(tmp_path):
    path = tmp_path / "user.proto"
    path.write_text(
        'syntax = "proto3";\n'
        "message User {\n"
        "  string name = 1;\n"
        "  repeated string emails = 2;\n"
        "}\n"
    )
    return path


class TestParseCommand:
    def test_prints_compact_json(self, proto_path, capsys):
        assert _run(["parse", str(proto_path)]) == 0
        out = capsys.readouterr().out
        assert out.count("\n") == 1
        doc = json.loads(out)
        assert doc["messages"][0]["fields"][1]["repeated"] is True

    def test_pretty(self, proto_path, capsys):
        assert _run(["parse", str(proto_path), "--pretty"]) == 0
        out = capsys.readouterr().out
        assert out.startswith('{\n  "syntax": "proto3",')

    def test_output_file(self, proto_path, tmp_path, capsys):
        output = tmp_path / "out" / "user.json"
        output.parent.mkdir()
        assert _run(["parse", str(proto_path), "-o", str(output)]) == 0
        assert capsys.readouterr().out == ""
        assert json.loads(output.read_text())["messages"][0]["name"] == "User"

    def test_syntax_error_exit_code(self, tmp_path, capsys):
        bad = tmp_path / "bad.proto"
        bad.write_text("message Broken {\n  int32 id = 1\n}\n")
        assert _run(["parse", str(bad)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error parsing file: Line 3:1" in captured.err

    def test_missing_file_exit_code(self, tmp_path, capsys):
        assert _run(["parse", str(tmp_path / "nope.proto")]) == 1
        assert "Cannot read" in capsys.readouterr().err


class TestValidateCommand:
    def test_valid(self, proto_path, capsys):
        assert _run(["validate", str(proto_path)]) == 0
        assert "File is valid" in capsys.readouterr().out

    def test_invalid(self, tmp_path, capsys):
        bad = tmp_path / "bad.proto"
        bad.write_text("enum E { A = 0 }")
        assert _run(["validate", str(bad)]) == 1
        assert "Validation failed" in capsys.readouterr().err


class TestCreditsCommand:
    def test_credits(self, capsys):
        assert _run(["credits"]) == 0
        assert "protoc-json 0.1.0" in capsys.readouterr().out

    def test_command_required(self):
        assert _run([]) == 2
