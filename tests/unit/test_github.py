"""Unit tests for GitHub Actions workflow commands."""

from slack_approval.github import set_failed, set_output


def test_set_output_appends_to_file(tmp_path):
    output = tmp_path / "github_output"

    set_output("mainMessageTs", "100.001", str(output))
    set_output("replyMessageTs", "100.002", str(output))

    assert output.read_text() == "mainMessageTs=100.001\nreplyMessageTs=100.002\n"


def test_set_output_multiline_uses_delimiter(tmp_path):
    output = tmp_path / "github_output"

    set_output("summary", "line one\nline two", str(output))

    lines = output.read_text().splitlines()
    assert lines[0].startswith("summary<<ghadelimiter_")
    assert lines[1:3] == ["line one", "line two"]
    assert lines[3] == lines[0].split("<<", 1)[1]


def test_set_output_without_file(monkeypatch, capsys):
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)

    set_output("mainMessageTs", "100.001")

    assert capsys.readouterr().out == "::set-output name=mainMessageTs::100.001\n"


def test_set_failed_writes_error_annotation(capsys):
    set_failed("Insufficient approvers\n(Have: 1, Need: 2)")

    assert capsys.readouterr().out == "::error::Insufficient approvers%0A(Have: 1, Need: 2)\n"
