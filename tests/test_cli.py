"""Tests for llm_summarize/cli.py — argument parsing and high-level CLI behaviour."""

import os
from unittest.mock import patch

import httpx
import pytest

from llm_summarize.cli import _build_parser, main


def _run_main(argv, client=None):
    """Run ``main()`` with ``argv``; route requests to ``client`` if given."""
    patches = [patch("sys.argv", ["llm-summarize", *argv])]
    if client is not None:
        patches.append(patch("llm_summarize.pipeline.create_client", return_value=client))
    for p in patches:
        p.start()
    try:
        main()
    finally:
        for p in reversed(patches):
            p.stop()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def test_parser_requires_model_and_file():
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args([])
    with pytest.raises(SystemExit):
        parser.parse_args(["only-model"])


def test_parser_collects_files_in_order():
    args = _build_parser().parse_args(["m", "b.txt", "a.txt"])
    assert args.model == "m"
    assert args.files == ["b.txt", "a.txt"]


def test_parser_defaults():
    with patch.dict(os.environ, {}, clear=False):
        for name in ("LLM_SERVER_HOST", "LLM_SERVER_PORT", "LLM_TIMEOUT"):
            os.environ.pop(name, None)
        args = _build_parser().parse_args(["m", "a.txt"])
    assert args.host == "localhost"
    assert args.port == 11434
    assert args.timeout == 300
    assert args.dark is False
    assert args.verbose is False
    assert args.output is None
    assert args.print is False


def test_parser_environment_defaults():
    env = {"LLM_SERVER_HOST": "127.0.0.1", "LLM_SERVER_PORT": "8080", "LLM_TIMEOUT": "60"}
    with patch.dict(os.environ, env):
        args = _build_parser().parse_args(["m", "a.txt"])
    assert (args.host, args.port, args.timeout) == ("127.0.0.1", 8080, 60.0)


def test_parser_flags_override_environment():
    with patch.dict(os.environ, {"LLM_SERVER_PORT": "8080"}):
        args = _build_parser().parse_args(["m", "a.txt", "--port", "9000"])
    assert args.port == 9000


def test_parser_rejects_non_positive_timeout():
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["m", "a.txt", "--timeout", "0"])


def test_parser_output_and_print_are_mutually_exclusive():
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["m", "a.txt", "--output", "x.md", "--print"])


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------


def test_main_print_writes_markdown_to_stdout(server, notes_file, capsys):
    server.reply_summary("# Summary\n\n- done")
    _run_main(["test-model", str(notes_file), "--print"], client=server.client())
    assert capsys.readouterr().out == "# Summary\n\n- done\n"
    assert server.json_bodies()[0]["model"] == "test-model"


def test_main_non_tty_stdout_implies_print(server, notes_file, capsys):
    server.reply_summary("plain output\n")
    _run_main(["m", str(notes_file)], client=server.client())
    assert capsys.readouterr().out == "plain output\n"


def test_main_output_saves_file(server, notes_file, tmp_path, capsys):
    server.reply_summary("# Saved summary")
    target = tmp_path / "out.md"
    _run_main(["m", str(notes_file), "--output", str(target)], client=server.client())
    assert target.read_text(encoding="utf-8") == "# Saved summary"
    assert capsys.readouterr().out == ""


def test_main_interactive_uses_terminal_presenter(server, notes_file):
    server.reply_summary("# Shown")
    with (
        patch("llm_summarize.cli.sys.stdout") as mock_stdout,
        patch("llm_summarize.cli.TerminalPresenter") as mock_presenter,
    ):
        mock_stdout.isatty.return_value = True
        _run_main(["m", str(notes_file), "--dark"], client=server.client())
    session = mock_presenter.call_args.args[0]
    assert session.markdown == "# Shown"
    assert session.dark_mode is True
    mock_presenter.return_value.run.assert_called_once()


def test_main_missing_file_exits_1_without_request(server, tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_main(["m", str(tmp_path / "missing.txt")], client=server.client())
    assert excinfo.value.code == 1
    assert server.requests == []
    assert "missing.txt" in capsys.readouterr().err


def test_main_format_error_logs_raw_body(server, notes_file, capsys):
    server.reply(httpx.Response(200, text='{"unexpected": "shape"}'))
    with pytest.raises(SystemExit) as excinfo:
        _run_main(["m", str(notes_file)], client=server.client())
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "Unexpected API response" in err
    assert '{"unexpected": "shape"}' in err


def test_main_unreachable_server_exits_1(server, notes_file, capsys):
    server.reply(httpx.ConnectError("Connection refused"))
    with pytest.raises(SystemExit) as excinfo:
        _run_main(["m", str(notes_file)], client=server.client())
    assert excinfo.value.code == 1
    assert "Cannot reach LLM server" in capsys.readouterr().err


def test_main_ctrl_c_while_waiting_exits_130(notes_file, capsys):
    with patch("llm_summarize.cli.SummarySession") as mock_session:
        mock_session.return_value.run.side_effect = KeyboardInterrupt()
        with pytest.raises(SystemExit) as excinfo:
            _run_main(["m", str(notes_file)])
    assert excinfo.value.code == 130
    captured = capsys.readouterr()
    assert "Cancelled." in captured.err
    assert captured.out == ""


def test_main_blank_model_is_usage_error(notes_file):
    with pytest.raises(SystemExit) as excinfo:
        _run_main(["   ", str(notes_file)])
    assert excinfo.value.code == 2


def test_main_config_reaches_client_factory(server, notes_file):
    server.reply_summary("ok")
    with (
        patch("sys.argv", ["llm-summarize", "m", str(notes_file), "--print",
                           "--port", "8123", "--timeout", "45"]),
        patch("llm_summarize.pipeline.create_client", return_value=server.client()) as mock_create,
    ):
        main()
    config = mock_create.call_args.args[0]
    assert config.port == 8123
    assert config.timeout_s == 45.0
