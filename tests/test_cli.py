import subprocess
from unittest import mock

import pytest

from somo.cli import Flags, interactive_process_kill, kill_process, main, parse_args
from somo.schemas import AddressType, Connection


def _connection(pid):
    return Connection(
        proto="tcp",
        local_port="8080",
        remote_address="0.0.0.0",
        remote_port="0",
        program="nginx",
        pid=pid,
        state="listen",
        address_type=AddressType.UNSPECIFIED,
    )


def test_all_flags_parsing():
    flags = parse_args(
        [
            "-k",
            "--proto", "udp",
            "--ip", "192.168.0.1",
            "--remote-port", "53",
            "-p", "8080",
            "--program", "nginx",
            "--pid", "1234",
            "-o",
            "-l",
            "--exclude-ipv6",
        ]
    )
    assert flags.kill
    assert flags.proto == "udp"
    assert flags.ip == "192.168.0.1"
    assert flags.remote_port == "53"
    assert flags.port == "8080"
    assert flags.program == "nginx"
    assert flags.pid == "1234"
    assert flags.open
    assert flags.listen
    assert flags.exclude_ipv6


def test_default_values():
    assert parse_args([]) == Flags()


def test_flag_short_and_long_equivalence():
    short = parse_args(["-k", "-p", "80", "-o", "-l"])
    long = parse_args(["--kill", "--port", "80", "--open", "--listen"])
    assert short == long
    assert short.port == "80"


def test_format_and_json_flags():
    flags = parse_args(["--format", "{{pid}}", "--json"])
    assert flags.format == "{{pid}}"
    assert flags.json


def test_unknown_flag_exits():
    with pytest.raises(SystemExit) as excinfo:
        parse_args(["--bogus"])
    assert excinfo.value.code == 2


def test_main_help_exits_cleanly(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0
    assert "--exclude-ipv6" in capsys.readouterr().out


@mock.patch("somo.cli.subprocess.run")
def test_kill_process_success(run, capsys):
    run.return_value = subprocess.CompletedProcess(["kill", "1234"], 0)
    kill_process("1234")
    run.assert_called_once_with(["kill", "1234"], capture_output=True, check=False)
    assert "Killed process with PID 1234." in capsys.readouterr().out


@mock.patch("somo.cli.subprocess.run")
def test_kill_process_failure(run, capsys):
    run.return_value = subprocess.CompletedProcess(["kill", "1"], 1)
    kill_process("1")
    output = capsys.readouterr().out
    assert "Failed to kill process, try running" in output
    assert "Couldn't kill process! Try again using sudo." in output


@mock.patch("somo.cli.subprocess.run", side_effect=FileNotFoundError)
def test_kill_process_without_kill_command(run):
    with pytest.raises(RuntimeError, match="PID 42"):
        kill_process("42")


@mock.patch("somo.cli.subprocess.run")
def test_interactive_kill_picks_by_index(run, monkeypatch, capsys):
    run.return_value = subprocess.CompletedProcess([], 0)
    monkeypatch.setattr("builtins.input", lambda prompt: "2")
    interactive_process_kill([_connection("10"), _connection("20")])
    assert run.call_args.args[0] == ["kill", "20"]
    output = capsys.readouterr().out
    assert "Killed process with PID 20." in output
    assert "Couldn't find process." not in output


@pytest.mark.parametrize("answer", ["0", "3", "abc", ""])
@mock.patch("somo.cli.subprocess.run")
def test_interactive_kill_rejects_bad_choice(run, answer, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt: answer)
    interactive_process_kill([_connection("10"), _connection("20")])
    assert run.call_count == 0
    assert "Couldn't find process." in capsys.readouterr().out


def test_interactive_kill_without_connections(capsys):
    interactive_process_kill([])
    assert "Couldn't find process." in capsys.readouterr().out


@mock.patch("somo.cli.subprocess.run")
def test_interactive_kill_end_of_input(run, monkeypatch, capsys):
    def _raise(prompt):
        raise EOFError

    monkeypatch.setattr("builtins.input", _raise)
    interactive_process_kill([_connection("10")])
    assert run.call_count == 0
    assert "Couldn't find process." in capsys.readouterr().out