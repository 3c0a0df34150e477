import os

import pytest
from conftest import make_executable, make_settings

from minish import CommandResult, Shell, ShellExit
from minish.resolver import BUILTIN_NAMES
from minish.shell.registry import COMMAND_REGISTRY
from minish.shell_parser import parse_command


def test_echo_joins_arguments(shell, capsys):
    assert shell.exec("echo hello    world") == 0
    assert capsys.readouterr().out == "hello world\n"


def test_echo_single_quotes_are_verbatim(shell, capsys):
    shell.exec(r"echo 'a\nb'")
    assert capsys.readouterr().out == "a\\nb\n"


def test_echo_decodes_escapes_outside_single_quotes(shell, capsys):
    shell.exec(r'echo "a\nb" "tab\there" "a\qb"')
    assert capsys.readouterr().out == "a\nb tab\there a\\qb\n"


def test_echo_without_arguments_prints_newline(shell, capsys):
    shell.exec("echo")
    assert capsys.readouterr().out == "\n"


def test_echo_redirect_truncates(shell, capsys):
    shell.exec("echo x > f")
    shell.exec("echo x > f")
    assert open("f").read() == "x\n"
    assert capsys.readouterr().out == ""


def test_echo_redirect_appends(shell):
    shell.exec("echo x >> f")
    shell.exec("echo x 1>> f")
    assert open("f").read() == "x\nx\n"


def test_echo_creates_error_target(shell, capsys):
    shell.exec("echo visible 2> err.txt")
    assert os.path.exists("err.txt")
    assert open("err.txt").read() == ""
    assert capsys.readouterr().out == "visible\n"


def test_redirect_into_missing_directory_fails(shell, capsys):
    status = shell.exec("echo hi > missing/dir/f")
    captured = capsys.readouterr()
    assert status == 1
    assert "missing/dir/f" in captured.err
    assert captured.out == ""


def test_type_reports_builtins(shell, capsys):
    for name in ("echo", "exit", "type", "pwd", "cd", "history"):
        shell.exec(f"type {name}")
        assert capsys.readouterr().out == f"{name} is a shell builtin\n"


def test_type_reports_first_path_match(tmp_path, bin_dir, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    script = make_executable(bin_dir, "mytool")
    shell = Shell(make_settings(search_path=str(bin_dir)))
    assert shell.exec("type mytool") == 0
    assert capsys.readouterr().out == f"mytool is {script}\n"
    assert shell.exec("type nosuchtool") == 1
    assert capsys.readouterr().out == "nosuchtool: not found\n"


def test_pwd_and_cd(shell, tmp_path, capsys):
    target = tmp_path / "elsewhere"
    target.mkdir()
    shell.exec(f"cd {target}")
    shell.exec("pwd")
    assert capsys.readouterr().out == f"{os.path.realpath(target)}\n"


def test_cd_relative_and_parent(shell, tmp_path):
    shell.exec("cd ..")
    assert os.path.realpath(os.getcwd()) == os.path.realpath(tmp_path)
    shell.exec("cd ./work")
    assert os.path.basename(os.getcwd()) == "work"


def test_cd_home(shell, tmp_path):
    shell.exec("cd")
    assert os.path.realpath(os.getcwd()) == os.path.realpath(tmp_path)
    shell.exec("cd work")
    shell.exec("cd ~")
    assert os.path.realpath(os.getcwd()) == os.path.realpath(tmp_path)
    shell.exec("cd ~/work")
    assert os.path.basename(os.getcwd()) == "work"


def test_cd_without_home(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    shell = Shell(make_settings(home=None))
    assert shell.exec("cd") == 1
    assert "HOME not set" in capsys.readouterr().err


def test_cd_failure_keeps_directory(shell, capsys):
    before = os.getcwd()
    assert shell.exec("cd /does-not-exist") == 1
    assert capsys.readouterr().err == "cd: /does-not-exist: No such file or directory\n"
    assert os.getcwd() == before


def test_history_lists_entries(shell, capsys):
    shell.submit("echo one")
    shell.submit("echo two")
    capsys.readouterr()
    shell.submit("history")
    assert capsys.readouterr().out == "    1  echo one\n    2  echo two\n    3  history\n"
    shell.submit("history 2")
    assert capsys.readouterr().out == "    3  history\n    4  history 2\n"


def test_history_rejects_bad_arguments(shell, capsys):
    assert shell.exec("history abc") == 2
    assert "numeric argument required" in capsys.readouterr().err
    assert shell.exec("history -r") == 2
    assert shell.exec("history -x") == 2


def test_history_file_flags(shell, tmp_path):
    source = tmp_path / "source"
    source.write_text("echo loaded\n\nls\n")
    shell.submit(f"history -r {source}")
    assert list(shell.state.history)[-2:] == ["echo loaded", "ls"]

    full = tmp_path / "full"
    shell.submit(f"history -w {full}")
    assert full.read_text().splitlines() == list(shell.state.history)

    delta = tmp_path / "delta"
    shell.submit("echo after")
    shell.submit(f"history -a {delta}")
    assert delta.read_text() == f"echo after\nhistory -a {delta}\n"


def test_history_read_missing_file(shell, capsys):
    assert shell.exec("history -r nope.txt") == 1
    assert "nope.txt" in capsys.readouterr().err


def test_exit_raises_with_code(shell):
    with pytest.raises(ShellExit) as exc:
        shell.exec("exit 3")
    assert exc.value.code == 3


def test_exit_defaults_to_last_status(shell):
    shell.exec("type nosuchtool-xyz")
    with pytest.raises(ShellExit) as exc:
        shell.exec("exit")
    assert exc.value.code == 1


def test_unknown_command_reports_not_found(shell, capsys):
    assert shell.exec("definitely-not-a-command-xyz arg") == 127
    assert capsys.readouterr().out == "definitely-not-a-command-xyz: command not found\n"


def test_syntax_error_is_reported(shell, capsys):
    assert shell.exec("echo 'unterminated") == 2
    assert "syntax error" in capsys.readouterr().err


def test_history_file_preload_and_save(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    histfile = tmp_path / "hist"
    histfile.write_text("echo earlier\n")
    shell = Shell(make_settings(histfile=histfile))
    shell.load_history_file()
    assert list(shell.state.history) == ["echo earlier"]
    assert shell.state.history.flush_cursor == 1

    shell.submit("echo now")
    shell.save_history_file()
    assert histfile.read_text() == "echo earlier\necho now\n"


def test_registry_covers_every_builtin(shell):
    assert sorted(COMMAND_REGISTRY.names()) == sorted(BUILTIN_NAMES)
    assert shell.available_commands() == sorted(BUILTIN_NAMES)
    with pytest.raises(ValueError):
        COMMAND_REGISTRY.register("echo", lambda shell, command: None)


def test_run_builtin_returns_handler_result(shell):
    shell.register_command("pwd", lambda command: CommandResult(stdout="here\n", exit_code=3))
    result = shell.run_builtin(parse_command("pwd"))
    assert (result.stdout, result.exit_code) == ("here\n", 3)


def test_run_builtin_maps_unexpected_failure(shell):
    def broken(command):
        raise RuntimeError("boom")

    shell.register_command("pwd", broken)
    result = shell.run_builtin(parse_command("pwd"))
    assert result.exit_code == 1
    assert result.stderr == "pwd failed: boom\n"
