import pytest

from minish.exceptions import ShellSyntaxError
from minish.shell_parser import Argument, Redirect, parse_command, parse_pipeline, split_pipeline


def texts(line: str) -> list[str]:
    return [arg.text for arg in parse_command(line).argv]


def test_whitespace_separates_arguments():
    assert texts("echo  hello \t world") == ["echo", "hello", "world"]


def test_single_quotes_keep_everything_literal():
    command = parse_command(r"echo 'a\nb  \"c'")
    assert command.argv[1] == Argument(r"a\nb  \"c", single_quoted=True)


def test_adjacent_quotes_join_into_one_argument():
    assert texts("echo 'hello'\"world\"x") == ["echo", "helloworldx"]


def test_empty_quotes_produce_an_argument():
    assert texts("echo '' \"\" x") == ["echo", "", "", "x"]


def test_double_quotes_only_escape_special_characters():
    assert texts(r'echo "a\"b\\c\$d\`e"') == ["echo", 'a"b\\c$d`e']
    assert texts(r'echo "a\qb\nc"') == ["echo", r"a\qb\nc"]


def test_unquoted_backslash_escapes_next_character():
    assert texts(r"echo a\ b \'c\' d\n") == ["echo", "a b", "'c'", "dn"]


def test_trailing_backslash_is_literal():
    assert texts("echo abc\\") == ["echo", "abc\\"]


def test_single_quoted_flag_follows_last_quoted_segment():
    command = parse_command("echo 'a'\"b\" \"c\"'d' plain")
    flags = [arg.single_quoted for arg in command.argv[1:]]
    assert flags == [False, True, False]


@pytest.mark.parametrize(
    ("line", "stdout", "stderr"),
    [
        ("ls > out", Redirect("out"), None),
        ("ls 1> out", Redirect("out"), None),
        ("ls >> out", Redirect("out", append=True), None),
        ("ls 1>> out", Redirect("out", append=True), None),
        ("ls 2> err", None, Redirect("err")),
        ("ls 2>> err", None, Redirect("err", append=True)),
        ("ls >out 2>>err", Redirect("out"), Redirect("err", append=True)),
    ],
)
def test_redirect_operators(line, stdout, stderr):
    command = parse_command(line)
    assert command.name == "ls"
    assert command.args == []
    assert command.stdout == stdout
    assert command.stderr == stderr


def test_digit_inside_word_is_not_a_redirect():
    command = parse_command("echo file1>out")
    assert command.args == ["file1"]
    assert command.stdout == Redirect("out")


def test_quoted_or_escaped_operators_are_arguments():
    command = parse_command(r"""echo '>' \> "2>" \2\>x""")
    assert command.args == [">", ">", "2>", "2>x"]
    assert command.stdout is None


def test_redirect_target_may_be_quoted():
    command = parse_command("echo hi > 'my file'")
    assert command.stdout == Redirect("my file")


def test_words_after_redirect_target_stay_arguments():
    command = parse_command("echo a > out b")
    assert command.args == ["a", "b"]
    assert command.stdout == Redirect("out")


def test_repeated_redirect_keeps_last_target():
    command = parse_command("echo a > first > second")
    assert command.stdout == Redirect("second")


def test_missing_redirect_target_is_an_error():
    with pytest.raises(ShellSyntaxError):
        parse_command("echo hi >")
    with pytest.raises(ShellSyntaxError):
        parse_command("echo hi > > out")


@pytest.mark.parametrize("line", ["echo 'open", 'echo "open'])
def test_unterminated_quote_is_an_error(line):
    with pytest.raises(ShellSyntaxError):
        parse_command(line)


def test_split_pipeline_on_unquoted_pipes():
    assert split_pipeline("cat f |  wc -l|\thead") == ["cat f", "wc -l", "head"]


def test_split_pipeline_ignores_quoted_and_escaped_pipes():
    line = r"""echo 'a|b' "c|d" e\|f | cat"""
    assert split_pipeline(line) == [r"""echo 'a|b' "c|d" e\|f""", "cat"]


def test_split_pipeline_without_pipe_returns_single_stage():
    assert split_pipeline("  echo hi  ") == ["echo hi"]


def test_parse_pipeline_builds_every_stage():
    pipeline = parse_pipeline("echo 'x | y' | tr a-z A-Z > out")
    assert [cmd.name for cmd in pipeline.commands] == ["echo", "tr"]
    assert pipeline.commands[0].args == ["x | y"]
    assert pipeline.commands[1].stdout == Redirect("out")


def test_parse_pipeline_empty_returns_no_commands():
    assert parse_pipeline("   \n").commands == []


def test_parse_pipeline_missing_command_before_pipe():
    with pytest.raises(ShellSyntaxError):
        parse_pipeline("echo hi |")
    with pytest.raises(ShellSyntaxError):
        parse_pipeline("echo hi | | cat")


def test_parse_pipeline_redirection_without_command():
    with pytest.raises(ShellSyntaxError):
        parse_pipeline("> out.txt")
