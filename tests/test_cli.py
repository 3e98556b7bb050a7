import pytest

from dhcpserv.cli import CliOptions, main, parse_args


def test_no_arguments_gives_defaults():
    options = parse_args([])
    assert options == CliOptions()
    assert options.complete is True


def test_debug_flag():
    options = parse_args(["-d"])
    assert options.debug is True
    assert options.serve is False


def test_serve_sets_timeout():
    options = parse_args(["-s", "5"])
    assert options.serve is True
    assert options.threaded is False
    assert options.timeout == 5


def test_thread_flag_also_serves():
    options = parse_args(["-t", "7"])
    assert options.serve is True
    assert options.threaded is True
    assert options.timeout == 7


def test_attached_argument():
    options = parse_args(["-s3"])
    assert options.timeout == 3
    assert options.serve is True


def test_clustered_flags():
    options = parse_args(["-ds", "4"])
    assert options.debug is True
    assert options.timeout == 4


@pytest.mark.parametrize(
    "text, expected",
    [("12abc", 12), ("abc", 0), ("  9", 9), ("-2", -2), ("", 0)],
)
def test_timeout_parsed_like_strtol(text, expected):
    assert parse_args(["-s", text]).timeout == expected


def test_port_option():
    assert parse_args(["-p", "6767"]).port == 6767


def test_unknown_option_stops_parsing_but_keeps_earlier_flags():
    options = parse_args(["-d", "-x", "-s", "5"])
    assert options.debug is True
    assert options.serve is False
    assert options.complete is False
    assert "x" in options.error


def test_help_stops_parsing():
    options = parse_args(["-h", "-d"])
    assert options.complete is False
    assert options.debug is False


def test_missing_argument():
    options = parse_args(["-s"])
    assert options.complete is False
    assert options.serve is False


def test_parsing_stops_at_non_option():
    options = parse_args(["file", "-d"])
    assert options.debug is False
    assert options.complete is True


def test_double_dash_ends_options():
    options = parse_args(["--", "-d"])
    assert options.debug is False


def test_last_timeout_wins():
    options = parse_args(["-s", "2", "-t", "6"])
    assert options.timeout == 6
    assert options.threaded is True


def test_main_debug_reports_shutdown(capsys):
    assert main(["-d"]) == 0
    assert "Shutting down" in capsys.readouterr().err


def test_main_without_debug_is_quiet(capsys):
    assert main([]) == 0
    assert capsys.readouterr().err == ""


def test_main_reports_bad_option(capsys):
    assert main(["-x"]) == 0
    assert "invalid option" in capsys.readouterr().err


def test_main_serves_until_timeout():
    assert main(["-s", "1", "-p", "0"]) == 0


def test_main_threaded_serves_until_timeout(capsys):
    assert main(["-t", "1", "-p", "0"]) == 0
    assert "Should have finished sending offers" not in capsys.readouterr().out