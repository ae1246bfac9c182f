"""Tests for the gox command line."""

from unittest.mock import patch

import pytest

from gox.cli import main, parse_config
from gox.dispatcher import AggregateBuildError
from gox.errors import NoValidPlatformsError
from gox.platform import Platform
from gox.platform_filter import PlatformFilter
from gox.toolchain import ToolchainNotFoundError


class TestParseConfig:
    """Tests for command-line parsing."""

    def test_defaults(self):
        config = parse_config([])

        assert config.packages == ["."]
        assert config.parallel == -1
        assert config.output_template == "{{.Dir}}_{{.OS}}_{{.Arch}}"
        assert config.go_cmd == "go"
        assert not config.build_toolchain
        assert not config.verbose
        assert config.platform_filter == PlatformFilter()

    def test_single_dash_flags(self):
        config = parse_config([
            "-os", "linux darwin",
            "-arch=!arm",
            "-osarch", "windows/386 !darwin/386",
            "-ldflags", "-s -w",
            "-tags", "netgo",
            "-gcflags=-N",
            "-output", "dist/{{.OS}}_{{.Arch}}/{{.Dir}}",
            "-parallel", "2",
            "-cgo",
            "-rebuild",
            "-verbose",
            "-gocmd", "go1.4",
            "./cmd/a", "./cmd/b",
        ])

        assert config.packages == ["./cmd/a", "./cmd/b"]
        assert config.platform_filter.os == ["linux", "darwin"]
        assert config.platform_filter.arch == ["!arm"]
        assert config.platform_filter.osarch == [Platform("windows", "386"), Platform("!darwin", "386")]
        assert config.ldflags == "-s -w"
        assert config.tags == "netgo"
        assert config.gcflags == "-N"
        assert config.output_template == "dist/{{.OS}}_{{.Arch}}/{{.Dir}}"
        assert config.parallel == 2
        assert config.cgo and config.rebuild and config.verbose
        assert config.go_cmd == "go1.4"

    def test_mode_switches(self):
        assert parse_config(["-build-toolchain"]).build_toolchain
        assert parse_config(["-osarch-list"]).list_osarch

    def test_negative_parallel(self):
        assert parse_config(["-parallel", "-1"]).parallel == -1

    def test_flag_value_starting_with_dash(self):
        config = parse_config(["-ldflags", "-w", "-gcflags", "-N", "./cmd/app"])

        assert config.ldflags == "-w"
        assert config.gcflags == "-N"
        assert config.packages == ["./cmd/app"]

    def test_dash_value_for_every_string_flag(self):
        config = parse_config(["-tags", "-x", "-output", "-out", "-gocmd", "-go"])

        assert config.tags == "-x"
        assert config.output_template == "-out"
        assert config.go_cmd == "-go"

    def test_arguments_after_double_dash_untouched(self):
        assert parse_config(["--", "-ldflags"]).packages == ["-ldflags"]

    def test_reads_sys_argv_by_default(self):
        with patch("sys.argv", ["gox", "-ldflags", "-s", "./cmd/app"]):
            config = parse_config()

        assert config.ldflags == "-s"
        assert config.packages == ["./cmd/app"]

    def test_bad_osarch_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_config(["-osarch", "linux"])

        assert exc_info.value.code == 2

    def test_help_prints_usage(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_config(["-help"])

        assert exc_info.value.code == 0
        err = capsys.readouterr().err
        assert "Usage: gox [options] [packages]" in err
        assert "GOX_[OS]_[ARCH]_LDFLAGS" in err


class TestMain:
    """Tests for gox.cli.main() exit behavior."""

    def test_success_exits_zero(self):
        with patch("gox.cli.cross_compile", return_value=["cmd/app_linux_amd64"]) as run:
            with pytest.raises(SystemExit) as exc_info:
                main(["-os", "linux"])

        assert exc_info.value.code == 0
        config = run.call_args.args[0]
        assert config.platform_filter.os == ["linux"]

    def test_missing_go_exits_one(self, capsys):
        with patch("gox.cli.cross_compile", side_effect=ToolchainNotFoundError("go")):
            with pytest.raises(SystemExit) as exc_info:
                main([])

        assert exc_info.value.code == 1
        assert "go executable must be on the PATH" in capsys.readouterr().err

    def test_no_platforms_exits_one(self, capsys):
        with patch("gox.cli.cross_compile", side_effect=NoValidPlatformsError()):
            with pytest.raises(SystemExit) as exc_info:
                main(["-os", "nope"])

        assert exc_info.value.code == 1
        assert "No valid platforms" in capsys.readouterr().err

    def test_build_errors_exit_one(self, capsys):
        error = AggregateBuildError(["linux/arm: boom"])
        with patch("gox.cli.cross_compile", side_effect=error):
            with pytest.raises(SystemExit) as exc_info:
                main([])

        assert exc_info.value.code == 1
        assert "1 build(s) failed" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_130(self):
        with patch("gox.cli.cross_compile", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main([])

        assert exc_info.value.code == 130

    def test_unexpected_error_exits_one(self, capsys):
        with patch("gox.cli.cross_compile", side_effect=RuntimeError("surprise")):
            with pytest.raises(SystemExit) as exc_info:
                main([])

        assert exc_info.value.code == 1
        assert "RuntimeError: surprise" in capsys.readouterr().err
