"""Unit tests for the single-unit Go cross compiler."""

import os
from unittest.mock import patch

import pytest

from gox.compiler import (
    BuildSettings,
    CompilationError,
    CompileOptions,
    build_command,
    go_cross_compile,
    render_output_path,
)
from gox.platform import Platform
from gox.toolchain import ToolchainError

LINUX_ARM = Platform("linux", "arm")
WINDOWS_386 = Platform("windows", "386")


class TestRenderOutputPath:
    """Test cases for render_output_path()."""

    def test_default_template(self):
        assert render_output_path("{{.Dir}}_{{.OS}}_{{.Arch}}", "github.com/acme/tool", LINUX_ARM) == "tool_linux_arm"

    def test_windows_gets_exe(self):
        assert render_output_path("bin/{{.OS}}/{{.Dir}}", "cmd/app", WINDOWS_386) == "bin/windows/app.exe"

    def test_whitespace_inside_braces(self):
        assert render_output_path("{{ .Dir }}-{{ .Arch }}", "app", LINUX_ARM) == "app-arm"

    def test_template_without_placeholders(self):
        assert render_output_path("out", "app", LINUX_ARM) == "out"

    def test_unknown_field(self):
        with pytest.raises(CompilationError, match="unknown output template field"):
            render_output_path("{{.Version}}", "app", LINUX_ARM)


class TestBuildSettings:
    """Test cases for BuildSettings.options_for()."""

    def test_copies_shared_values(self):
        settings = BuildSettings(ldflags="-s", tags="netgo", gcflags="-N", cgo=True, rebuild=True, go_cmd="go1.4")
        options = settings.options_for("cmd/app", LINUX_ARM)

        assert options.package_path == "cmd/app"
        assert options.platform == LINUX_ARM
        assert options.ldflags == "-s"
        assert options.tags == "netgo"
        assert options.gcflags == "-N"
        assert options.cgo is True
        assert options.rebuild is True
        assert options.go_cmd == "go1.4"

    def test_returns_fresh_options(self):
        settings = BuildSettings()
        assert settings.options_for("a", LINUX_ARM) is not settings.options_for("a", LINUX_ARM)


class TestBuildCommand:
    """Test cases for build_command()."""

    def test_flags(self):
        options = CompileOptions("cmd/app", LINUX_ARM, ldflags="-s -w", tags="netgo", gcflags="-N")
        assert build_command(options, "/out/app") == [
            "build", "-gcflags", "-N", "-ldflags", "-s -w", "-tags", "netgo", "-o", "/out/app",
        ]

    def test_rebuild_adds_a(self):
        options = CompileOptions("cmd/app", LINUX_ARM, rebuild=True)
        assert build_command(options, "/out/app")[:2] == ["build", "-a"]


class TestGoCrossCompile:
    """Test cases for go_cross_compile()."""

    @pytest.fixture
    def exec_go(self):
        with patch("gox.compiler.exec_go", return_value="") as mock_exec:
            yield mock_exec

    @pytest.fixture
    def host(self):
        with patch("gox.compiler.host_platform", return_value=Platform("linux", "amd64")) as mock_host:
            yield mock_host

    def test_runs_go_build(self, exec_go, host):
        options = CompileOptions("github.com/acme/app", LINUX_ARM, go_cmd="go")

        artifact = go_cross_compile(options, environ={"PATH": "/usr/bin"})

        assert artifact == "app_linux_arm"
        go_cmd, args = exec_go.call_args.args
        env = exec_go.call_args.kwargs["env"]
        assert go_cmd == "go"
        assert args[0] == "build"
        assert args[-1] == "github.com/acme/app"
        assert args[args.index("-o") + 1] == os.path.abspath("app_linux_arm")
        assert env["GOOS"] == "linux"
        assert env["GOARCH"] == "arm"
        assert env["PATH"] == "/usr/bin"
        assert exec_go.call_args.kwargs["cwd"] is None

    def test_cgo_off_for_cross_builds(self, exec_go, host):
        go_cross_compile(CompileOptions("app", LINUX_ARM), environ={})
        assert exec_go.call_args.kwargs["env"]["CGO_ENABLED"] == "0"

    def test_cgo_on_for_native_builds(self, exec_go, host):
        go_cross_compile(CompileOptions("app", Platform("linux", "amd64")), environ={})
        assert exec_go.call_args.kwargs["env"]["CGO_ENABLED"] == "1"

    def test_cgo_env_zero_disables_native_default(self, exec_go, host):
        go_cross_compile(CompileOptions("app", Platform("linux", "amd64")), environ={"CGO_ENABLED": "0"})
        assert exec_go.call_args.kwargs["env"]["CGO_ENABLED"] == "0"

    def test_cgo_flag_forces_on(self, exec_go, host):
        go_cross_compile(CompileOptions("app", LINUX_ARM, cgo=True), environ={"CGO_ENABLED": "0"})
        assert exec_go.call_args.kwargs["env"]["CGO_ENABLED"] == "1"

    def test_package_outside_gopath_builds_in_directory(self, exec_go, host):
        with patch("gox.compiler.sys.platform", "linux"):
            go_cross_compile(CompileOptions("_/home/me/app", LINUX_ARM), environ={})

        args = exec_go.call_args.args[1]
        assert exec_go.call_args.kwargs["cwd"] == "/home/me/app"
        assert args[-1] == os.path.abspath("app_linux_arm")

    def test_package_outside_gopath_on_windows_gets_drive_letter(self, exec_go, host):
        with patch("gox.compiler.sys.platform", "win32"):
            go_cross_compile(CompileOptions("_/C_/src/app", LINUX_ARM), environ={})

        assert exec_go.call_args.kwargs["cwd"] == "C:\\src/app"

    def test_failure_raises_compilation_error(self, host):
        with patch("gox.compiler.exec_go", side_effect=ToolchainError("exit status 2\nStderr: oops")):
            with pytest.raises(CompilationError, match="oops"):
                go_cross_compile(CompileOptions("app", LINUX_ARM), environ={})
