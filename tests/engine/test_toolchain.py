"""Tests for Go toolchain conventions."""

import os
from pathlib import Path

import pytest

from reloader.config.models import TestOptions, ToolchainConfig
from reloader.engine.toolchain import (
    binary_name,
    binary_path,
    go_install_command,
    go_test_command,
    install_dir,
    package_dir,
)


class TestInstallDir:
    """Install location resolution."""

    def test_given_gobin_when_resolved_then_wins(self) -> None:
        env = {"GOBIN": "/opt/gobin", "GOPATH": "/home/dev/go"}

        assert install_dir(env) == Path("/opt/gobin")

    def test_given_gopath_list_when_resolved_then_first_entry_bin(self) -> None:
        env = {"GOPATH": os.pathsep.join(["/work/go", "/other/go"])}

        assert install_dir(env) == Path("/work/go") / "bin"

    def test_given_empty_env_when_resolved_then_home_go_bin(self) -> None:
        assert install_dir({}) == Path.home() / "go" / "bin"


class TestBinaryName:
    @pytest.mark.skipif(os.name == "nt", reason="binaries carry .exe on Windows")
    def test_given_dot_target_when_named_then_current_directory_name(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        project = tmp_path / "myservice"
        project.mkdir()
        monkeypatch.chdir(project)

        assert binary_name(".") == "myservice"

    @pytest.mark.skipif(os.name == "nt", reason="binaries carry .exe on Windows")
    def test_given_nested_target_when_path_then_under_install_dir(self) -> None:
        path = binary_path("./cmd/api/", env={"GOBIN": "/opt/gobin"})

        assert path == Path("/opt/gobin/api")


class TestCommands:
    """go command line construction."""

    def test_given_target_when_install_command_then_go_install(self) -> None:
        toolchain = ToolchainConfig(go_executable="go1.22")

        assert go_install_command(toolchain, "./cmd/api") == ("go1.22", "install", "./cmd/api")

    def test_given_plain_options_when_test_command_then_packages_only(self) -> None:
        options = TestOptions(packages=("./pkg/...",))

        assert go_test_command(ToolchainConfig(), options) == ("go", "test", "./pkg/...")

    def test_given_all_flags_when_test_command_then_in_go_order(self) -> None:
        options = TestOptions(
            packages=("./a", "./b"), verbose=True, run="TestFoo", tags="integration"
        )

        assert go_test_command(ToolchainConfig(), options) == (
            "go",
            "test",
            "-v",
            "-run",
            "TestFoo",
            "-tags",
            "integration",
            "./a",
            "./b",
        )


class TestPackageDir:
    @pytest.mark.parametrize(
        ("package", "expected"),
        [
            ("./pkg", "./pkg"),
            ("./pkg/...", "./pkg"),
            ("./...", "."),
            ("...", "."),
        ],
    )
    def test_given_package_pattern_when_resolved_then_directory(
        self, package: str, expected: str
    ) -> None:
        assert package_dir(package) == expected
