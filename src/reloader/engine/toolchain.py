"""Go toolchain conventions: command lines and install locations."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from reloader.config.constants import INSTALL_SUBCOMMAND, TEST_SUBCOMMAND
from reloader.config.models import TestOptions, ToolchainConfig


def install_dir(env: Mapping[str, str] | None = None) -> Path:
    """Directory where `go install` places binaries.

    $GOBIN wins; otherwise the first $GOPATH entry's bin; otherwise ~/go/bin.
    """
    env = os.environ if env is None else env
    if gobin := env.get("GOBIN"):
        return Path(gobin)
    gopath = env.get("GOPATH", "").split(os.pathsep)[0]
    if gopath:
        return Path(gopath) / "bin"
    return Path.home() / "go" / "bin"


def binary_name(target: str) -> str:
    """Name of the binary built from target ("." means the current directory)."""
    name = Path(target).resolve().name
    if os.name == "nt":
        name += ".exe"
    return name


def binary_path(target: str, env: Mapping[str, str] | None = None) -> Path:
    return install_dir(env) / binary_name(target)


def go_install_command(toolchain: ToolchainConfig, target: str) -> tuple[str, ...]:
    return (toolchain.go_executable, INSTALL_SUBCOMMAND, target)


def go_test_command(toolchain: ToolchainConfig, options: TestOptions) -> tuple[str, ...]:
    """Build `go test [-v] [-run X] [-tags T] packages...`."""
    argv = [toolchain.go_executable, TEST_SUBCOMMAND]
    if options.verbose:
        argv.append("-v")
    if options.run:
        argv.extend(["-run", options.run])
    if options.tags:
        argv.extend(["-tags", options.tags])
    argv.extend(options.packages)
    return tuple(argv)


def package_dir(package: str) -> str:
    """Directory to watch for a package pattern ("./pkg/..." -> "./pkg")."""
    if package == "...":
        return "."
    if package.endswith("/..."):
        return package[: -len("/...")] or "/"
    return package
