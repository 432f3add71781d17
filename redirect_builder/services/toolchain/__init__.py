"""External toolchain invocation."""

from .service import ToolchainInvoker, parse_version, run_command

__all__ = ["ToolchainInvoker", "parse_version", "run_command"]
