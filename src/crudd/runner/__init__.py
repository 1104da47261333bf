"""Command execution and output streaming.

The launcher starts a command as a subprocess, the relay turns its
merged output into escaped HTML lines, and the coordinator ties both to
the lifetime of the HTTP request that asked for the command.
"""

from crudd.runner.coordinator import CommandRun, render_fragment
from crudd.runner.launcher import ProcessLauncher, terminate
from crudd.runner.relay import relay

__all__ = ["CommandRun", "ProcessLauncher", "relay", "render_fragment", "terminate"]
