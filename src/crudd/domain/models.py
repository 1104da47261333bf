"""Core domain models for crudd.

A ``CommandSpec`` is one entry of the command catalog. A ``RunningProcess``
is the per-request state of one command execution: the child process,
its merged output, and the signals used to reconcile process completion
with the lifetime of the HTTP request that started it.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

# Exit code reported when the executable could not be started at all
LAUNCH_FAILURE_EXIT_CODE = 127


class RunPhase(str, enum.Enum):
    """Lifecycle of a single command request."""

    STARTING = "starting"  # Header written, process not yet launched
    STREAMING = "streaming"  # Output is being relayed
    AWAITING_EXIT = "awaiting_exit"  # Output done, waiting for the exit code
    DONE = "done"


class CommandSpec(BaseModel):
    """A named, pre-configured external command.

    ``args`` is split on whitespace; an argument containing spaces cannot
    be expressed.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Route name, served at /<name>")
    path: str = Field(description="Absolute path of the executable")
    args: str = Field(default="", description="Whitespace-separated argument string")
    exists: bool = Field(default=False, description="Whether the executable was found at startup")

    @property
    def title(self) -> str:
        return f"{self.path} {self.args}"

    @property
    def arguments(self) -> list[str]:
        return split_arguments(self.args)


def split_arguments(argument_string: str) -> list[str]:
    """Tokenize an argument string on whitespace.

    An empty or blank string yields no arguments at all.
    """
    return argument_string.split()


@dataclass
class RunningProcess:
    """One command execution, owned by exactly one request.

    ``exit_code`` is resolved exactly once: by the reaper task after the
    child has been waited on, or immediately when the launch failed.
    """

    output: asyncio.StreamReader
    exit_code: asyncio.Future[int]
    cancelled: asyncio.Event
    drained: asyncio.Event = field(default_factory=asyncio.Event)
    process: asyncio.subprocess.Process | None = None
    reaper: asyncio.Task[None] | None = None

    @property
    def launched(self) -> bool:
        return self.process is not None

    @property
    def pid(self) -> int | None:
        return self.process.pid if self.process is not None else None
