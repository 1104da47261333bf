"""Command catalog for the diagnostics dashboard.

Maps each logical command name to an executable path and argument
string. Whether each executable exists is probed once, when the catalog
is built, and never re-checked; the catalog is read-only afterwards and
safe to share between concurrent requests.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Iterator, Mapping

from crudd.domain.models import CommandSpec

logger = logging.getLogger(__name__)

# (name, path, args)
DEFAULT_COMMANDS: tuple[tuple[str, str, str], ...] = (
    ("df", "/bin/df", "-h"),
    ("free", "/usr/bin/free", "-hw"),
    ("ipaddr", "/usr/bin/ip", "addr"),
    ("iplink", "/usr/bin/ip", "link"),
    ("netstat", "/usr/bin/netstat", "-taupen"),
    ("pingv4", "/bin/ping", "-4 -c3 www.google.com"),
    ("pingv6", "/bin/ping", "-6 -c3 www.google.com"),
    ("sstu", "/usr/bin/ss", "-tu"),
    ("sstul", "/usr/bin/ss", "-tul"),
    ("systemctlstatus", "/usr/bin/systemctl", "status"),
    ("top", "/usr/bin/top", "-bn1 -w256"),
    ("uname", "/usr/bin/uname", "-a"),
    ("uptime", "/usr/bin/uptime", ""),
)

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_RESERVED_NAMES = frozenset({"static"})


class CatalogError(Exception):
    """Raised when the command catalog is invalid."""


class CommandCatalog:
    """Immutable, name-ordered set of ``CommandSpec`` entries.

    Args:
        commands: ``(name, path, args)`` tuples or mappings with those keys.
        fs_root: Optional prefix prepended to every executable path, both
                 when probing for existence and when launching.
    """

    def __init__(
        self,
        commands: Iterable[tuple[str, str, str] | Mapping[str, str]] = DEFAULT_COMMANDS,
        fs_root: str | None = None,
    ) -> None:
        self._fs_root = fs_root or None
        specs: dict[str, CommandSpec] = {}
        for entry in commands:
            if isinstance(entry, Mapping):
                name, path, args = entry["name"], entry["path"], entry.get("args", "")
            else:
                name, path, args = entry
            self._validate_name(name)
            if name in specs:
                raise CatalogError(f"Duplicate command name: {name}")
            specs[name] = CommandSpec(
                name=name,
                path=path,
                args=args,
                exists=self._probe(self._resolve(path)),
            )
        self._specs = {name: specs[name] for name in sorted(specs)}
        logger.info(
            "Command catalog ready: %d commands, %d available",
            len(self._specs), len(self.existing()),
        )

    @property
    def fs_root(self) -> str | None:
        return self._fs_root

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def get(self, name: str) -> CommandSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise CatalogError(f"Unknown command: {name}") from None

    def existing(self) -> list[CommandSpec]:
        """Commands whose executable was found at startup."""
        return [spec for spec in self if spec.exists]

    def missing(self) -> list[CommandSpec]:
        """Commands whose executable was not found at startup."""
        return [spec for spec in self if not spec.exists]

    def resolve_path(self, spec: CommandSpec) -> str:
        """Return the path that will actually be executed for ``spec``."""
        return self._resolve(spec.path)

    def _resolve(self, path: str) -> str:
        if self._fs_root is None:
            return path
        return self._fs_root + path

    @staticmethod
    def _probe(path: str) -> bool:
        return os.path.isfile(path) and os.access(path, os.X_OK)

    @staticmethod
    def _validate_name(name: str) -> None:
        if not _NAME_PATTERN.match(name):
            raise CatalogError(f"Command name {name!r} cannot be used as a URL path")
        if name in _RESERVED_NAMES:
            raise CatalogError(f"Command name {name!r} is reserved")
