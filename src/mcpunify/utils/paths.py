"""Placeholder resolution for ``command`` and ``args`` values.

Two placeholder forms are recognised: a leading ``~`` (home directory) and
``{TOKEN}`` markers such as ``{LOCALAPPDATA}``.  Resolution happens once, at
projection time.  A resolved value contains neither form, so resolving it
again returns it unchanged.
"""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path

TOKEN_PATTERN = re.compile(r"\{(LOCALAPPDATA|APPDATA|USERPROFILE|HOME)\}")


@dataclass(frozen=True)
class Environment:
    """Host values placeholders resolve to."""

    home: str
    sep: str = os.sep
    tokens: dict[str, str] = field(default_factory=dict)

    @classmethod
    def detect(cls) -> Environment:
        """Build an Environment for the running platform."""
        home = str(Path.home())
        if sys.platform == "win32":
            local = os.environ.get("LOCALAPPDATA") or os.path.join(home, "AppData", "Local")
            roaming = os.environ.get("APPDATA") or os.path.join(home, "AppData", "Roaming")
        elif sys.platform == "darwin":
            local = roaming = os.path.join(home, "Library", "Application Support")
        else:
            local = os.environ.get("XDG_DATA_HOME") or os.path.join(home, ".local", "share")
            roaming = os.environ.get("XDG_CONFIG_HOME") or os.path.join(home, ".config")
        return cls(
            home=home,
            sep=os.sep,
            tokens={
                "LOCALAPPDATA": local,
                "APPDATA": roaming,
                "USERPROFILE": home,
                "HOME": home,
            },
        )

    def normalize(self, value: str) -> str:
        """Rewrite every path separator to the host's native one."""
        return value.replace("\\", self.sep).replace("/", self.sep)


def resolve_placeholders(raw: str, env: Environment) -> str:
    """Resolve ``~`` and ``{TOKEN}`` placeholders in *raw*.

    Rules, first match wins:

    * ``~/rest`` or ``~\\rest`` -> home + rest, separators normalised
    * ``~`` or ``~rest`` -> home (joined with rest), separators normalised
    * ``{LOCALAPPDATA}`` and friends anywhere -> platform value, normalised
    * anything else is returned unchanged

    Only ``command`` and ``args`` go through here; ``url``, ``env`` and
    ``headers`` values never do.
    """
    if raw.startswith(("~/", "~\\")):
        return env.normalize(env.home + env.sep + raw[2:])

    if raw.startswith("~"):
        rest = raw[1:]
        return env.normalize(env.home + env.sep + rest if rest else env.home)

    if TOKEN_PATTERN.search(raw):
        def _sub(match: re.Match[str]) -> str:
            return env.tokens.get(match.group(1), match.group(0))

        resolved = TOKEN_PATTERN.sub(_sub, raw)
        if resolved == raw:
            return raw
        return env.normalize(resolved)

    return raw
