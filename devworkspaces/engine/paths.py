"""Root path expansion."""

from __future__ import annotations

from pathlib import Path


class InvalidRootError(ValueError):
    """The configured ``root`` cannot be turned into an absolute path."""

    def __init__(self, token: str, detail: str) -> None:
        self.token = token
        super().__init__(f"Invalid root {token!r}: {detail}")


def expand_root(token: str) -> Path:
    """Expand the ``root`` token into an absolute path.

    ``~`` / ``~/...`` / ``~user/...`` expand to the home directory; absolute
    paths are returned unchanged.  Relative paths are rejected rather than
    resolved against the current directory, since the layout must not depend
    on where the command happens to be run.
    """
    if not token or not token.strip():
        raise InvalidRootError(token, "root must not be empty")

    path = Path(token.strip())
    if token.strip().startswith("~"):
        try:
            path = path.expanduser()
        except RuntimeError as exc:
            raise InvalidRootError(token, f"cannot determine home directory ({exc})") from None

    if not path.is_absolute():
        raise InvalidRootError(token, "root must be absolute or start with '~'")
    return path
