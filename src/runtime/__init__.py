"""Runtime package.

Keep this module dependency-light: importing `src.runtime.*` in the CLI and
unit tests must not open sockets or audio devices.
"""

__all__: list[str] = []
