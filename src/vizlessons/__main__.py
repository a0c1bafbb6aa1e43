"""Package entry point.

Preferred invocation is via the installed console script:

    vizlessons ...

For convenience we also support:

    python -m vizlessons ...
"""

from __future__ import annotations

from .cli import app


def main() -> None:
    """Entry point used by `python -m vizlessons`."""

    app()


if __name__ == "__main__":
    main()
