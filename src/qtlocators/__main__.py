from __future__ import annotations

import sys


def main() -> int:
    if sys.version_info < (3, 10):
        raise SystemExit(
            "qtlocators requires Python 3.10+. "
            f"Current interpreter: {sys.executable} (Python {sys.version.split()[0]})"
        )
    from .cli import app

    app(prog_name="qtlocators")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
