"""Module entrypoint for the mock responder.

Starts the responder on 0.0.0.0:9898 and serves until the process is killed. Exits with status 1 if the port cannot be bound.
"""

from __future__ import annotations

import sys

from .config import ServerConfig
from .errors import BindError
from .server import serve


def main() -> None:
    try:
        config = ServerConfig.from_env()
    except ValueError as exc:
        print(f"[mock] invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)

    try:
        serve(config)
    except BindError as exc:
        print(f"[mock] {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
