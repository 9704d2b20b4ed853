"""Allow ``python -m fixedcam`` to launch the capture window."""

from __future__ import annotations

import sys


def main() -> None:
    from fixedcam import run

    run(sys.argv[1:])


if __name__ == "__main__":
    main()
