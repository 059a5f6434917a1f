"""Console-script entrypoint.

The implementation lives in `pr_state_labeler.labeler.main`.
"""

from __future__ import annotations

from pr_state_labeler.labeler.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
