"""Entry point for Step 2: ligand-receptor chord diagram from categorized pairs."""

from __future__ import annotations

from ..pipeline import run_step02_chord_diagram
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)


def main() -> None:
    LOGGER.info("Running Step 2 chord diagram")
    path = run_step02_chord_diagram()
    if path is not None:
        LOGGER.info("Chord diagram written to %s", path)


if __name__ == "__main__":
    main()
