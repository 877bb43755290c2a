"""Entry point for Step 1: Treg signature and ligand activity prediction."""

from __future__ import annotations

from ..pipeline import run_step01_ligand_activity
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)


def main() -> None:
    LOGGER.info("Running Step 1 ligand activity analysis")
    result = run_step01_ligand_activity()
    LOGGER.info("Completed Step 1; %d prioritized ligands", len(result.best_ligands))


if __name__ == "__main__":
    main()
