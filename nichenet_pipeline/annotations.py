"""Ligand/receptor category annotations for the chord diagram.

Top ligand-receptor pairs are written to CSV so that categories can be
curated by hand; alternatively a JSON mapping of the form
``{"ligands": {"TGFB1": "Cytokine", ...}, "receptors": {"TGFBR2": "...", ...}}``
annotates the pairs directly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Tuple

import pandas as pd

from .utils.io import load_json
from .utils.logging import get_logger

LOGGER = get_logger(__name__)

PAIR_COLUMNS = ["ligand", "receptor", "weight"]
CATEGORY_COLUMNS = ["ligand_type", "receptor_type"]


def write_lr_pairs(pairs: pd.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    pairs[PAIR_COLUMNS].to_csv(path, index=False)
    LOGGER.info("Wrote %d ligand-receptor pairs to %s", len(pairs), path)
    return path


def read_lr_pairs(path: Path, *, require_categories: bool = False) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Ligand-receptor pair file not found: {path}")
    pairs = pd.read_csv(path)
    required = PAIR_COLUMNS + (CATEGORY_COLUMNS if require_categories else [])
    missing = [col for col in required if col not in pairs.columns]
    if missing:
        raise KeyError(f"{path} is missing columns {missing}")
    pairs["ligand"] = pairs["ligand"].astype(str)
    pairs["receptor"] = pairs["receptor"].astype(str)
    if require_categories and pairs[CATEGORY_COLUMNS].isna().any().any():
        unlabeled = pairs.loc[pairs[CATEGORY_COLUMNS].isna().any(axis=1), ["ligand", "receptor"]]
        raise ValueError(f"{len(unlabeled)} pairs lack a category in {path}: {unlabeled.head().values.tolist()}")
    return pairs


def load_category_mapping(path: Path) -> Tuple[Dict[str, str], Dict[str, str]]:
    if not path.exists():
        raise FileNotFoundError(f"Category mapping not found: {path}")
    payload = load_json(path)
    for key in ("ligands", "receptors"):
        if key not in payload:
            raise KeyError(f"Category mapping {path} lacks a {key!r} section")
    return dict(payload["ligands"]), dict(payload["receptors"])


def annotate_pairs(
    pairs: pd.DataFrame,
    ligand_categories: Mapping[str, str],
    receptor_categories: Mapping[str, str],
    *,
    default: str | None = None,
) -> pd.DataFrame:
    """Attach ligand/receptor categories; unmapped names raise unless ``default`` is given."""
    annotated = pairs.copy()
    annotated["ligand_type"] = annotated["ligand"].map(ligand_categories)
    annotated["receptor_type"] = annotated["receptor"].map(receptor_categories)
    for column, names in (("ligand_type", "ligand"), ("receptor_type", "receptor")):
        unmapped = annotated.loc[annotated[column].isna(), names].unique().tolist()
        if not unmapped:
            continue
        if default is None:
            raise KeyError(f"No {column} for {unmapped}")
        LOGGER.warning("Using default category %r for %d %ss", default, len(unmapped), names)
        annotated[column] = annotated[column].fillna(default)
    return annotated
