"""Ligand-receptor weight matrices ordered for display."""

from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import leaves_list, linkage
from scipy.spatial.distance import pdist

from .networks import strict_lr_network
from .utils.logging import get_logger

LOGGER = get_logger(__name__)


def binary_leaf_order(matrix: pd.DataFrame) -> list:
    """Row order from Ward clustering on binary (Jaccard) distance.

    Matches ``hclust(dist(x, method = "binary"), method = "ward.D2")``. The
    order only groups similar rows visually.
    """
    if matrix.shape[0] < 3:
        return matrix.index.tolist()
    presence = matrix.to_numpy() > 0
    distances = pdist(presence, metric="jaccard")
    # all-zero rows give 0/0 distances
    distances = np.nan_to_num(distances, nan=0.0)
    tree = linkage(distances, method="ward")
    return matrix.index[leaves_list(tree)].tolist()


def ligand_receptor_pairs(
    lr_network: pd.DataFrame,
    weighted_lr: pd.DataFrame,
    ligands: Iterable[str],
    receptors: Iterable[str],
) -> pd.DataFrame:
    """Weighted pairs among ``ligands`` and ``receptors`` present in ``lr_network``."""
    ligands = set(ligands)
    receptors = set(receptors)
    allowed = lr_network[["from", "to"]].astype(str)
    allowed = allowed[allowed["from"].isin(ligands) & allowed["to"].isin(receptors)].drop_duplicates()
    weighted = weighted_lr[["from", "to", "weight"]].copy()
    weighted[["from", "to"]] = weighted[["from", "to"]].astype(str)
    pairs = weighted.merge(allowed, on=["from", "to"], how="inner")
    pairs = pairs.groupby(["from", "to"], as_index=False)["weight"].max()
    return pairs.rename(columns={"from": "ligand", "to": "receptor"})


def ordered_ligand_receptor_matrix(pairs: pd.DataFrame) -> pd.DataFrame:
    """Receptor x ligand weight matrix, rows and columns clustered independently."""
    if pairs.empty:
        return pd.DataFrame()
    matrix = pairs.pivot_table(index="receptor", columns="ligand", values="weight", aggfunc="max", fill_value=0.0)
    row_order = binary_leaf_order(matrix)
    col_order = binary_leaf_order(matrix.T)
    return matrix.loc[row_order, col_order]


def build_lr_matrices(
    lr_network: pd.DataFrame,
    weighted_lr: pd.DataFrame,
    ligands: Iterable[str],
    receptors: Iterable[str],
) -> dict[str, tuple[pd.DataFrame, pd.DataFrame]]:
    """Pairs and ordered matrices for the full and the strict (curated-only) network."""
    ligands = list(ligands)
    receptors = list(receptors)
    result = {}
    for label, network in (("full", lr_network), ("strict", strict_lr_network(lr_network))):
        pairs = ligand_receptor_pairs(network, weighted_lr, ligands, receptors)
        result[label] = (pairs, ordered_ligand_receptor_matrix(pairs))
        LOGGER.info("%s LR network: %d pairs among top ligands", label.capitalize(), len(pairs))
    return result
