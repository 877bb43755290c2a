"""Expressed-gene filters for sender and receiver populations."""

from __future__ import annotations

from typing import Iterable, List

import anndata as ad
import numpy as np
import pandas as pd
from scipy import sparse

from .utils.logging import get_logger

LOGGER = get_logger(__name__)


def detection_fraction(adata: ad.AnnData, layer: str | None = None) -> pd.Series:
    """Fraction of cells with non-zero expression, per gene."""
    matrix = adata.layers[layer] if layer is not None else adata.X
    if sparse.issparse(matrix):
        detected = np.asarray((matrix > 0).sum(axis=0)).ravel()
    else:
        detected = (np.asarray(matrix) > 0).sum(axis=0)
    n_cells = max(adata.n_obs, 1)
    return pd.Series(detected / n_cells, index=adata.var_names, name="pct_detected")


def get_expressed_genes(adata: ad.AnnData, pct: float = 0.10, *, layer: str | None = None) -> List[str]:
    """Genes detected in at least ``pct`` of the cells of ``adata``."""
    if not 0 <= pct <= 1:
        raise ValueError(f"pct must lie in [0, 1], got {pct}")
    frac = detection_fraction(adata, layer=layer)
    # zero-detection genes never count as expressed, even at pct=0
    keep = (frac >= pct) & (frac > 0)
    return frac.index[keep].tolist()


def union_expressed_genes(populations: Iterable[ad.AnnData], pct: float = 0.10, *, layer: str | None = None) -> List[str]:
    genes: set[str] = set()
    for population in populations:
        genes.update(get_expressed_genes(population, pct, layer=layer))
    LOGGER.info("Union of expressed genes across populations: %d", len(genes))
    return sorted(genes)
