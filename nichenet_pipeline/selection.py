"""Population selection on pre-clustered expression objects."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

import anndata as ad

from . import config
from .utils.logging import get_logger

LOGGER = get_logger(__name__)


def load_expression_object(path: Path) -> ad.AnnData:
    if not path.exists():
        raise FileNotFoundError(f"Clustered AnnData not found: {path}")
    LOGGER.info("Loading AnnData from %s", path)
    adata = ad.read_h5ad(path)
    # Ensure obs_names are unique to avoid indexing issues
    if not adata.obs_names.is_unique:
        adata.obs_names_make_unique()
    return adata


def resolve_group(groups: Mapping[str, Sequence[int | str]], name: str) -> List[str]:
    """Return the cluster ids of a named group as strings."""
    if name not in groups:
        raise KeyError(f"Unknown cluster group {name!r}. Known groups: {sorted(groups)}")
    return [str(cid) for cid in groups[name]]


def validate_cluster_groups(
    adata: ad.AnnData,
    groups: Mapping[str, Sequence[int | str]],
    names: Iterable[str],
    *,
    cluster_key: str = config.CLUSTER_KEY,
) -> None:
    """Fail loudly when group assignments drift from the object's clustering."""
    if cluster_key not in adata.obs:
        raise KeyError(f"Cluster column {cluster_key!r} missing from obs")
    present = set(adata.obs[cluster_key].astype(str).unique())
    for name in names:
        missing = [cid for cid in resolve_group(groups, name) if cid not in present]
        if missing:
            raise KeyError(
                f"Cluster group {name!r} references clusters {missing} absent from {cluster_key!r}"
            )


def validate_conditions(
    adata: ad.AnnData,
    labels: Iterable[str],
    *,
    tissue_key: str = config.TISSUE_KEY,
) -> None:
    if tissue_key not in adata.obs:
        raise KeyError(f"Tissue column {tissue_key!r} missing from obs")
    present = set(adata.obs[tissue_key].astype(str).unique())
    missing = [label for label in labels if label not in present]
    if missing:
        raise KeyError(f"Condition labels {missing} not found in {tissue_key!r}; available: {sorted(present)}")


def select_cells(
    adata: ad.AnnData,
    *,
    tissues: Iterable[str] | None = None,
    clusters: Iterable[int | str] | None = None,
    tissue_key: str = config.TISSUE_KEY,
    cluster_key: str = config.CLUSTER_KEY,
) -> ad.AnnData:
    """Return a copy of ``adata`` restricted to the given tissues and clusters."""
    mask = adata.obs_names.notna()
    if tissues is not None:
        mask &= adata.obs[tissue_key].astype(str).isin([str(t) for t in tissues]).to_numpy()
    if clusters is not None:
        mask &= adata.obs[cluster_key].astype(str).isin([str(c) for c in clusters]).to_numpy()
    if not mask.any():
        raise ValueError(f"No cells match tissues={tissues} clusters={clusters}")
    subset = adata[mask].copy()
    LOGGER.info("Selected %d of %d cells (tissues=%s, clusters=%s)", subset.n_obs, adata.n_obs, tissues, clusters)
    return subset


def split_groups(
    adata: ad.AnnData,
    groups: Mapping[str, Sequence[int | str]],
    names: Iterable[str],
    *,
    cluster_key: str = config.CLUSTER_KEY,
) -> Dict[str, ad.AnnData]:
    """Select one sub-population per named cluster group."""
    return {
        name: select_cells(adata, clusters=resolve_group(groups, name), cluster_key=cluster_key)
        for name in names
    }
