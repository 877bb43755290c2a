"""Receiver gene signature from a two-condition differential expression test."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

import anndata as ad
import pandas as pd
import scanpy as sc

from . import config
from .expression import detection_fraction
from .utils.logging import get_logger

LOGGER = get_logger(__name__)

_DE_KEY = "de_condition"


@dataclass(slots=True)
class DEThresholds:
    min_pct: float = config.DE_MIN_PCT
    padj_cutoff: float = config.DE_PADJ_CUTOFF
    min_logfc: float = config.DE_MIN_LOGFC


@dataclass(slots=True)
class SignatureResult:
    table: pd.DataFrame
    geneset: List[str]
    background: List[str]


def condition_de_table(
    adata: ad.AnnData,
    condition_oi: str,
    condition_reference: str,
    *,
    condition_key: str = config.TISSUE_KEY,
    corr_method: str = config.DE_CORR_METHOD,
) -> pd.DataFrame:
    """Wilcoxon test of ``condition_oi`` against ``condition_reference`` for every gene.

    Returns one row per gene with ``logfoldchanges``, ``pvals``, ``pvals_adj``
    (Bonferroni by default, as Seurat reports) and the detection fraction in each condition.
    """
    labels = adata.obs[condition_key].astype(str)
    mask_oi = (labels == condition_oi).to_numpy()
    mask_ref = (labels == condition_reference).to_numpy()
    if not mask_oi.any() or not mask_ref.any():
        raise ValueError(
            f"Both conditions need cells: {condition_oi}={int(mask_oi.sum())}, "
            f"{condition_reference}={int(mask_ref.sum())}"
        )

    work = adata[mask_oi | mask_ref].copy()
    work.obs[condition_key] = work.obs[condition_key].astype(str).astype("category")
    LOGGER.info(
        "Testing %s (%d cells) vs %s (%d cells) over %d genes",
        condition_oi, int(mask_oi.sum()), condition_reference, int(mask_ref.sum()), work.n_vars,
    )
    sc.tl.rank_genes_groups(
        work,
        groupby=condition_key,
        groups=[condition_oi],
        reference=condition_reference,
        method="wilcoxon",
        corr_method=corr_method,
        n_genes=work.n_vars,
        use_raw=False,
        key_added=_DE_KEY,
    )
    table = sc.get.rank_genes_groups_df(work, group=condition_oi, key=_DE_KEY)
    table = table.rename(columns={"names": "gene"}).set_index("gene")

    table["pct_oi"] = detection_fraction(adata[mask_oi]).reindex(table.index)
    table["pct_reference"] = detection_fraction(adata[mask_ref]).reindex(table.index)
    return table.reset_index()


def filter_signature(table: pd.DataFrame, thresholds: DEThresholds | None = None) -> List[str]:
    """Genes passing detection, significance and effect-size thresholds."""
    thresholds = thresholds or DEThresholds()
    detected = table[["pct_oi", "pct_reference"]].max(axis=1) >= thresholds.min_pct
    significant = table["pvals_adj"] <= thresholds.padj_cutoff
    strong = table["logfoldchanges"].abs() >= thresholds.min_logfc
    passed = table.loc[detected & significant & strong, "gene"]
    return sorted(passed.astype(str).unique())


def extract_signature(
    receiver: ad.AnnData,
    condition_oi: str,
    condition_reference: str,
    *,
    network_targets: Iterable[str],
    receiver_expressed: Iterable[str],
    thresholds: DEThresholds | None = None,
    condition_key: str = config.TISSUE_KEY,
) -> SignatureResult:
    """Gene set of interest and background universe, both limited to network targets."""
    targets = set(network_targets)
    table = condition_de_table(receiver, condition_oi, condition_reference, condition_key=condition_key)
    de_genes = filter_signature(table, thresholds)
    geneset = [gene for gene in de_genes if gene in targets]
    background = sorted(set(receiver_expressed) & targets)
    LOGGER.info(
        "%d DE genes; %d in ligand-target network; background of %d genes",
        len(de_genes), len(geneset), len(background),
    )
    dropped = sorted(set(geneset) - set(background))
    if dropped:
        LOGGER.warning("Adding %d gene-set genes missing from the expressed background: %s", len(dropped), dropped[:10])
        background = sorted(set(background) | set(geneset))
    return SignatureResult(table=table, geneset=geneset, background=background)
