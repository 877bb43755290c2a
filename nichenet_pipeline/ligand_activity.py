"""Ligand activity prediction against a prior ligand-target network."""

from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.metrics import average_precision_score, roc_auc_score

from . import config
from .receptor_network import binary_leaf_order
from .utils.logging import get_logger

LOGGER = get_logger(__name__)

ACTIVITY_COLUMNS = ["test_ligand", "auroc", "aupr", "aupr_corrected", "pearson", "rank"]


def predict_ligand_activities(
    geneset: Iterable[str],
    background: Iterable[str],
    ligand_target: pd.DataFrame,
    potential_ligands: Iterable[str],
) -> pd.DataFrame:
    """Score how well each ligand's regulatory potential predicts gene-set membership.

    The response is membership of each background gene in ``geneset``; the
    predictor is the ligand's column of ``ligand_target`` over the same genes.
    Pearson correlation is the ranking statistic. Ligands with no regulatory
    potential on any gene-set gene carry no evidence and are left out.
    """
    background = [gene for gene in dict.fromkeys(background) if gene in ligand_target.index]
    geneset = set(geneset) & set(background)
    response = np.array([gene in geneset for gene in background], dtype=bool)
    if not response.any():
        raise ValueError("Gene set of interest is empty within the network background")
    if response.all():
        raise ValueError("Gene set of interest covers the whole background; activity is undefined")

    potential_ligands = list(potential_ligands)
    ligands = [lig for lig in dict.fromkeys(potential_ligands) if lig in ligand_target.columns]
    missing = len(set(potential_ligands) - set(ligands))
    if missing:
        LOGGER.info("%d potential ligands are absent from the ligand-target matrix", missing)

    sub = ligand_target.loc[background, ligands]
    records = []
    for ligand in ligands:
        pred = sub[ligand].to_numpy(dtype=float)
        if not np.any(pred[response] != 0):
            continue
        if np.ptp(pred) == 0:
            continue
        pearson = stats.pearsonr(pred, response.astype(float))[0]
        aupr = average_precision_score(response, pred)
        records.append(
            {
                "test_ligand": ligand,
                "auroc": roc_auc_score(response, pred),
                "aupr": aupr,
                "aupr_corrected": aupr - response.mean(),
                "pearson": pearson,
            }
        )

    if not records:
        LOGGER.warning("No ligand targets any gene of the gene set; activity table is empty")
        return pd.DataFrame(columns=ACTIVITY_COLUMNS)

    activities = pd.DataFrame.from_records(records)
    activities = activities.sort_values(["pearson", "test_ligand"], ascending=[False, True], kind="mergesort")
    activities["rank"] = activities["pearson"].rank(method="min", ascending=False).astype(int)
    LOGGER.info("Scored %d ligands; best %s (pearson %.3f)", len(activities), activities.iloc[0]["test_ligand"], activities.iloc[0]["pearson"])
    return activities.reset_index(drop=True)[ACTIVITY_COLUMNS]


def top_ligands(activities: pd.DataFrame, n: int = config.TOP_N_LIGANDS) -> List[str]:
    """The ``n`` best-ranked distinct ligands (fewer when fewer are scored)."""
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    ordered = activities.sort_values(["pearson", "test_ligand"], ascending=[False, True], kind="mergesort")
    return ordered["test_ligand"].drop_duplicates().head(n).tolist()


def get_weighted_ligand_target_links(
    ligand: str,
    geneset: Iterable[str],
    ligand_target: pd.DataFrame,
    n: int = config.TOP_N_TARGETS_PER_LIGAND,
) -> pd.DataFrame:
    """Top-``n`` predicted targets of ``ligand`` that belong to the gene set."""
    potential = ligand_target[ligand].nlargest(n)
    in_set = potential[potential.index.isin(set(geneset))]
    return pd.DataFrame({"ligand": ligand, "target": in_set.index, "weight": in_set.to_numpy()})


def prepare_ligand_target_visualization(
    links: pd.DataFrame,
    cutoff: float = config.LIGAND_TARGET_CUTOFF,
    *,
    ligand_order: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Ligand x target weight matrix with weak links zeroed.

    Weights below the ``cutoff`` quantile of all link weights become zero;
    rows and columns left empty are dropped. Ligands follow ``ligand_order``
    when given, targets are grouped by clustering.
    """
    if links.empty:
        return pd.DataFrame()
    threshold = links["weight"].quantile(cutoff)
    matrix = links.pivot_table(index="ligand", columns="target", values="weight", aggfunc="max", fill_value=0.0)
    matrix = matrix.where(matrix >= threshold, 0.0)
    matrix = matrix.loc[(matrix > 0).any(axis=1), (matrix > 0).any(axis=0)]
    if ligand_order is not None:
        matrix = matrix.loc[[lig for lig in ligand_order if lig in matrix.index]]
    return matrix[binary_leaf_order(matrix.T)]
