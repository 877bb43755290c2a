"""Synthetic expression objects and prior networks shared by the tests."""

import matplotlib

matplotlib.use("Agg")

import anndata as ad
import numpy as np
import pandas as pd
import pytest

from nichenet_pipeline.networks import PriorNetworks

RECEIVER_GENES = ["G1", "G2", "G3", "R1", "R2", "R3", "RARE"]
SENDER_GENES = ["L1", "L2", "L3", "G1", "SPARSE"]


def make_adata(values: np.ndarray, genes, obs: pd.DataFrame) -> ad.AnnData:
    obs = obs.copy()
    obs.index = [f"cell{i}" for i in range(len(obs))]
    obs["seurat_clusters"] = obs["seurat_clusters"].astype(str).astype("category")
    return ad.AnnData(X=values.astype(np.float32), obs=obs, var=pd.DataFrame(index=list(genes)))


@pytest.fixture
def tcell_adata():
    """T cells: Treg cluster 5 with G1 induced in tumor, plus a bystander cluster and blood cells."""
    rows = (
        [("5", "Tumor")] * 30
        + [("5", "Mucosa")] * 30
        + [("0", "Tumor")] * 10
        + [("0", "Mucosa")] * 10
        + [("5", "Blood")] * 5
    )
    obs = pd.DataFrame(rows, columns=["seurat_clusters", "tissue"])
    values = np.zeros((len(obs), len(RECEIVER_GENES)))
    treg_tumor = ((obs["seurat_clusters"] == "5") & (obs["tissue"] == "Tumor")).to_numpy()
    values[treg_tumor, 0] = 2.0          # G1 up in tumor Tregs
    values[:, 1:6] = 1.0                 # G2, G3, R1-R3 flat
    values[np.flatnonzero(treg_tumor)[:2], 6] = 1.0  # RARE in 2 cells only
    return make_adata(values, RECEIVER_GENES, obs)


@pytest.fixture
def myeloid_adata():
    """Myeloid cells: five cells per cluster 0-7, alternating tissues."""
    rows = [(str(cluster), "Tumor" if i % 2 else "Mucosa") for cluster in range(8) for i in range(5)]
    obs = pd.DataFrame(rows, columns=["seurat_clusters", "tissue"])
    values = np.zeros((len(obs), len(SENDER_GENES)))
    values[:, 0:3] = 1.5                 # L1-L3 everywhere
    values[:, 3] = 0.5
    values[0, 4] = 1.0                   # SPARSE in one cell of cluster 0
    return make_adata(values, SENDER_GENES, obs)


@pytest.fixture
def lr_network():
    return pd.DataFrame(
        {
            "from": ["L1", "L2", "L3", "L1"],
            "to": ["R1", "R2", "R3", "RX"],
            "source": ["kegg_cytokines", "ppi_prediction", "ppi_prediction_go", "kegg_cytokines"],
            "database": ["kegg", "ppi_prediction", "ppi_prediction_go", "kegg"],
        }
    )


@pytest.fixture
def weighted_lr():
    return pd.DataFrame(
        {
            "from": ["L1", "L2", "L3", "L1"],
            "to": ["R1", "R2", "R3", "RX"],
            "weight": [0.9, 0.5, 0.2, 0.7],
        }
    )


@pytest.fixture
def correlated_networks(lr_network, weighted_lr):
    """L1 regulates exactly the tumor-induced gene G1."""
    ligand_target = pd.DataFrame(
        {"L1": [1.0, 0.0, 0.0], "L2": [0.5, 0.5, 0.0], "L3": [0.0, 0.0, 1.0]},
        index=["G1", "G2", "G3"],
    )
    return PriorNetworks(ligand_target=ligand_target, lr_network=lr_network, weighted_lr=weighted_lr)


@pytest.fixture
def unrelated_networks(lr_network, weighted_lr):
    """No ligand regulates G1."""
    ligand_target = pd.DataFrame(
        {"L1": [0.0, 1.0, 0.0], "L2": [0.0, 0.0, 1.0], "L3": [0.0, 1.0, 1.0]},
        index=["G1", "G2", "G3"],
    )
    return PriorNetworks(ligand_target=ligand_target, lr_network=lr_network, weighted_lr=weighted_lr)
