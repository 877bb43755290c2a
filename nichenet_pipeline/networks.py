"""Prior ligand-target and ligand-receptor networks."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from . import config
from .utils.io import ensure_dirs, fetch_file, read_table
from .utils.logging import get_logger

LOGGER = get_logger(__name__)

LR_COLUMNS = ("from", "to")
WEIGHTED_COLUMNS = ("from", "to", "weight")


@dataclass(slots=True)
class PriorNetworks:
    ligand_target: pd.DataFrame
    lr_network: pd.DataFrame
    weighted_lr: pd.DataFrame

    @property
    def targets(self) -> List[str]:
        return self.ligand_target.index.astype(str).tolist()

    @property
    def ligands(self) -> List[str]:
        return self.lr_network["from"].astype(str).unique().tolist()

    @property
    def receptors(self) -> List[str]:
        return self.lr_network["to"].astype(str).unique().tolist()


def _require_columns(df: pd.DataFrame, columns: Sequence[str], label: str) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise KeyError(f"{label} is missing columns {missing}; found {list(df.columns)}")


def locate_weighted_lr(path: Path | None = None) -> Path:
    """Local export of the signaling layer of the weighted networks resource."""
    path = path or config.WEIGHTED_LR_FILE
    if not path.exists():
        source = f"{config.NETWORK_BASE_URLS[0]}/{config.WEIGHTED_NETWORKS_RDS}"
        raise FileNotFoundError(
            f"Weighted ligand-receptor network not found at {path}. {source} is an R list "
            "that cannot be read without R; export its lr_sig table once with "
            f"write.csv(readRDS('{config.WEIGHTED_NETWORKS_RDS}')$lr_sig, '{path}', row.names = FALSE)"
        )
    return path


def download_prior_networks(
    dest_dir: Path | None = None,
    *,
    overwrite: bool = False,
    weighted_lr_file: Path | None = None,
) -> Dict[str, Path]:
    """Fetch the hosted network tables and locate the weighted LR export."""
    dest_dir = dest_dir or config.DEFAULT_OUTPUT_SUBDIRS["reference"]
    weighted_lr = locate_weighted_lr(weighted_lr_file)
    ensure_dirs([dest_dir])
    paths = {
        key: fetch_file(filename, config.NETWORK_BASE_URLS, dest_dir, overwrite=overwrite)
        for key, filename in config.NETWORK_FILES.items()
    }
    paths["weighted_lr"] = weighted_lr
    return paths


def load_prior_networks(paths: Dict[str, Path]) -> PriorNetworks:
    ligand_target = read_table(paths["ligand_target"], index_col=0)
    if isinstance(ligand_target.index, pd.RangeIndex):
        raise ValueError(
            f"{paths['ligand_target']} has no target-gene row names; export the matrix with its dimnames"
        )
    ligand_target.index = ligand_target.index.astype(str)
    ligand_target.columns = ligand_target.columns.astype(str)

    lr_network = read_table(paths["lr_network"])
    _require_columns(lr_network, LR_COLUMNS, "Ligand-receptor network")
    weighted_lr = read_table(paths["weighted_lr"])
    _require_columns(weighted_lr, WEIGHTED_COLUMNS, "Weighted ligand-receptor network")

    LOGGER.info(
        "Loaded networks: %d targets x %d ligands, %d LR pairs, %d weighted LR pairs",
        ligand_target.shape[0], ligand_target.shape[1], len(lr_network), len(weighted_lr),
    )
    return PriorNetworks(ligand_target=ligand_target, lr_network=lr_network, weighted_lr=weighted_lr)


def strict_lr_network(lr_network: pd.DataFrame) -> pd.DataFrame:
    """Drop interactions whose provenance is a prediction."""
    if "database" not in lr_network.columns:
        LOGGER.warning("LR network lacks a 'database' column; strict filter keeps every pair")
        return lr_network.copy()
    keep = ~lr_network["database"].isin(config.PREDICTED_LR_DATABASES)
    LOGGER.info("Strict LR network keeps %d of %d pairs", int(keep.sum()), len(lr_network))
    return lr_network.loc[keep].copy()


def get_potential_ligands(
    lr_network: pd.DataFrame,
    sender_expressed: Iterable[str],
    receiver_expressed: Iterable[str],
) -> List[str]:
    """Sender-expressed ligands with at least one receiver-expressed receptor."""
    sender = set(sender_expressed)
    receiver = set(receiver_expressed)
    pairs = lr_network[["from", "to"]].astype(str)
    usable = pairs["from"].isin(sender) & pairs["to"].isin(receiver)
    ligands = pairs.loc[usable, "from"].unique().tolist()
    LOGGER.info("Potential ligands: %d", len(ligands))
    return ligands


def expressed_receptors(lr_network: pd.DataFrame, ligands: Iterable[str], receiver_expressed: Iterable[str]) -> List[str]:
    """Receiver-expressed receptors paired with any of ``ligands``."""
    pairs = lr_network[["from", "to"]].astype(str)
    usable = pairs["from"].isin(set(ligands)) & pairs["to"].isin(set(receiver_expressed))
    return pairs.loc[usable, "to"].unique().tolist()
