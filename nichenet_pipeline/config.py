"""Central configuration for the Treg niche ligand-activity workflow."""

from __future__ import annotations

from pathlib import Path

# Repository layout ---------------------------------------------------------
REPO_ROOT = Path(__file__).resolve().parent.parent
INPUT_DIR = REPO_ROOT / "input_data"
OUTPUT_DIR = REPO_ROOT / "python_outputs"
REFERENCE_DIR = REPO_ROOT / "reference_data"
TIMINGS_DIR = OUTPUT_DIR / "timings"

# Pre-clustered expression objects produced by the upstream clustering analysis.
MYELOID_H5AD = INPUT_DIR / "myeloid_clustered.h5ad"
TCELL_H5AD = INPUT_DIR / "tcells_clustered.h5ad"

# Ensure lazily created folders are discoverable without touching the FS at import time.
DEFAULT_OUTPUT_SUBDIRS = {
    "signature": OUTPUT_DIR / "1-signature",
    "ligand_activity": OUTPUT_DIR / "2-ligand-activity",
    "chord": OUTPUT_DIR / "3-chord",
    "reference": REFERENCE_DIR,
    "timings": TIMINGS_DIR,
}

# Prior networks ------------------------------------------------------------
NETWORK_BASE_URLS = [
    "https://zenodo.org/record/3260758/files",
    "https://zenodo.org/records/3260758/files",
]
NETWORK_FILES = {
    "ligand_target": "ligand_target_matrix.rds",
    "lr_network": "lr_network.rds",
}
# The hosted weighted_networks.rds is an R list (lr_sig, gr) that pyreadr cannot
# read; its lr_sig data frame is exported once to this file.
WEIGHTED_NETWORKS_RDS = "weighted_networks.rds"
WEIGHTED_LR_FILE = REFERENCE_DIR / "weighted_networks_lr_sig.csv"
# Interactions whose provenance is a prediction rather than a curated database.
PREDICTED_LR_DATABASES = ("ppi_prediction", "ppi_prediction_go")

# Metadata columns ----------------------------------------------------------
CLUSTER_KEY = "seurat_clusters"
TISSUE_KEY = "tissue"
TISSUES_OF_INTEREST = ["Tumor", "Mucosa"]
CONDITION_OI = "Tumor"
CONDITION_REFERENCE = "Mucosa"

# Analysis defaults --------------------------------------------------------
RECEIVER_EXPRESSION_PCT = 0.10
SENDER_EXPRESSION_PCT = 0.05
DE_MIN_PCT = 0.10
DE_PADJ_CUTOFF = 0.05
DE_MIN_LOGFC = 0.25
# Seurat FindMarkers p_val_adj
DE_CORR_METHOD = "bonferroni"
TOP_N_LIGANDS = 23
TOP_N_TARGETS_PER_LIGAND = 250
LIGAND_TARGET_CUTOFF = 0.25

# Chord diagram ------------------------------------------------------------
CHORD_WEIGHT_CUTOFF = 0.0
CHORD_CATEGORY_FILE = REFERENCE_DIR / "lr_categories.json"
CHORD_SECTOR_GAP = 1.0
CHORD_CATEGORY_GAP = 6.0

# Figures ------------------------------------------------------------------
FIG_DPI = 300
FIG_FORMATS = ("png", "pdf")
CHORD_FIGSIZE = (10, 10)
