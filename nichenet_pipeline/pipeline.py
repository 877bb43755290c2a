"""Treg niche ligand-activity workflow: selection, signature, activity, figures."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

import anndata as ad
import pandas as pd

from . import config
from .annotations import annotate_pairs, load_category_mapping, read_lr_pairs, write_lr_pairs
from .differential import DEThresholds, SignatureResult, extract_signature
from .expression import get_expressed_genes, union_expressed_genes
from .ligand_activity import (
    get_weighted_ligand_target_links,
    predict_ligand_activities,
    prepare_ligand_target_visualization,
    top_ligands,
)
from .networks import PriorNetworks, download_prior_networks, expressed_receptors, get_potential_ligands, load_prior_networks
from .plotting import (
    plot_activity_histogram,
    plot_chord_diagram,
    plot_ligand_activity_heatmap,
    plot_ligand_dotplot,
    plot_ligand_receptor_heatmap,
    plot_ligand_target_heatmap,
)
from .receptor_network import build_lr_matrices
from .selection import (
    load_expression_object,
    resolve_group,
    select_cells,
    split_groups,
    validate_cluster_groups,
    validate_conditions,
)
from .utils.io import ensure_dirs
from .utils.logging import get_logger, set_log_file, time_block
from .utils.populations import CLUSTER_GROUPS

LOGGER = get_logger(__name__)

LR_PAIRS_FILE = "ligand_receptor_pairs.csv"
CURATED_LR_PAIRS_FILE = "ligand_receptor_pairs_curated.csv"


@dataclass(slots=True)
class ExpressionThresholds:
    receiver_pct: float = config.RECEIVER_EXPRESSION_PCT
    sender_pct: float = config.SENDER_EXPRESSION_PCT


@dataclass(slots=True)
class NicheNetParams:
    receiver_group: str = "Tregs"
    sender_groups: List[str] = field(default_factory=lambda: ["MyeloidAll"])
    receiver_dataset: str = "tcells"
    sender_dataset: str = "myeloid"
    condition_oi: str = config.CONDITION_OI
    condition_reference: str = config.CONDITION_REFERENCE
    tissues: List[str] = field(default_factory=lambda: list(config.TISSUES_OF_INTEREST))
    expression: ExpressionThresholds = field(default_factory=ExpressionThresholds)
    de: DEThresholds = field(default_factory=DEThresholds)
    top_n_ligands: int = config.TOP_N_LIGANDS
    cluster_key: str = config.CLUSTER_KEY
    tissue_key: str = config.TISSUE_KEY


@dataclass
class NicheNetResult:
    signature: SignatureResult
    potential_ligands: List[str]
    activities: pd.DataFrame
    best_ligands: List[str]
    receptors: List[str] = field(default_factory=list)
    ligand_target_matrix: pd.DataFrame = field(default_factory=pd.DataFrame)
    lr_pairs: Dict[str, pd.DataFrame] = field(default_factory=dict)
    lr_matrices: Dict[str, pd.DataFrame] = field(default_factory=dict)
    senders: Dict[str, ad.AnnData] = field(default_factory=dict)


def define_populations(
    receiver_obj: ad.AnnData,
    sender_obj: ad.AnnData,
    params: NicheNetParams,
) -> Tuple[ad.AnnData, Dict[str, ad.AnnData]]:
    """Receiver cells and one sender population per group, all within the tissues of interest."""
    receiver_groups = CLUSTER_GROUPS[params.receiver_dataset]
    sender_groups = CLUSTER_GROUPS[params.sender_dataset]
    validate_cluster_groups(receiver_obj, receiver_groups, [params.receiver_group], cluster_key=params.cluster_key)
    validate_cluster_groups(sender_obj, sender_groups, params.sender_groups, cluster_key=params.cluster_key)
    validate_conditions(receiver_obj, [params.condition_oi, params.condition_reference], tissue_key=params.tissue_key)

    receiver = select_cells(
        receiver_obj,
        tissues=params.tissues,
        clusters=resolve_group(receiver_groups, params.receiver_group),
        tissue_key=params.tissue_key,
        cluster_key=params.cluster_key,
    )
    sender_tissue = select_cells(sender_obj, tissues=params.tissues, tissue_key=params.tissue_key, cluster_key=params.cluster_key)
    senders = split_groups(sender_tissue, sender_groups, params.sender_groups, cluster_key=params.cluster_key)
    return receiver, senders


def run_ligand_activity_analysis(
    receiver_obj: ad.AnnData,
    sender_obj: ad.AnnData,
    networks: PriorNetworks,
    params: NicheNetParams | None = None,
) -> NicheNetResult:
    """Run population definition through ligand-receptor ordering; no files are written."""
    params = params or NicheNetParams()
    receiver, senders = define_populations(receiver_obj, sender_obj, params)

    receiver_expressed = get_expressed_genes(receiver, params.expression.receiver_pct)
    sender_expressed = union_expressed_genes(senders.values(), params.expression.sender_pct)
    LOGGER.info("Expressed genes: receiver %d, senders %d", len(receiver_expressed), len(sender_expressed))

    signature = extract_signature(
        receiver,
        params.condition_oi,
        params.condition_reference,
        network_targets=networks.targets,
        receiver_expressed=receiver_expressed,
        thresholds=params.de,
        condition_key=params.tissue_key,
    )
    potential = get_potential_ligands(networks.lr_network, sender_expressed, receiver_expressed)
    activities = predict_ligand_activities(signature.geneset, signature.background, networks.ligand_target, potential)
    result = NicheNetResult(
        signature=signature, potential_ligands=potential, activities=activities, best_ligands=[], senders=senders
    )
    if activities.empty:
        return result

    result.best_ligands = top_ligands(activities, params.top_n_ligands)
    LOGGER.info("Top %d ligands: %s", len(result.best_ligands), ", ".join(result.best_ligands))

    links = pd.concat(
        [get_weighted_ligand_target_links(lig, signature.geneset, networks.ligand_target) for lig in result.best_ligands],
        ignore_index=True,
    )
    result.ligand_target_matrix = prepare_ligand_target_visualization(links, ligand_order=result.best_ligands)

    result.receptors = expressed_receptors(networks.lr_network, result.best_ligands, receiver_expressed)
    for label, (pairs, matrix) in build_lr_matrices(
        networks.lr_network, networks.weighted_lr, result.best_ligands, result.receptors
    ).items():
        result.lr_pairs[label] = pairs
        result.lr_matrices[label] = matrix
    return result


def render_figures(result: NicheNetResult, senders: ad.AnnData | None, out_dir: Path, *, n_top: int) -> None:
    if result.activities.empty:
        LOGGER.warning("No ligand activities; skipping figures")
        return
    plot_activity_histogram(result.activities, n_top, out_dir / "ligand_activity_histogram.png")
    plot_ligand_activity_heatmap(result.activities, result.best_ligands, out_dir / "ligand_activity_heatmap.png")
    plot_ligand_target_heatmap(result.ligand_target_matrix, out_dir / "ligand_target_heatmap.png")
    plot_ligand_receptor_heatmap(
        result.lr_matrices.get("full", pd.DataFrame()), out_dir / "ligand_receptor_heatmap.png"
    )
    plot_ligand_receptor_heatmap(
        result.lr_matrices.get("strict", pd.DataFrame()),
        out_dir / "ligand_receptor_heatmap_strict.png",
        title="Curated interactions only",
    )
    if senders is not None:
        plot_ligand_dotplot(senders, result.best_ligands, "sender_group", out_dir)


def load_networks() -> PriorNetworks:
    return load_prior_networks(download_prior_networks())


def run_step01_ligand_activity(params: NicheNetParams | None = None) -> NicheNetResult:
    params = params or NicheNetParams()
    out_dir = config.DEFAULT_OUTPUT_SUBDIRS["ligand_activity"]
    signature_dir = config.DEFAULT_OUTPUT_SUBDIRS["signature"]
    ensure_dirs([out_dir, signature_dir])
    set_log_file(out_dir / "step01_ligand_activity.log")
    timings_file = config.DEFAULT_OUTPUT_SUBDIRS["timings"] / "step01_ligand_activity.jsonl"

    with time_block("load_expression_objects", write_jsonl=timings_file):
        objects = {"tcells": load_expression_object(config.TCELL_H5AD), "myeloid": load_expression_object(config.MYELOID_H5AD)}
    with time_block("load_prior_networks", write_jsonl=timings_file):
        networks = load_networks()
    with time_block("ligand_activity_analysis", write_jsonl=timings_file):
        result = run_ligand_activity_analysis(
            objects[params.receiver_dataset], objects[params.sender_dataset], networks, params
        )

    result.signature.table.to_csv(signature_dir / f"de_{params.receiver_group}_{params.condition_oi}_vs_{params.condition_reference}.csv", index=False)
    pd.Series(result.signature.geneset, name="gene").to_csv(signature_dir / "geneset_oi.csv", index=False)
    result.activities.to_csv(out_dir / "ligand_activities.csv", index=False)
    LOGGER.info("Saved ligand activities to %s", out_dir / "ligand_activities.csv")

    with time_block("render_figures", write_jsonl=timings_file):
        senders = ad.concat(result.senders, label="sender_group", index_unique="-")
        render_figures(result, senders, out_dir, n_top=params.top_n_ligands)

    if "full" in result.lr_pairs:
        write_lr_pairs(result.lr_pairs["full"], config.DEFAULT_OUTPUT_SUBDIRS["chord"] / LR_PAIRS_FILE)
    return result


def load_annotated_pairs(chord_dir: Path, category_file: Path | None = None) -> pd.DataFrame:
    """Curated CSV when present, otherwise the raw pairs annotated from the category mapping."""
    category_file = category_file or config.CHORD_CATEGORY_FILE
    curated = chord_dir / CURATED_LR_PAIRS_FILE
    if curated.exists():
        LOGGER.info("Using curated ligand-receptor categories from %s", curated)
        return read_lr_pairs(curated, require_categories=True)
    pairs = read_lr_pairs(chord_dir / LR_PAIRS_FILE)
    ligand_categories, receptor_categories = load_category_mapping(category_file)
    return annotate_pairs(pairs, ligand_categories, receptor_categories)


def run_step02_chord_diagram() -> Path | None:
    chord_dir = config.DEFAULT_OUTPUT_SUBDIRS["chord"]
    ensure_dirs([chord_dir])
    timings_file = config.DEFAULT_OUTPUT_SUBDIRS["timings"] / "step02_chord_diagram.jsonl"
    with time_block("load_annotated_pairs", write_jsonl=timings_file):
        annotated = load_annotated_pairs(chord_dir)
    with time_block("plot_chord_diagram", write_jsonl=timings_file):
        return plot_chord_diagram(annotated, chord_dir / "ligand_receptor_chord.png")
