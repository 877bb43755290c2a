"""Heatmaps, activity summaries and the ligand-receptor chord diagram."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import anndata as ad
import matplotlib.pyplot as plt
from matplotlib.colors import LinearSegmentedColormap, to_hex
from matplotlib.patches import Patch
import pandas as pd
import scanpy as sc
import seaborn as sns
from pycirclize import Circos

from . import config
from .utils.logging import get_logger

LOGGER = get_logger(__name__)

LIGAND_TARGET_COLORS = ("whitesmoke", "purple")
LIGAND_RECEPTOR_COLORS = ("whitesmoke", "mediumvioletred")
ACTIVITY_COLORS = ("white", "darkorange")


def save_figure(fig, out_file: Path, *, dpi: int = config.FIG_DPI) -> Path:
    """Write ``fig`` once per configured format; returns the path as given."""
    out_file.parent.mkdir(parents=True, exist_ok=True)
    for fmt in config.FIG_FORMATS:
        fig.savefig(out_file.with_suffix(f".{fmt}"), dpi=dpi)
    plt.close(fig)
    return out_file


def plot_weight_heatmap(
    matrix: pd.DataFrame,
    out_file: Path,
    *,
    colors: Tuple[str, str],
    xlabel: str,
    ylabel: str,
    cbar_label: str,
    title: str | None = None,
    vmin: float = 0.0,
    vmax: float | None = None,
) -> Path | None:
    if matrix.empty:
        LOGGER.warning("Nothing to plot for %s", out_file.name)
        return None
    cmap = LinearSegmentedColormap.from_list(f"{colors[0]}_{colors[1]}", list(colors))
    vmax = float(matrix.to_numpy().max()) if vmax is None else vmax
    width = max(4, 0.3 * matrix.shape[1] + 2)
    height = max(3, 0.3 * matrix.shape[0] + 1.5)
    fig = plt.figure(figsize=(width, height))
    sns.heatmap(
        matrix,
        cmap=cmap,
        vmin=vmin,
        vmax=vmax,
        linewidths=0.2,
        linecolor="lightgrey",
        cbar_kws={"label": cbar_label},
    )
    if title:
        plt.title(title)
    plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.tight_layout()
    return save_figure(fig, out_file)


def plot_ligand_target_heatmap(matrix: pd.DataFrame, out_file: Path) -> Path | None:
    return plot_weight_heatmap(
        matrix,
        out_file,
        colors=LIGAND_TARGET_COLORS,
        xlabel="Predicted target genes",
        ylabel="Prioritized ligands",
        cbar_label="Regulatory potential",
    )


def plot_ligand_receptor_heatmap(matrix: pd.DataFrame, out_file: Path, *, title: str | None = None) -> Path | None:
    return plot_weight_heatmap(
        matrix,
        out_file,
        colors=LIGAND_RECEPTOR_COLORS,
        xlabel="Prioritized ligands",
        ylabel="Receptors expressed by receivers",
        cbar_label="Prior interaction potential",
        title=title,
    )


def plot_ligand_activity_heatmap(activities: pd.DataFrame, ligands: Sequence[str], out_file: Path) -> Path | None:
    matrix = activities.set_index("test_ligand").loc[list(ligands), ["pearson"]]
    matrix.columns = ["Pearson"]
    return plot_weight_heatmap(
        matrix,
        out_file,
        colors=ACTIVITY_COLORS,
        xlabel="Ligand activity",
        ylabel="Prioritized ligands",
        cbar_label="Pearson correlation",
    )


def plot_activity_histogram(activities: pd.DataFrame, n_top: int, out_file: Path) -> Path | None:
    if activities.empty:
        LOGGER.warning("No ligand activities to plot")
        return None
    ordered = activities.sort_values("pearson", ascending=False)
    cutoff = ordered["pearson"].iloc[min(n_top, len(ordered)) - 1]
    fig = plt.figure(figsize=(6, 4))
    sns.histplot(activities["pearson"], bins=30, color="#3176B7")
    plt.axvline(cutoff, color="red", linestyle="--", linewidth=1)
    plt.xlabel("Ligand activity (Pearson)")
    plt.ylabel("Number of ligands")
    plt.title(f"Top {n_top} ligands at pearson >= {cutoff:.3f}")
    plt.tight_layout()
    return save_figure(fig, out_file)


def plot_ligand_dotplot(senders: ad.AnnData, ligands: Sequence[str], groupby: str, out_dir: Path) -> None:
    available = [gene for gene in ligands if gene in senders.var_names]
    if not available:
        LOGGER.warning("No prioritized ligands found in sender data for dotplot")
        return
    sc.settings.figdir = str(out_dir)
    for fmt in config.FIG_FORMATS:
        sc.pl.dotplot(
            senders,
            var_names=available,
            groupby=groupby,
            standard_scale="var",
            save=f"_top_ligands_senders.{fmt}",
            show=False,
        )


def _category_colors(categories: Sequence[str], palette: str) -> Dict[str, str]:
    unique = list(dict.fromkeys(categories))
    colors = sns.color_palette(palette, n_colors=max(len(unique), 1))
    return {cat: to_hex(color) for cat, color in zip(unique, colors)}


def chord_layout(
    annotated: pd.DataFrame,
) -> Tuple[List[str], List[float], Dict[str, str], Dict[Tuple[str, str], str]]:
    """Sector order, gaps, sector colors, and category colors for the chord diagram.

    Ligands come first, then receptors, each grouped by category; the gap after
    a sector widens where the category (or the ligand/receptor side) changes.
    Category colors are keyed by ``("L" | "R", category)`` so a label shared by
    both sides keeps one color per side.
    """
    ligands = annotated[["ligand", "ligand_type"]].drop_duplicates("ligand").sort_values(["ligand_type", "ligand"])
    receptors = annotated[["receptor", "receptor_type"]].drop_duplicates("receptor").sort_values(
        ["receptor_type", "receptor"], ascending=False
    )
    # genes acting as both ligand and receptor occupy a single sector
    receptors = receptors[~receptors["receptor"].isin(ligands["ligand"])]
    order = ligands["ligand"].tolist() + receptors["receptor"].tolist()
    sector_category = [("L", c) for c in ligands["ligand_type"]] + [("R", c) for c in receptors["receptor_type"]]

    space = []
    for idx, key in enumerate(sector_category):
        following = sector_category[(idx + 1) % len(sector_category)]
        space.append(config.CHORD_SECTOR_GAP if following == key else config.CHORD_CATEGORY_GAP)

    category_colors = {
        **{("L", cat): color for cat, color in _category_colors(ligands["ligand_type"].tolist(), "Set2").items()},
        **{("R", cat): color for cat, color in _category_colors(receptors["receptor_type"].tolist(), "Pastel1").items()},
    }
    sector_colors = {lig: category_colors[("L", cat)] for lig, cat in zip(ligands["ligand"], ligands["ligand_type"])}
    sector_colors.update(
        {rec: category_colors[("R", cat)] for rec, cat in zip(receptors["receptor"], receptors["receptor_type"])}
    )
    return order, space, sector_colors, category_colors


def plot_chord_diagram(
    annotated: pd.DataFrame,
    out_file: Path,
    *,
    weight_cutoff: float = config.CHORD_WEIGHT_CUTOFF,
    figsize: Tuple[float, float] = config.CHORD_FIGSIZE,
    dpi: int = config.FIG_DPI,
) -> Path | None:
    """Chord diagram of ligand → receptor weights.

    Links below ``weight_cutoff`` are drawn fully transparent; visible links get
    more opaque with weight.
    """
    pairs = annotated[annotated["weight"] > 0]
    if pairs.empty:
        LOGGER.warning("No weighted ligand-receptor pairs for the chord diagram")
        return None
    pairs = pairs.copy()
    pairs["weight"] = pairs["weight"].astype(float)

    order, space, sector_colors, category_colors = chord_layout(pairs)
    matrix = pairs.pivot_table(index="ligand", columns="receptor", values="weight", aggfunc="max", fill_value=0.0)
    weights = pairs.set_index(["ligand", "receptor"])["weight"].to_dict()
    w_min, w_max = min(weights.values()), max(weights.values())
    span = (w_max - w_min) or 1.0

    def link_style(ligand: str, receptor: str) -> Dict[str, float]:
        weight = weights.get((ligand, receptor), 0.0)
        if weight < weight_cutoff:
            return dict(alpha=0.0)
        return dict(alpha=0.25 + 0.65 * (weight - w_min) / span)

    circos = Circos.chord_diagram(
        matrix,
        space=space,
        order=order,
        cmap=sector_colors,
        r_lim=(93, 100),
        label_kws=dict(size=8, orientation="vertical"),
        link_kws=dict(direction=1, ec="none"),
        link_kws_handler=link_style,
    )
    fig = circos.plotfig(dpi=dpi, figsize=figsize)
    side_names = {"L": "ligand", "R": "receptor"}
    handles = [
        Patch(color=color, label=f"{category} ({side_names[side]})")
        for (side, category), color in category_colors.items()
    ]
    fig.legend(handles=handles, loc="upper right", fontsize=8, frameon=False)
    save_figure(fig, out_file, dpi=dpi)
    LOGGER.info("Saved chord diagram with %d links to %s", len(pairs), out_file)
    return out_file
