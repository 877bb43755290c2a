"""Cluster-id groups carried over from the upstream clustering analysis."""

from __future__ import annotations

from typing import Dict, List

# T-cell object (Leiden clusters of the T/NK compartment).
TCELL_GROUPS: Dict[str, List[int]] = {
    "CD4Naive": [0],
    "CD8Effector": [1, 3],
    "CD4Memory": [2],
    "CD8Exhausted": [4],
    "Tregs": [5],
    "MAIT": [6],
    "Proliferating": [7],
}

# Myeloid / antigen-presenting-cell object.
MYELOID_GROUPS: Dict[str, List[int]] = {
    "Monocytes": [0],
    "MacrophagesC1Q": [1, 4],
    "MacrophagesSPP1": [2],
    "cDC2": [3],
    "cDC1": [5],
    "mregDC": [6],
    "pDC": [7],
}
MYELOID_GROUPS["MyeloidAll"] = sorted({cid for ids in list(MYELOID_GROUPS.values()) for cid in ids})
MYELOID_GROUPS["DCs"] = MYELOID_GROUPS["cDC1"] + MYELOID_GROUPS["cDC2"] + MYELOID_GROUPS["mregDC"]

CLUSTER_GROUPS: Dict[str, Dict[str, List[int]]] = {
    "tcells": TCELL_GROUPS,
    "myeloid": MYELOID_GROUPS,
}
