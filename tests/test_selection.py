"""Tests for population selection and cluster/condition validation."""

import pytest

from nichenet_pipeline.selection import (
    resolve_group,
    select_cells,
    split_groups,
    validate_cluster_groups,
    validate_conditions,
)
from nichenet_pipeline.utils.populations import MYELOID_GROUPS, TCELL_GROUPS


class TestSelectCells:
    def test_tissue_and_cluster_filter(self, tcell_adata):
        subset = select_cells(tcell_adata, tissues=["Tumor", "Mucosa"], clusters=[5])
        assert subset.n_obs == 60
        assert set(subset.obs["seurat_clusters"].astype(str)) == {"5"}
        assert set(subset.obs["tissue"]) == {"Tumor", "Mucosa"}

    def test_integer_and_string_clusters_agree(self, tcell_adata):
        by_int = select_cells(tcell_adata, clusters=[5])
        by_str = select_cells(tcell_adata, clusters=["5"])
        assert list(by_int.obs_names) == list(by_str.obs_names)

    def test_original_object_untouched(self, tcell_adata):
        n_before = tcell_adata.n_obs
        subset = select_cells(tcell_adata, tissues=["Tumor"])
        subset.obs["tissue"] = "changed"
        assert tcell_adata.n_obs == n_before
        assert "changed" not in set(tcell_adata.obs["tissue"])

    def test_no_match_raises(self, tcell_adata):
        with pytest.raises(ValueError, match="No cells match"):
            select_cells(tcell_adata, tissues=["Blood"], clusters=[0])

    def test_split_groups(self, myeloid_adata):
        pops = split_groups(myeloid_adata, MYELOID_GROUPS, ["cDC1", "MacrophagesC1Q"])
        assert pops["cDC1"].n_obs == 5
        assert pops["MacrophagesC1Q"].n_obs == 10


class TestValidation:
    def test_resolve_group_unknown(self):
        with pytest.raises(KeyError, match="Unknown cluster group"):
            resolve_group(TCELL_GROUPS, "NotAGroup")

    def test_resolve_group_strings(self):
        assert resolve_group(TCELL_GROUPS, "Tregs") == ["5"]

    def test_missing_cluster_ids(self, tcell_adata):
        # cluster 7 (Proliferating) does not exist in the fixture
        with pytest.raises(KeyError, match="Proliferating"):
            validate_cluster_groups(tcell_adata, TCELL_GROUPS, ["Tregs", "Proliferating"])

    def test_present_clusters_pass(self, myeloid_adata):
        validate_cluster_groups(myeloid_adata, MYELOID_GROUPS, ["MyeloidAll", "DCs"])

    def test_missing_condition(self, tcell_adata):
        with pytest.raises(KeyError, match="Normal"):
            validate_conditions(tcell_adata, ["Tumor", "Normal"])

    def test_missing_cluster_column(self, tcell_adata):
        with pytest.raises(KeyError, match="leiden"):
            validate_cluster_groups(tcell_adata, TCELL_GROUPS, ["Tregs"], cluster_key="leiden")
