"""Tests for prior network loading and ligand/receptor filtering."""

import pandas as pd
import pytest

from nichenet_pipeline import config
from nichenet_pipeline.networks import (
    download_prior_networks,
    expressed_receptors,
    get_potential_ligands,
    load_prior_networks,
    locate_weighted_lr,
    strict_lr_network,
)
from nichenet_pipeline.utils import io


class TestPotentialLigands:
    def test_intersection(self, lr_network):
        ligands = get_potential_ligands(lr_network, ["L1", "L2", "L3"], ["R1", "R3"])
        assert sorted(ligands) == ["L1", "L3"]

    def test_matches_definition(self, lr_network):
        sender = {"L1", "L2", "G1"}
        receiver = {"R2", "RX", "G2"}
        expected = {
            lig for lig, rec in zip(lr_network["from"], lr_network["to"]) if lig in sender and rec in receiver
        }
        assert set(get_potential_ligands(lr_network, sender, receiver)) == expected

    def test_no_receptor_means_no_ligand(self, lr_network):
        assert get_potential_ligands(lr_network, ["L1", "L2", "L3"], []) == []

    def test_expressed_receptors(self, lr_network):
        assert sorted(expressed_receptors(lr_network, ["L1"], ["R1", "RX", "R2"])) == ["R1", "RX"]


class TestStrictNetwork:
    def test_drops_predictions(self, lr_network):
        strict = strict_lr_network(lr_network)
        assert set(strict["database"]) == {"kegg"}
        assert len(lr_network) == 4

    def test_without_database_column(self, lr_network):
        plain = lr_network.drop(columns=["database"])
        assert len(strict_lr_network(plain)) == len(plain)


class TestLoadPriorNetworks:
    def test_csv_files(self, tmp_path, correlated_networks):
        paths = {
            "ligand_target": tmp_path / "ligand_target.csv",
            "lr_network": tmp_path / "lr_network.csv",
            "weighted_lr": tmp_path / "weighted_lr.tsv",
        }
        correlated_networks.ligand_target.to_csv(paths["ligand_target"])
        correlated_networks.lr_network.to_csv(paths["lr_network"], index=False)
        correlated_networks.weighted_lr.to_csv(paths["weighted_lr"], sep="\t", index=False)

        networks = load_prior_networks(paths)
        assert networks.targets == ["G1", "G2", "G3"]
        assert list(networks.ligand_target.columns) == ["L1", "L2", "L3"]
        assert sorted(networks.ligands) == ["L1", "L2", "L3"]
        pd.testing.assert_frame_equal(networks.weighted_lr, correlated_networks.weighted_lr)

    def test_missing_columns(self, tmp_path, correlated_networks):
        paths = {
            "ligand_target": tmp_path / "ligand_target.csv",
            "lr_network": tmp_path / "lr_network.csv",
            "weighted_lr": tmp_path / "weighted_lr.csv",
        }
        correlated_networks.ligand_target.to_csv(paths["ligand_target"])
        correlated_networks.lr_network.rename(columns={"to": "receptor"}).to_csv(paths["lr_network"], index=False)
        correlated_networks.weighted_lr.to_csv(paths["weighted_lr"], index=False)
        with pytest.raises(KeyError, match="to"):
            load_prior_networks(paths)

    def test_missing_file(self, tmp_path):
        paths = {key: tmp_path / f"{key}.csv" for key in ("ligand_target", "lr_network", "weighted_lr")}
        with pytest.raises(FileNotFoundError):
            load_prior_networks(paths)


class TestDownloadPriorNetworks:
    def test_hosted_tables_fetched_and_export_located(self, tmp_path, monkeypatch):
        calls = []

        def fake_download(url, dest):
            calls.append(url)
            dest.write_bytes(b"rds")

        weighted = tmp_path / "lr_sig.csv"
        weighted.write_text("from,to,weight\nL1,R1,0.9\n", encoding="utf-8")
        monkeypatch.setattr(io, "_download_with_ua", fake_download)

        paths = download_prior_networks(tmp_path / "ref", weighted_lr_file=weighted)
        assert sorted(paths) == ["ligand_target", "lr_network", "weighted_lr"]
        assert paths["weighted_lr"] == weighted
        assert paths["ligand_target"].read_bytes() == b"rds"
        assert [url.rsplit("/", 1)[1] for url in calls] == ["ligand_target_matrix.rds", "lr_network.rds"]
        assert all(url.startswith(config.NETWORK_BASE_URLS[0]) for url in calls)

    def test_missing_weighted_export_explains_how_to_create_it(self, tmp_path, monkeypatch):
        def fail(url, dest):
            raise AssertionError("nothing should be downloaded")

        monkeypatch.setattr(io, "_download_with_ua", fail)
        with pytest.raises(FileNotFoundError, match=r"lr_sig"):
            download_prior_networks(tmp_path / "ref", weighted_lr_file=tmp_path / "absent.csv")

    def test_default_export_location(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "WEIGHTED_LR_FILE", tmp_path / "weighted.csv")
        with pytest.raises(FileNotFoundError, match="weighted_networks.rds"):
            locate_weighted_lr()
        (tmp_path / "weighted.csv").write_text("from,to,weight\n", encoding="utf-8")
        assert locate_weighted_lr() == tmp_path / "weighted.csv"
