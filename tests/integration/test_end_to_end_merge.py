"""Integration tests for the full reconcile flow.

Runs the CLI against export files on disk and checks the combined
document: cleaning, normalization, matching, merging and statistics.
"""

import json
from unittest.mock import patch

import pytest

from reconciler.config.loader import load_config
from reconciler.main import main
from reconciler.pipeline import ReconcilePipeline
from tests.helpers.listings import booli_listing, hemnet_listing


@pytest.fixture
def exports(tmp_path, monkeypatch):
    """Mixed Booli and Hemnet exports in a clean working directory.

    - Vasagatan 12: same sale on both sites (matches)
    - Storgatan 1: Booli only
    - Kyrkvägen 3: Hemnet only, sold in a different month
    - Ågatan 5: both sites, but sold a year apart (no match)
    - one Hemnet tracking card without address (dropped by cleaning)
    """
    for name in ("LOG_LEVEL", "ENVIRONMENT", "RECONCILER_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

    booli = [
        booli_listing(),
        booli_listing(listing_id=2, address="Storgatan 1", asking_price=1_500_000, final_price=1_650_000),
        booli_listing(listing_id=3, address="Ågatan 5", sold_date="2023-04-01"),
    ]
    hemnet = [
        hemnet_listing(),
        hemnet_listing(listing_id="2000000000000000001", address="Kyrkvägen 3", sold_date="12 okt. 2024"),
        hemnet_listing(listing_id="2000000000000000002", address="Ågatan 5", sold_date="3 maj 2024"),
        {"id": "ad-slot", "streetAddress": "", "url": "/annons"},
    ]
    (tmp_path / "booli.json").write_text(json.dumps(booli, ensure_ascii=False), encoding="utf-8")
    (tmp_path / "hemnet.json").write_text(json.dumps(hemnet, ensure_ascii=False), encoding="utf-8")
    return tmp_path


@patch("reconciler.main.configure_logging")
class TestCliMerge:
    """Tests for the CLI writing a combined document."""

    def test_combined_document(self, mock_configure_logging, exports, capsys):
        exit_code = main(
            ["--booli", "booli.json", "--hemnet", "hemnet.json", "--output", "combined.json"]
        )

        assert exit_code == 0
        document = json.loads((exports / "combined.json").read_text(encoding="utf-8"))

        combined = document["combined"]
        assert len(combined) == 6
        assert len(document["groups"]) == 1

        primary, secondary = combined[0], combined[1]
        assert primary["source"] == "hemnet"
        assert primary["matchRole"] == "primary"
        assert primary["finalPrice"] == 3_000_000
        assert primary["url"].startswith("https://www.hemnet.se/")
        assert secondary["source"] == "booli"
        assert secondary["excludeFromStats"] is True
        assert secondary["primaryId"] == primary["id"]

        unmatched = combined[2:]
        assert all("matchRole" not in r for r in unmatched)
        assert {r["address"] for r in unmatched} == {"Storgatan 1", "Ågatan 5", "Kyrkvägen 3"}

        stats = document["stats"]
        assert stats["count"] == 5
        assert stats["excludedCount"] == 1

        out = capsys.readouterr().out
        assert "Merged booli=3, hemnet=3 into 6 records (1 groups, 1 dropped)" in out

    def test_every_input_record_appears_once(self, mock_configure_logging, exports):
        main(["--booli", "booli.json", "--hemnet", "hemnet.json", "--output", "combined.json"])

        document = json.loads((exports / "combined.json").read_text(encoding="utf-8"))
        keys = [(r["source"], r["id"]) for r in document["combined"]]
        assert len(keys) == len(set(keys))


class TestPipelineMerge:
    """Tests for the pipeline without the CLI layer."""

    def test_threshold_from_config(self, exports):
        (exports / "config.yaml").write_text("matching:\n  max_score: 0.01\n", encoding="utf-8")

        app_config, env_config = load_config()
        result = ReconcilePipeline(app_config=app_config, env_config=env_config).run_once(
            "booli.json", "hemnet.json"
        )

        assert result.group_count == 0
        assert result.combined_count == 6
        assert result.stats.excluded_count == 0
