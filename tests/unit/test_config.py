"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from chillstage.config import ChillStageConfig
from chillstage.core.search import PriorityOrderSearch


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep a stray .env or CHILLSTAGE_* variable out of the tests."""
    monkeypatch.chdir(tmp_path)
    for key in ("CHILLSTAGE_SEARCH__TOP_N", "CHILLSTAGE_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


class TestChillStageConfig:
    def test_defaults(self):
        config = ChillStageConfig()
        assert config.staging.excess_capacity_ratio == 1.5
        assert config.search.batch_size == 50
        assert config.search.top_n == 20
        assert config.profile.hours == 24
        assert config.performance.load_column == "kW"

    def test_to_dict(self):
        data = ChillStageConfig().to_dict()
        assert data["search"] == {"batch_size": 50, "top_n": 20}
        assert data["staging"]["excess_capacity_ratio"] == 1.5

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "chillstage.yaml"
        path.write_text("search:\n  batch_size: 10\nstaging:\n  excess_capacity_ratio: 2.0\n")

        config = ChillStageConfig.from_yaml(path)
        assert config.search.batch_size == 10
        assert config.search.top_n == 20
        assert config.staging.excess_capacity_ratio == 2.0

    def test_from_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ChillStageConfig.from_yaml(path).search.batch_size == 50

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CHILLSTAGE_SEARCH__TOP_N", "5")
        monkeypatch.setenv("CHILLSTAGE_LOG_LEVEL", "DEBUG")
        config = ChillStageConfig()
        assert config.search.top_n == 5
        assert config.log_level == "DEBUG"

    def test_invalid_ratio_rejected(self):
        with pytest.raises(ValidationError):
            ChillStageConfig(staging={"excess_capacity_ratio": 0.5})

    def test_dict_drives_components(self, three_units, make_table):
        config = ChillStageConfig(search={"batch_size": 7, "top_n": 3}).to_dict()
        search = PriorityOrderSearch(three_units, make_table({"A": 4.0}), config)
        assert search.batch_size == 7
        assert search.top_n == 3
        assert search.simulator.controller.excess_capacity_ratio == 1.5
