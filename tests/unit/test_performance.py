"""Tests for the performance table."""

import numpy as np
import pandas as pd
import pytest

from chillstage.core.entities import Combination
from chillstage.core.performance import PerformanceTable


@pytest.fixture
def table():
    singles = pd.DataFrame(
        {
            "kW": [100, 200, 300, 400],
            "CH1": [4.0, 5.0, 5.5, 5.2],
            "CH2": [3.8, None, 5.1, np.nan],
            "CH3": [None, None, None, None],
        }
    )
    pairs = pd.DataFrame(
        {
            "kW": [200, 400, 600],
            "CH2+CH1": [4.5, 5.8, 6.0],
            "CH1": [9.9, 9.9, 9.9],  # wrong size for this table
        }
    )
    return PerformanceTable.from_frames({1: singles, 2: pairs})


class TestLookup:
    """Tests for nearest-load COP lookup."""

    def test_exact_load(self, table):
        assert table.cop(Combination.of("CH1"), 300) == 5.5

    def test_nearest_load(self, table):
        assert table.cop(Combination.of("CH1"), 320) == 5.5
        assert table.cop(Combination.of("CH1"), 10) == 4.0
        assert table.cop(Combination.of("CH1"), 10_000) == 5.2

    def test_tie_goes_to_first_sample(self, table):
        assert table.cop(Combination.of("CH1"), 150) == 4.0

    def test_missing_samples_are_skipped(self, table):
        # 200 kW sample is empty for CH2, so 300 kW (5.1) is nearest for 240
        assert table.cop(Combination.of("CH2"), 240) == 5.1
        assert table.cop(Combination.of("CH2"), 400) == 5.1

    def test_no_data_is_none_not_zero(self, table):
        assert table.cop(Combination.of("CH3"), 200) is None
        assert table.cop(Combination.of("CH9"), 200) is None
        assert table.cop(Combination.of("CH1", "CH2", "CH3"), 200) is None
        assert table.cop(Combination(), 200) is None

    def test_column_keys_are_canonicalised(self, table):
        assert table.cop(Combination.of("CH1", "CH2"), 400) == 5.8
        assert table.cop(Combination.of("CH2", "CH1"), 400) == 5.8

    def test_lookup_uses_size_table(self, table):
        # The misplaced single-unit column in the pairs table is ignored
        assert table.cop(Combination.of("CH1"), 200) == 5.0
        assert table.combinations(2) == [Combination.of("CH1", "CH2")]


class TestConstruction:
    """Tests for building tables."""

    def test_from_records(self):
        table = PerformanceTable.from_records(
            {1: [{"kW": 100, "A": 3.0}, {"kW": 200, "A": 3.5, "B": 4.0}]}
        )
        assert table.cop(Combination.of("A"), 190) == 3.5
        assert table.cop(Combination.of("B"), 100) == 4.0

    def test_non_numeric_cells_dropped(self):
        frame = pd.DataFrame({"kW": ["100", "200", "x"], "A": ["3.1", "n/a", "4.0"]})
        table = PerformanceTable.from_frames({1: frame})
        assert table.cop(Combination.of("A"), 200) == 3.1

    def test_custom_load_column_and_delimiter(self):
        frame = pd.DataFrame({"load": [100, 200], "B|A": [4.0, 4.4]})
        table = PerformanceTable.from_frames({2: frame}, load_column="load", delimiter="|")
        assert table.cop(Combination.of("A", "B"), 200) == 4.4

    def test_missing_load_column(self):
        with pytest.raises(ValueError):
            PerformanceTable.from_frames({1: pd.DataFrame({"A": [3.0]})})

    def test_empty_frame_ignored(self):
        table = PerformanceTable.from_frames({1: pd.DataFrame()})
        assert table.sizes == []

    def test_duplicate_spelling_keeps_first_column(self, caplog):
        frame = pd.DataFrame({"kW": [100, 200], "A+B": [4.0, 4.0], "B+A": [1.0, 1.0]})
        with caplog.at_level("WARNING"):
            table = PerformanceTable.from_frames({2: frame})

        assert table.cop(Combination.of("A", "B"), 100) == 4.0
        assert "B+A" in caplog.text

    def test_second_frame_does_not_overwrite(self):
        table = PerformanceTable()
        table.add_frame(1, pd.DataFrame({"kW": [100], "A": [4.0]}))
        table.add_frame(1, pd.DataFrame({"kW": [100], "A": [2.0], "B": [3.0]}))

        assert table.cop(Combination.of("A"), 100) == 4.0
        assert table.cop(Combination.of("B"), 100) == 3.0

    def test_empty_first_spelling_does_not_block_data(self):
        frame = pd.DataFrame({"kW": [100, 200], "A+B": [None, None], "B+A": [3.0, 3.0]})
        table = PerformanceTable.from_frames({2: frame})
        assert table.cop(Combination.of("A", "B"), 150) == 3.0


class TestStatistics:
    """Tests for table statistics."""

    def test_max_cop(self, table):
        assert table.max_cop(Combination.of("CH1")) == 5.5
        assert table.max_cop(Combination.of("CH3")) is None

    def test_has_data(self, table):
        assert table.has_data(Combination.of("CH1"))
        assert not table.has_data(Combination.of("CH3"))

    def test_summary(self, table):
        summary = table.get_summary()
        assert summary["sizes"] == [1, 2]
        assert summary["combinations"] == {1: 2, 2: 1}
