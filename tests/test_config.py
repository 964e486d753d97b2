# Copyright (c) Syntropy Systems
"""Tests for configuration loading."""

import os
from pathlib import Path

import pytest
import yaml

from riskbench.budget import MeanPolicy
from riskbench.config import (
    CONFIG_FILENAME,
    BenchConfig,
    default_config_data,
    find_config_file,
    load_config,
)
from riskbench.errors import BenchmarkConfigError
from riskbench.models.setup import Datafile, KAnonymity, PopulationUniqueness


class TestDefaults:
    """Tests for the built-in suites."""

    def test_suite_defaults(self) -> None:
        config = BenchConfig()

        assert config.repetitions == 2
        assert config.budget_policy is MeanPolicy.ARITHMETIC
        assert config.suites.criteria == [
            KAnonymity(k=5),
            PopulationUniqueness(threshold=0.01),
        ]
        assert config.suites.suppression_values == [0.0, 1.0]
        assert config.suites.self_qi_counts == [5, 6, 7, 8]
        assert config.suites.self_time_limit_ms == 600_000

    def test_acs13_truncated_in_flash_comparison(self) -> None:
        datasets = BenchConfig().suites.flash_datasets

        assert [d.datafile for d in datasets] == list(Datafile)
        assert [d.custom_qi_count for d in datasets] == [None] * 5 + [10]

    def test_default_data_round_trips(self, temp_dir: Path) -> None:
        """Test that the generated YAML loads back to the defaults."""
        path = temp_dir / CONFIG_FILENAME
        path.write_text(yaml.safe_dump(default_config_data()))

        config = load_config(path)

        assert config.suites == BenchConfig().suites
        assert config.data_dir == temp_dir.resolve() / "data"


class TestLoadConfig:
    """Tests for reading riskbench.yaml."""

    def test_paths_relative_to_config(self, temp_dir: Path) -> None:
        path = temp_dir / CONFIG_FILENAME
        path.write_text("data_dir: input\nresults_dir: out\nrepetitions: 3\n")

        config = load_config(path)

        assert config.data_dir == temp_dir.resolve() / "input"
        assert config.hierarchy_dir == temp_dir.resolve() / "hierarchies"
        assert config.results_dir == temp_dir.resolve() / "out"
        assert config.repetitions == 3

    def test_empty_file(self, temp_dir: Path) -> None:
        path = temp_dir / CONFIG_FILENAME
        path.write_text("")

        assert load_config(path).suites == BenchConfig().suites

    def test_not_a_mapping(self, temp_dir: Path) -> None:
        path = temp_dir / CONFIG_FILENAME
        path.write_text("- a\n- b\n")

        with pytest.raises(BenchmarkConfigError, match="must contain a mapping"):
            _ = load_config(path)

    @pytest.mark.parametrize(
        "content",
        [
            "repetitions: 0\n",
            "unknown_key: 1\n",
            "suites:\n  suppression_values: [1.5]\n",
            "suites:\n  criteria: [{kind: l_diversity}]\n",
            "suites:\n  self_qi_counts: [0]\n",
        ],
    )
    def test_invalid_values(self, temp_dir: Path, content: str) -> None:
        """Test that invalid settings are config errors."""
        path = temp_dir / CONFIG_FILENAME
        path.write_text(content)

        with pytest.raises(BenchmarkConfigError, match="Invalid config") as exc:
            _ = load_config(path)

        assert exc.value.value == str(path)

    def test_malformed_yaml(self, temp_dir: Path) -> None:
        """Test that unparsable YAML is a config error."""
        path = temp_dir / CONFIG_FILENAME
        path.write_text("suites: [unclosed\n")

        with pytest.raises(BenchmarkConfigError, match="Malformed config") as exc:
            _ = load_config(path)

        assert exc.value.value == str(path)

    def test_qi_count_beyond_datafile(self, temp_dir: Path) -> None:
        path = temp_dir / CONFIG_FILENAME
        path.write_text(
            "suites:\n  flash_datasets: [{datafile: acs13, custom_qi_count: 31}]\n"
        )

        with pytest.raises(BenchmarkConfigError, match="between 1 and 30"):
            _ = load_config(path)


class TestFindConfigFile:
    """Tests for locating riskbench.yaml."""

    def test_walks_up(self, temp_dir: Path) -> None:
        (temp_dir / CONFIG_FILENAME).write_text("repetitions: 1\n")
        nested = temp_dir / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == temp_dir.resolve() / CONFIG_FILENAME

    def test_used_by_load_config(self, bench_project: Path) -> None:
        """Test that load_config picks up the project file from cwd."""
        nested = bench_project / "sub"
        nested.mkdir()
        os.chdir(nested)
        try:
            config = load_config()
        finally:
            os.chdir(bench_project)

        assert config.engine == "fake_engine:make_engine"
        assert config.results_dir == bench_project.resolve() / "results"
