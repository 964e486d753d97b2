# Copyright (c) Syntropy Systems
"""Tests for loading the anonymization engine."""

import pytest

from riskbench.engine import (
    AnonymizationConfig,
    AnonymizationResult,
    Anonymizer,
    Lattice,
    LatticeNode,
    OutputRow,
    load_engine,
)
from riskbench.errors import BenchmarkConfigError
from riskbench.models.setup import Heurakles, KAnonymity, Loss


class TestLoadEngine:
    """Tests for resolving ``module:factory`` strings."""

    def test_load(self) -> None:
        engine = load_engine("fake_engine:make_engine")

        assert isinstance(engine, Anonymizer)

    @pytest.mark.parametrize(
        ("spec", "message"),
        [
            (None, "No anonymization engine"),
            ("", "No anonymization engine"),
            ("fake_engine", "module:factory"),
            ("fake_engine:", "module:factory"),
            ("riskbench_no_such_module:make", "Cannot import"),
            ("fake_engine:missing", "not found"),
            ("fake_engine:NOT_CALLABLE", "not found"),
            ("fake_engine:not_an_engine", "no anonymize"),
        ],
    )
    def test_errors(self, spec, message: str) -> None:
        """Test that bad engine specs are config errors."""
        with pytest.raises(BenchmarkConfigError, match=message) as exc:
            _ = load_engine(spec)

        assert exc.value.value == spec


class TestEngineTypes:
    """Tests for the values exchanged with the engine."""

    def test_time_limit(self) -> None:
        config = AnonymizationConfig(
            criteria=(KAnonymity(k=2),),
            metric=Loss(),
            max_outliers=0.0,
            algorithm=Heurakles(time_limit_ms=110),
        )

        assert config.time_limit_ms == 110

    def test_flash_is_default(self) -> None:
        config = AnonymizationConfig(
            criteria=(KAnonymity(k=2),), metric=Loss(), max_outliers=1.0
        )

        assert config.time_limit_ms is None

    def test_result_summary(self) -> None:
        checked = LatticeNode(transformation=(1, 0), checked=True, information_loss=0.4)
        result = AnonymizationResult(
            output=(OutputRow(("a",)), OutputRow(("*",), is_outlier=True)),
            lattice=Lattice(levels=((LatticeNode((0, 0)),), (checked,))),
            optimum=checked,
        )

        assert result.outlier_count == 1
        assert result.lattice.checked_count() == 1
        assert len(result.lattice.nodes()) == 2
        assert result.minimum_information_loss == 0.4
        assert AnonymizationResult().minimum_information_loss is None
