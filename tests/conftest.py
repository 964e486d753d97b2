# Copyright (c) Syntropy Systems
"""Pytest fixtures for riskbench tests."""

import os
import tempfile
import textwrap
from collections.abc import Generator
from pathlib import Path

import pytest

# Store original cwd at module load time
_original_cwd = Path.cwd()
_tests_dir = Path(__file__).parent

ADULT_CSV = """\
age;education;sex
39;Bachelors;Male
50;HS-grad;Female
39;HS-grad;Male
"""

ACS13_CSV = """\
AGEP;CIT;COW
5;1;2
25;4;1
37;1;2
"""

AGEP_TEMPLATE = """\
type: interval
datatype: integer
intervals:
  - {lower: 0, upper: 10}
  - {lower: 10, upper: 20}
levels: [2]
"""

PROJECT_CONFIG = """\
data_dir: data
hierarchy_dir: hierarchies
results_dir: results
repetitions: 2
engine: "fake_engine:make_engine"
suites:
  criteria:
    - {kind: k_anonymity, k: 2}
  metrics:
    - {kind: loss}
  suppression_values: [0.0]
  flash_datasets:
    - {datafile: ADULT, custom_qi_count: 2}
  self_datafiles: [acs13]
  self_qi_counts: [1, 2]
  self_time_limit_ms: 500
"""


def write_hierarchy_files(root: Path) -> None:
    """Write data and hierarchy files for Adult (2 QIs) and ACS13 (2 QIs)."""
    data_dir = root / "data"
    hierarchy_dir = root / "hierarchies"
    data_dir.mkdir(parents=True, exist_ok=True)
    hierarchy_dir.mkdir(parents=True, exist_ok=True)

    (data_dir / "adult.csv").write_text(ADULT_CSV)
    (data_dir / "ss13acs.csv").write_text(ACS13_CSV)

    (hierarchy_dir / "adult_hierarchy_age.csv").write_text(
        "39;30-39;*\n50;50-59;*\n"
    )
    (hierarchy_dir / "adult_hierarchy_education.csv").write_text(
        "Bachelors;Higher;*\nHS-grad;Secondary;*\n"
    )
    (hierarchy_dir / "ss13acs_hierarchy_i_AGEP.ahs").write_text(AGEP_TEMPLATE)
    (hierarchy_dir / "ss13acs_hierarchy_o_CIT.csv").write_text(
        "1;US;*\n4;Non-US;*\n"
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def engine_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make the fake engine importable as ``fake_engine``."""
    monkeypatch.syspath_prepend(str(_tests_dir))


@pytest.fixture
def data_files(temp_dir: Path) -> Path:
    """Temporary directory holding data/ and hierarchies/."""
    write_hierarchy_files(temp_dir)
    return temp_dir


@pytest.fixture
def bench_project(data_files: Path) -> Generator[Path, None, None]:
    """Create a small riskbench project and change into it."""
    (data_files / "riskbench.yaml").write_text(textwrap.dedent(PROJECT_CONFIG))

    os.chdir(data_files)

    yield data_files

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def bench_config(bench_project: Path):
    """Loaded configuration of the bench project."""
    from riskbench.config import load_config

    return load_config(bench_project / "riskbench.yaml")
