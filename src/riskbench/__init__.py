"""
riskbench - Flash vs. Heurakles anonymization benchmarks.

Sweep privacy criteria, metrics and datasets, record the means.
"""

from riskbench.errors import BenchmarkConfigError
from riskbench.runner import ExperimentRunner

__version__ = "0.1.0"
__all__ = ["BenchmarkConfigError", "ExperimentRunner", "__version__"]
