# Copyright (c) Syntropy Systems
"""Benchmark parameter models: datafiles, criteria, metrics, algorithms."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, NamedTuple, Union

from pydantic import Field, model_validator
from typing_extensions import Self, TypeAlias

from riskbench.errors import BenchmarkConfigError

from .base import FrozenModel


class Datafile(str, Enum):
    """The benchmark datafiles."""

    ADULT = "ADULT"
    CUP = "CUP"
    FARS = "FARS"
    ATUS = "ATUS"
    IHIS = "IHIS"
    ACS13 = "ACS13"

    @classmethod
    def _missing_(cls, value: object) -> Datafile | None:
        if isinstance(value, str):
            for member in cls:
                if member.value == value.upper():
                    return member
        return None


class HierarchyType(str, Enum):
    """How a QI's generalization hierarchy is obtained."""

    INTERVAL = "interval"
    ORDER = "order"

    @property
    def letter(self) -> str:
        """One-letter discriminator used in hierarchy file names."""
        return "i" if self is HierarchyType.INTERVAL else "o"


# Ordered semantic QIs of the ACS13 datafile. Comments give hierarchy heights.
ACS13_QIS: dict[str, HierarchyType] = {
    "AGEP": HierarchyType.INTERVAL,  # 10
    "CIT": HierarchyType.ORDER,  # 6
    "COW": HierarchyType.ORDER,  # 6
    "DDRS": HierarchyType.ORDER,  # 5
    "DEAR": HierarchyType.ORDER,  # 5
    "DEYE": HierarchyType.ORDER,  # 5
    "DOUT": HierarchyType.ORDER,  # 4
    "DPHY": HierarchyType.ORDER,  # 4
    "DREM": HierarchyType.ORDER,  # 3
    "FER": HierarchyType.ORDER,  # 2
    "GCL": HierarchyType.ORDER,  # 2
    "HINS1": HierarchyType.ORDER,  # 2
    "HINS2": HierarchyType.ORDER,  # 2
    "HINS3": HierarchyType.ORDER,  # 2
    "HINS4": HierarchyType.ORDER,  # 2
    "HINS5": HierarchyType.ORDER,  # 2
    "HINS6": HierarchyType.ORDER,  # 2
    "HINS7": HierarchyType.ORDER,  # 2
    "INTP": HierarchyType.INTERVAL,  # 2
    "MAR": HierarchyType.ORDER,  # 2
    "MARHD": HierarchyType.ORDER,  # 2
    "MARHM": HierarchyType.ORDER,  # 2
    "MARHW": HierarchyType.ORDER,  # 2
    "MIG": HierarchyType.ORDER,  # 2
    "MIL": HierarchyType.ORDER,  # 2
    "PWGTP": HierarchyType.INTERVAL,  # 3
    "RELP": HierarchyType.ORDER,  # 4
    "SCHG": HierarchyType.ORDER,  # 2
    "SCHL": HierarchyType.ORDER,  # 2
    "SEX": HierarchyType.ORDER,  # 2
}


class DatafileInfo(NamedTuple):
    """Static metadata of a datafile."""

    display_name: str
    stem: str
    qis: tuple[str, ...]


_DATAFILES: dict[Datafile, DatafileInfo] = {
    Datafile.ADULT: DatafileInfo(
        "Adult",
        "adult",
        (
            "age",
            "education",
            "marital-status",
            "native-country",
            "race",
            "salary-class",
            "sex",
            "workclass",
            "occupation",
        ),
    ),
    Datafile.CUP: DatafileInfo(
        "Cup",
        "cup",
        ("AGE", "GENDER", "INCOME", "MINRAMNT", "NGIFTALL", "STATE", "ZIP", "RAMNTALL"),
    ),
    Datafile.FARS: DatafileInfo(
        "Fars",
        "fars",
        (
            "iage",
            "ideathday",
            "ideathmon",
            "ihispanic",
            "iinjury",
            "irace",
            "isex",
            "istatenum",
        ),
    ),
    Datafile.ATUS: DatafileInfo(
        "Atus",
        "atus",
        (
            "Age",
            "Birthplace",
            "Citizenship status",
            "Labor force status",
            "Marital status",
            "Race",
            "Region",
            "Sex",
            "Highest level of school completed",
        ),
    ),
    Datafile.IHIS: DatafileInfo(
        "Ihis",
        "ihis",
        ("AGE", "MARSTAT", "PERNUM", "QUARTER", "RACEA", "REGION", "SEX", "YEAR", "EDUC"),
    ),
    Datafile.ACS13: DatafileInfo("ACS13", "ss13acs", tuple(ACS13_QIS)),
}


def datafile_info(datafile: Datafile | str) -> DatafileInfo:
    """Look up display name, filename stem and QI list of a datafile."""
    try:
        return _DATAFILES[Datafile(datafile)]
    except ValueError as e:
        msg = f"Invalid datafile: {datafile}"
        raise BenchmarkConfigError(msg, datafile) from e


def acs13_hierarchy_type(attribute: str) -> HierarchyType:
    """Return the declared hierarchy type of an ACS13 semantic QI."""
    if attribute not in ACS13_QIS:
        msg = f"No such ACS13 semantic QI: {attribute}"
        raise BenchmarkConfigError(msg, attribute)
    return ACS13_QIS[attribute]


class DatasetConfig(FrozenModel):
    """A datafile plus an optional QI-count override."""

    datafile: Datafile
    custom_qi_count: int | None = None

    @model_validator(mode="after")
    def _check_qi_count(self) -> Self:
        if self.custom_qi_count is None:
            return self
        available = len(datafile_info(self.datafile).qis)
        if not 1 <= self.custom_qi_count <= available:
            msg = (
                f"custom_qi_count must be between 1 and {available} "
                f"for {self.datafile.value}, got {self.custom_qi_count}"
            )
            raise BenchmarkConfigError(msg, self.custom_qi_count)
        return self

    @property
    def display_name(self) -> str:
        return datafile_info(self.datafile).display_name

    def active_qis(self) -> tuple[str, ...]:
        """Prefix of the datafile's QI list used by this dataset."""
        qis = datafile_info(self.datafile).qis
        if self.custom_qi_count is None:
            return qis
        return qis[: self.custom_qi_count]


class KAnonymity(FrozenModel):
    """k-anonymity criterion."""

    kind: Literal["k_anonymity"] = "k_anonymity"
    k: int = Field(gt=0)

    @property
    def label(self) -> str:
        return f"({self.k})-Anonymity"


class PopulationUniqueness(FrozenModel):
    """Population uniqueness criterion against a population region."""

    kind: Literal["population_uniqueness"] = "population_uniqueness"
    threshold: float = Field(gt=0.0, le=1.0)
    region: str = "USA"

    @property
    def label(self) -> str:
        return f"({self.threshold:g})-Uniqueness"


PrivacyCriterion: TypeAlias = Annotated[
    Union[KAnonymity, PopulationUniqueness],
    Field(discriminator="kind"),
]


class AverageEquivalenceClassSize(FrozenModel):
    """Average equivalence class size metric."""

    kind: Literal["aecs"] = "aecs"

    @property
    def label(self) -> str:
        return "AECS"


AECS = AverageEquivalenceClassSize


class Loss(FrozenModel):
    """Loss metric with an aggregate function."""

    kind: Literal["loss"] = "loss"
    aggregate_function: Literal[
        "geometric_mean", "arithmetic_mean", "sum", "maximum", "rank"
    ] = "geometric_mean"

    @property
    def label(self) -> str:
        return "Loss"


UtilityMetric: TypeAlias = Annotated[
    Union[AverageEquivalenceClassSize, Loss],
    Field(discriminator="kind"),
]


class Flash(FrozenModel):
    """Exhaustive search."""

    kind: Literal["flash"] = "flash"

    @property
    def label(self) -> str:
        return "Flash"

    @property
    def time_limit_ms(self) -> int | None:
        return None


class Heurakles(FrozenModel):
    """Heuristic search, optionally bounded by a time limit."""

    kind: Literal["heurakles"] = "heurakles"
    time_limit_ms: int | None = Field(default=None, gt=0)

    @property
    def label(self) -> str:
        return "Heurakles"


Algorithm: TypeAlias = Annotated[
    Union[Flash, Heurakles],
    Field(discriminator="kind"),
]

# Key columns of a recorded benchmark row, in persisted order.
KEY_FIELDS: tuple[str, ...] = (
    "Criterion",
    "Dataset",
    "CustomQIs",
    "Metric",
    "Suppression",
    "Algorithm",
)


class ExperimentPoint(FrozenModel):
    """The full parameter tuple of one benchmark run."""

    criterion: PrivacyCriterion
    dataset: DatasetConfig
    metric: UtilityMetric
    suppression: float = Field(ge=0.0, le=1.0)
    algorithm: Algorithm

    @property
    def custom_qi_count(self) -> int | None:
        return self.dataset.custom_qi_count

    def key(self) -> tuple[str, str, int | None, str, float, str]:
        """Ordered identity tuple, matching KEY_FIELDS."""
        return (
            self.criterion.label,
            self.dataset.display_name,
            self.custom_qi_count,
            self.metric.label,
            self.suppression,
            self.algorithm.label,
        )

    def describe(self) -> str:
        """One-line human readable form used in progress output."""
        return (
            f"{self.algorithm.label} / {self.criterion.label} / "
            f"{self.dataset.display_name} / {self.custom_qi_count} / "
            f"{self.metric.label} / {self.suppression}"
        )
