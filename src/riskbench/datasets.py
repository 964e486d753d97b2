# Copyright (c) Syntropy Systems
"""Dataset resolution: raw data plus hierarchies for the active QIs."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from riskbench.hierarchy import Hierarchy, HierarchyResolver
from riskbench.models.setup import Datafile, DatasetConfig, datafile_info
from riskbench.table import Table, load_table

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class LoadedDataset:
    """A loaded datafile with a hierarchy attached to each active QI."""

    config: DatasetConfig
    table: Table
    hierarchies: dict[str, Hierarchy] = field(default_factory=dict)

    @property
    def datafile(self) -> Datafile:
        return self.config.datafile

    @property
    def active_qis(self) -> tuple[str, ...]:
        return self.config.active_qis()

    def column(self, name: str) -> list[str]:
        return self.table.column(name)

    def distinct_values(self, name: str) -> tuple[str, ...]:
        return self.table.distinct_values(name)

    def hierarchy(self, attribute: str) -> Hierarchy:
        """Hierarchy attached to a QI."""
        return self.hierarchies[attribute]


class DatasetCatalog:
    """Resolves dataset configurations into loaded datasets.

    Data files live at ``<data_dir>/<stem>.csv``, hierarchies below
    ``hierarchy_dir``.
    """

    data_dir: Path
    hierarchy_dir: Path
    resolver: HierarchyResolver

    def __init__(self, data_dir: Path, hierarchy_dir: Path) -> None:
        self.data_dir = data_dir
        self.hierarchy_dir = hierarchy_dir
        self.resolver = HierarchyResolver(data_dir, hierarchy_dir)

    def data_path(self, datafile: Datafile) -> Path:
        return self.data_dir / f"{datafile_info(datafile).stem}.csv"

    def resolve(self, config: DatasetConfig) -> LoadedDataset:
        """Load the datafile and attach hierarchies to the active QIs."""
        table = load_table(self.data_path(config.datafile))
        dataset = LoadedDataset(config=config, table=table)
        for qi in config.active_qis():
            # Fail on a missing column before touching hierarchy files
            _ = table.column_index(qi)
            dataset.hierarchies[qi] = self.resolver.resolve(config.datafile, qi)
        logger.debug(
            "Resolved %s with %d QIs", config.display_name, len(dataset.hierarchies)
        )
        return dataset

    def missing_files(self, config: DatasetConfig) -> list[Path]:
        """Data and hierarchy files a dataset needs that don't exist."""
        paths = [self.data_path(config.datafile)]
        paths.extend(
            self.resolver.hierarchy_path(config.datafile, qi)
            for qi in config.active_qis()
        )
        return [path for path in paths if not path.exists()]
