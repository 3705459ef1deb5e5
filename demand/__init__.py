"""
demand package marker.
"""

from demand.builder import AggregationBuilder, build_snapshot
from demand.categories import VALID_CATEGORIES, CategoryClassifier, CategoryRule
from demand.city_index import CityIndexBuilder, build_city_index
from demand.document import read_snapshot, snapshot_from_document, snapshot_to_document, write_snapshot
from demand.errors import (
    CityNotFoundError,
    DemandError,
    DemandQueryError,
    MissingQueryParameterError,
    RowRejection,
    SnapshotDocumentError,
    SnapshotUnavailableError,
)
from demand.models import (
    CanonicalRecord,
    CategoryDemand,
    CityIndex,
    CityProjection,
    Crop,
    HierarchySnapshot,
    RegionFact,
    StateDemand,
)
from demand.normalizer import RecordNormalizer
from demand.projection import CityProjector

__all__ = [
    "AggregationBuilder",
    "build_city_index",
    "build_snapshot",
    "CanonicalRecord",
    "CategoryClassifier",
    "CategoryDemand",
    "CategoryRule",
    "CityIndex",
    "CityIndexBuilder",
    "CityNotFoundError",
    "CityProjection",
    "CityProjector",
    "Crop",
    "DemandError",
    "DemandQueryError",
    "HierarchySnapshot",
    "MissingQueryParameterError",
    "read_snapshot",
    "RecordNormalizer",
    "RegionFact",
    "RowRejection",
    "snapshot_from_document",
    "snapshot_to_document",
    "SnapshotDocumentError",
    "SnapshotUnavailableError",
    "StateDemand",
    "VALID_CATEGORIES",
    "write_snapshot",
]
