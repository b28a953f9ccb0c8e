from __future__ import annotations

"""Training schema of the pretrained classifier.

The classifier was trained on nominal attributes, so every feature value has to
be translated into its index in the attribute's domain, using the exact value
order of the training data. The schema is read from the ARFF header the model
was trained on; the rows themselves are discarded.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from scipy.io import arff

from .errors import SchemaError

logger = logging.getLogger(__name__)

NOMINAL = "nominal"
NUMERIC = "numeric"


@dataclass(frozen=True)
class SchemaColumn:
    name: str
    kind: str
    domain: Tuple[str, ...] = ()

    def index_of(self, value: str) -> int:
        """Position of `value` in the domain, or -1 if the training data never saw it."""
        try:
            return self.domain.index(value)
        except ValueError:
            return -1


@dataclass(frozen=True)
class TrainingSchema:
    """Ordered attribute columns; the last column is the binary class label."""

    columns: Tuple[SchemaColumn, ...]
    relation: str = ""

    def __post_init__(self) -> None:
        if not self.columns:
            raise SchemaError("Schema has no attributes")
        label = self.columns[-1]
        if label.kind != NOMINAL or len(label.domain) != 2:
            raise SchemaError(
                f"Class attribute {label.name!r} must be nominal with two values, "
                f"got {label.kind} {list(label.domain)}"
            )

    @property
    def class_index(self) -> int:
        return len(self.columns) - 1

    @property
    def num_attributes(self) -> int:
        return len(self.columns)

    def column(self, index: int) -> SchemaColumn:
        return self.columns[index]

    def index_of(self, column: int, value: str) -> int:
        return self.columns[column].index_of(value)

    @classmethod
    def from_arff(cls, source) -> "TrainingSchema":
        """Build a schema from an ARFF file path or open text stream."""
        try:
            _, meta = arff.loadarff(source)
        except (arff.ArffError, NotImplementedError, ValueError) as e:
            raise SchemaError(f"Could not parse ARFF schema: {e}") from e
        columns = []
        for name in meta.names():
            type_name, domain = meta[name]
            if type_name == NOMINAL:
                columns.append(SchemaColumn(name, NOMINAL, tuple(str(v) for v in domain)))
            else:
                columns.append(SchemaColumn(name, NUMERIC))
        return cls(tuple(columns), relation=meta.name or "")


def load_schema(path: str | Path, encoding: Optional[str] = "utf-8") -> TrainingSchema:
    """Load the training schema from an ARFF file, keeping only the attribute domains."""
    logger.debug("Loading ARFF header from %s", path)
    try:
        with open(path, "r", encoding=encoding) as fh:
            schema = TrainingSchema.from_arff(fh)
    except OSError as e:
        raise SchemaError(f"Could not read schema file {path}: {e}") from e
    logger.debug("Schema %r loaded with %d attributes", schema.relation, schema.num_attributes)
    return schema
