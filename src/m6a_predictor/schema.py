"""
Feature schema shared by table assembly and the classifier conformance check.

The m6A classifier was trained on a table with a fixed column order and fixed
categorical level order. Both are declared once here, in a versioned
`FeatureSchema`, and every other module reads them from it.

Column order (version "1"):
    gc_content, RNA_type, RNA_region, exon_length, distance_to_junction,
    evolutionary_conservation, nt_pos1 ... nt_pos5
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, List, Tuple

import pandas as pd
from pandas.api.types import is_numeric_dtype

from .exceptions import SchemaError


# =================================================================
# CLOSED CATEGORY SETS
# =================================================================

class RNAType(str, Enum):
    """Transcript biotype. Declaration order is the training-time level order."""
    MRNA = 'mRNA'
    LINCRNA = 'lincRNA'
    LNCRNA = 'lncRNA'
    PSEUDOGENE = 'pseudogene'


class RNARegion(str, Enum):
    """Transcript region of the site. Declaration order is the level order."""
    CDS = 'CDS'
    INTRON = 'intron'
    UTR3 = "3'UTR"
    UTR5 = "5'UTR"


class Nucleotide(str, Enum):
    A = 'A'
    T = 'T'
    C = 'C'
    G = 'G'


class M6AStatus(str, Enum):
    """Thresholded label attached to each prediction."""
    POSITIVE = 'Positive'
    NEGATIVE = 'Negative'


class UnknownCategoryPolicy(str, Enum):
    """
    What to do with a categorical value outside its declared level set.

    ERROR: raise CategoricalDomainError (default).
    MISSING: keep the row, store the value as a missing category and warn.
    """
    ERROR = 'error'
    MISSING = 'missing'


RNA_TYPE_LEVELS: Tuple[str, ...] = tuple(t.value for t in RNAType)
RNA_REGION_LEVELS: Tuple[str, ...] = tuple(r.value for r in RNARegion)
NUCLEOTIDE_LEVELS: Tuple[str, ...] = tuple(n.value for n in Nucleotide)

POSITION_PREFIX = 'nt_pos'
PROB_COLUMN = 'predicted_m6A_prob'
STATUS_COLUMN = 'predicted_m6A_status'


def position_column(position: int) -> str:
    """Column name for a 1-based sequence position, e.g. 'nt_pos3'."""
    return f'{POSITION_PREFIX}{position}'


# =================================================================
# FEATURE SCHEMA
# =================================================================

@dataclass(frozen=True)
class FeatureSchema:
    """Names, order and categorical levels of the classifier's input table."""
    version: str = '1'
    annotation_columns: Tuple[str, ...] = (
        'gc_content', 'RNA_type', 'RNA_region', 'exon_length',
        'distance_to_junction', 'evolutionary_conservation',
    )
    numeric_columns: Tuple[str, ...] = (
        'gc_content', 'exon_length', 'distance_to_junction',
        'evolutionary_conservation',
    )
    rna_type_levels: Tuple[str, ...] = RNA_TYPE_LEVELS
    rna_region_levels: Tuple[str, ...] = RNA_REGION_LEVELS
    sequence_column: str = 'DNA_5mer'
    sequence_length: int = 5
    nucleotide_levels: Tuple[str, ...] = NUCLEOTIDE_LEVELS

    @property
    def required_columns(self) -> List[str]:
        """Input columns a caller must supply."""
        return list(self.annotation_columns) + [self.sequence_column]

    @property
    def position_columns(self) -> List[str]:
        return [position_column(i) for i in range(1, self.sequence_length + 1)]

    @property
    def feature_columns(self) -> List[str]:
        """Full FeatureTable column order."""
        return list(self.annotation_columns) + self.position_columns

    @property
    def categorical_levels(self) -> Dict[str, Tuple[str, ...]]:
        """Level order for every categorical FeatureTable column."""
        levels = {
            'RNA_type': self.rna_type_levels,
            'RNA_region': self.rna_region_levels,
        }
        for col in self.position_columns:
            levels[col] = self.nucleotide_levels
        return levels

    def validate_table(self, table: pd.DataFrame) -> None:
        """
        Check an assembled FeatureTable against this schema.

        Raises:
            SchemaError: on extra, missing or reordered columns, a categorical
                column whose levels differ from the declared ones, or a
                non-numeric numeric column.
        """
        expected = self.feature_columns
        actual = list(table.columns)
        if actual != expected:
            raise SchemaError(
                f"Feature table columns {actual} do not match schema "
                f"v{self.version} columns {expected}"
            )

        for col, levels in self.categorical_levels.items():
            dtype = table[col].dtype
            if not isinstance(dtype, pd.CategoricalDtype):
                raise SchemaError(f"Column '{col}' must be categorical, got {dtype}",
                                  column=col)
            if tuple(dtype.categories) != tuple(levels):
                raise SchemaError(
                    f"Column '{col}' levels {list(dtype.categories)} do not match "
                    f"schema levels {list(levels)}",
                    column=col,
                )

        for col in self.numeric_columns:
            if not is_numeric_dtype(table[col]):
                raise SchemaError(f"Column '{col}' must be numeric, got {table[col].dtype}",
                                  column=col)


FEATURE_SCHEMA = FeatureSchema()


# =================================================================
# RECORDS
# =================================================================

@dataclass(frozen=True)
class FeatureRecord:
    """One observation to be scored."""
    gc_content: float
    RNA_type: str
    RNA_region: str
    exon_length: float
    distance_to_junction: float
    evolutionary_conservation: float
    DNA_5mer: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class PredictionResult:
    """Probability of the Positive class and its thresholded label."""
    predicted_m6A_prob: float
    predicted_m6A_status: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)
