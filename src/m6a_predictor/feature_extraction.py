"""
Feature encoding for m6A site prediction.

Turns a table of site annotations into the FeatureTable the classifier was
trained on:

1. DNA 5-mer -> one categorical column per position (nt_pos1..nt_posN)
2. RNA_type / RNA_region -> categoricals with fixed level order
3. Assembly in schema column order, one row per input row

The FeatureTable keeps categoricals as pandas categories. `to_model_matrix`
expands it into the all-numeric matrix scikit-learn estimators expect.
"""

import warnings
from enum import Enum
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .exceptions import CategoricalDomainError, EncodingError, SchemaError
from .schema import (
    FEATURE_SCHEMA,
    NUCLEOTIDE_LEVELS,
    FeatureSchema,
    UnknownCategoryPolicy,
    position_column,
)

MODEL_MATRIX_ENCODINGS = ('onehot', 'codes')


# =================================================================
# 1. DNA SEQUENCE ENCODING
# =================================================================

def dna_encoding(sequences: Union[Sequence[str], pd.Series],
                 levels: Sequence[str] = NUCLEOTIDE_LEVELS) -> pd.DataFrame:
    """
    Encode equal-length DNA strings into one categorical column per position.

    Args:
        sequences: DNA strings of identical length (e.g. 5-mers)
        levels: Allowed nucleotides, in category order

    Returns:
        DataFrame with columns nt_pos1..nt_posN, each categorical with
        categories `levels`. Keeps the index of a Series input.

    Raises:
        EncodingError: empty batch, missing/non-string entries, unequal
            lengths, or characters outside `levels`

    Example:
        >>> dna_encoding(["ATCGA", "TGGCA"]).iloc[1].tolist()
        ['T', 'G', 'G', 'C', 'A']
    """
    index = sequences.index if isinstance(sequences, pd.Series) else None
    seqs = list(sequences)

    if len(seqs) == 0:
        raise EncodingError("No DNA sequences to encode")

    not_str = [i for i, s in enumerate(seqs) if not isinstance(s, str)]
    if not_str:
        raise EncodingError("DNA sequences must be non-missing strings", rows=not_str)

    # Length is taken from the first sequence; every other one must match it
    n = len(seqs[0])
    if n == 0:
        raise EncodingError("DNA sequences must be non-empty", rows=[0])

    mismatched = [i for i, s in enumerate(seqs) if len(s) != n]
    if mismatched:
        raise EncodingError(
            f"All DNA sequences in a batch must have length {n} "
            f"(length of the first sequence)",
            rows=mismatched,
        )

    allowed = set(levels)
    invalid = [i for i, s in enumerate(seqs) if not set(s) <= allowed]
    if invalid:
        chars = sorted({c for i in invalid for c in seqs[i] if c not in allowed})
        raise EncodingError(
            f"DNA sequences contain characters {chars} outside {list(levels)}",
            rows=invalid,
        )

    matrix = np.array([list(s) for s in seqs], dtype=object)
    columns = [position_column(i) for i in range(1, n + 1)]
    encoded = pd.DataFrame(matrix, columns=columns, index=index)

    return encoded.astype(pd.CategoricalDtype(categories=list(levels)))


class DNAEncoder:
    """Positional categorical encoder for fixed-length DNA sequences."""

    def __init__(self, expected_length: Optional[int] = None,
                 levels: Sequence[str] = NUCLEOTIDE_LEVELS):
        """
        Args:
            expected_length: Required sequence length; None accepts any
                length that is uniform within the batch
            levels: Allowed nucleotides, in category order
        """
        if expected_length is not None and expected_length < 1:
            raise ValueError(f"expected_length must be positive, got {expected_length}")
        self.expected_length = expected_length
        self.levels = tuple(levels)

    def encode(self, sequences: Union[Sequence[str], pd.Series]) -> pd.DataFrame:
        encoded = dna_encoding(sequences, self.levels)

        if self.expected_length is not None and encoded.shape[1] != self.expected_length:
            raise EncodingError(
                f"DNA sequences have length {encoded.shape[1]}, "
                f"expected {self.expected_length}",
                rows=range(len(encoded)),
            )
        return encoded


# =================================================================
# 2. CATEGORICAL NORMALIZATION
# =================================================================

def _plain_value(value):
    # str-mixin enums hash by member name, so compare on their value
    return value.value if isinstance(value, Enum) else value


def normalize_categorical(values: pd.Series, levels: Sequence[str],
                          column: Optional[str] = None,
                          policy: Union[UnknownCategoryPolicy, str] = UnknownCategoryPolicy.ERROR
                          ) -> pd.Series:
    """
    Coerce a column to a categorical with a fixed, ordered level set.

    Args:
        values: Raw column values (strings or enum members)
        levels: Declared levels, in training-time order
        column: Column name used in messages (defaults to the Series name)
        policy: What to do with values outside `levels`

    Returns:
        Categorical Series with categories exactly `levels`

    Raises:
        CategoricalDomainError: out-of-domain values under the ERROR policy
    """
    policy = UnknownCategoryPolicy(policy)
    column = column if column is not None else values.name
    plain = values.map(_plain_value)

    unknown = ~plain.isin(levels)
    if unknown.any():
        rows = np.flatnonzero(unknown.to_numpy()).tolist()
        bad = sorted({str(v) for v in plain[unknown]})

        if policy is UnknownCategoryPolicy.ERROR:
            raise CategoricalDomainError(
                f"Column '{column}' has values {bad} outside levels {list(levels)}",
                column=column, rows=rows, values=bad,
            )

        warnings.warn(
            f"Column '{column}': {len(rows)} value(s) {bad} outside levels "
            f"{list(levels)} stored as missing",
            stacklevel=2,
        )
        plain = plain.where(~unknown)

    return pd.Series(
        pd.Categorical(plain, categories=list(levels)),
        index=values.index,
        name=column,
    )


# =================================================================
# 3. FEATURE TABLE ASSEMBLY
# =================================================================

def validate_input_columns(feature_df: pd.DataFrame,
                           schema: FeatureSchema = FEATURE_SCHEMA) -> None:
    """
    Fail fast unless every required input column is present.

    Raises:
        SchemaError: empty input, missing or duplicated columns
    """
    missing = [col for col in schema.required_columns if col not in feature_df.columns]
    if missing:
        raise SchemaError(
            f"Input is missing required columns {missing}; "
            f"expected {schema.required_columns}",
            column=missing[0],
        )

    duplicated = [col for col in schema.required_columns
                  if (feature_df.columns == col).sum() > 1]
    if duplicated:
        raise SchemaError(f"Input has duplicated required columns {duplicated}",
                          column=duplicated[0])

    if len(feature_df) == 0:
        raise SchemaError("Input has no rows to predict")


def _coerce_numeric(values: pd.Series, column: str) -> pd.Series:
    coerced = pd.to_numeric(values, errors='coerce')
    bad = coerced.isna() & values.notna()
    if bad.any():
        raise SchemaError(
            f"Column '{column}' must be numeric",
            column=column,
            rows=np.flatnonzero(bad.to_numpy()).tolist(),
        )
    return coerced


def build_feature_table(feature_df: pd.DataFrame,
                        schema: FeatureSchema = FEATURE_SCHEMA,
                        policy: Union[UnknownCategoryPolicy, str] = UnknownCategoryPolicy.ERROR
                        ) -> pd.DataFrame:
    """
    Assemble the classifier input table from raw site annotations.

    Args:
        feature_df: Input with at least the schema's required columns;
            extra columns are ignored
        schema: Feature schema the classifier was trained against
        policy: Handling of RNA_type / RNA_region values outside their levels

    Returns:
        FeatureTable with `schema.feature_columns`, one row per input row,
        in input order (RangeIndex)
    """
    validate_input_columns(feature_df, schema)
    work = feature_df.reset_index(drop=True)

    levels = schema.categorical_levels
    annotations = {}
    for col in schema.annotation_columns:
        if col in levels:
            annotations[col] = normalize_categorical(work[col], levels[col],
                                                     column=col, policy=policy)
        elif col in schema.numeric_columns:
            annotations[col] = _coerce_numeric(work[col], col)
        else:
            annotations[col] = work[col]

    encoder = DNAEncoder(schema.sequence_length, schema.nucleotide_levels)
    positions = encoder.encode(work[schema.sequence_column])

    table = pd.concat([pd.DataFrame(annotations), positions], axis=1)
    table = table[schema.feature_columns]
    schema.validate_table(table)
    return table


# =================================================================
# 4. MODEL MATRIX
# =================================================================

def model_matrix_columns(schema: FeatureSchema = FEATURE_SCHEMA,
                         encoding: str = 'onehot') -> List[str]:
    """Column names `to_model_matrix` produces for a schema."""
    if encoding not in MODEL_MATRIX_ENCODINGS:
        raise ValueError(f"Unknown encoding '{encoding}'; use one of {MODEL_MATRIX_ENCODINGS}")

    levels = schema.categorical_levels
    columns = []
    for col in schema.feature_columns:
        if encoding == 'onehot' and col in levels:
            columns.extend(f'{col}_{level}' for level in levels[col])
        else:
            columns.append(col)
    return columns


def to_model_matrix(table: pd.DataFrame,
                    schema: FeatureSchema = FEATURE_SCHEMA,
                    encoding: str = 'onehot') -> pd.DataFrame:
    """
    Expand a FeatureTable into an all-float matrix.

    'onehot' gives one indicator column per categorical level in schema order
    (a missing category is all zeros); 'codes' replaces each categorical with
    its level index (missing -> -1).
    """
    columns = model_matrix_columns(schema, encoding)
    schema.validate_table(table)

    parts: List[pd.DataFrame] = []
    for col in schema.feature_columns:
        if col not in schema.categorical_levels:
            parts.append(table[[col]].astype(float))
        elif encoding == 'onehot':
            parts.append(pd.get_dummies(table[col], prefix=col, prefix_sep='_', dtype=float))
        else:
            parts.append(table[col].cat.codes.astype(float).to_frame(col))

    matrix = pd.concat(parts, axis=1)
    # get_dummies follows category order; pin the layout regardless
    return matrix[columns]

