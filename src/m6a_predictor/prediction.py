"""
Batch and single-observation m6A prediction.

Pipeline per call (all-or-nothing, nothing retried):
1. Validate the input columns
2. Encode DNA_5mer and normalize RNA_type / RNA_region
3. Assemble the FeatureTable in schema order
4. Score it with the classifier -> P(Positive)
5. Label: Positive if prob >= threshold else Negative
6. Return the input table with predicted_m6A_prob / predicted_m6A_status
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd

from .classifier import as_classifier
from .exceptions import ClassifierInvocationError, M6APredictionError, SchemaError
from .feature_extraction import build_feature_table
from .schema import (
    FEATURE_SCHEMA,
    PROB_COLUMN,
    STATUS_COLUMN,
    FeatureRecord,
    FeatureSchema,
    M6AStatus,
    PredictionResult,
    UnknownCategoryPolicy,
)

logger = logging.getLogger(__name__)

Records = Union[pd.DataFrame, Iterable[Union[FeatureRecord, Mapping[str, Any]]]]


@dataclass
class PredictionConfig:
    """Per-call prediction settings."""
    positive_threshold: float = 0.5
    unknown_category_policy: UnknownCategoryPolicy = UnknownCategoryPolicy.ERROR
    schema: FeatureSchema = FEATURE_SCHEMA

    def __post_init__(self):
        self.positive_threshold = _check_threshold(self.positive_threshold)
        self.unknown_category_policy = UnknownCategoryPolicy(self.unknown_category_policy)


def _check_threshold(threshold: float) -> float:
    threshold = float(threshold)
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"positive_threshold must be in [0, 1], got {threshold}")
    return threshold


# =================================================================
# LABELING
# =================================================================

def derive_status(probabilities, positive_threshold: float = 0.5) -> np.ndarray:
    """
    Threshold probabilities into Positive / Negative labels.

    The boundary is inclusive: a probability equal to the threshold is Positive.
    """
    threshold = _check_threshold(positive_threshold)
    prob = np.asarray(probabilities, dtype=float)
    return np.where(prob >= threshold,
                    M6AStatus.POSITIVE.value,
                    M6AStatus.NEGATIVE.value).astype(object)


# =================================================================
# CLASSIFIER CALL
# =================================================================

def _invoke_classifier(model: Any, table: pd.DataFrame) -> np.ndarray:
    """Score a FeatureTable and validate the returned probabilities."""
    classifier = as_classifier(model)

    try:
        raw = classifier.predict_probability(table)
    except M6APredictionError:
        raise
    except Exception as e:
        raise ClassifierInvocationError(
            f"Classifier call failed: {type(e).__name__}: {e}"
        ) from e

    # Class-probability tables must carry a Positive column
    if isinstance(raw, pd.DataFrame):
        if M6AStatus.POSITIVE.value not in raw.columns:
            raise ClassifierInvocationError(
                f"Classifier output has no '{M6AStatus.POSITIVE.value}' column; "
                f"columns are {list(raw.columns)}"
            )
        raw = raw[M6AStatus.POSITIVE.value]

    try:
        prob = np.asarray(raw, dtype=float)
    except (TypeError, ValueError) as e:
        raise ClassifierInvocationError(f"Classifier returned non-numeric output: {e}") from e

    if prob.ndim == 2 and prob.shape[1] == 1:
        prob = prob[:, 0]
    if prob.ndim != 1 or len(prob) != len(table):
        raise ClassifierInvocationError(
            f"Classifier returned shape {prob.shape}, expected ({len(table)},)"
        )

    bad = ~np.isfinite(prob) | (prob < 0.0) | (prob > 1.0)
    if bad.any():
        raise ClassifierInvocationError(
            "Classifier returned probabilities that are missing or outside [0, 1]",
            rows=np.flatnonzero(bad).tolist(),
        )
    return prob


# =================================================================
# PUBLIC API
# =================================================================

def _as_frame(records: Records, schema: FeatureSchema) -> pd.DataFrame:
    if isinstance(records, pd.DataFrame):
        return records

    rows = [r.to_dict() if isinstance(r, FeatureRecord) else dict(r) for r in records]
    if not rows:
        raise SchemaError("Input has no rows to predict")

    # A field absent from one record would otherwise become a NaN cell
    incomplete = [i for i, row in enumerate(rows)
                  if any(col not in row for col in schema.required_columns)]
    if incomplete:
        missing = sorted({col for i in incomplete for col in schema.required_columns
                          if col not in rows[i]})
        raise SchemaError(f"Records are missing required fields {missing}",
                          column=missing[0], rows=incomplete)

    return pd.DataFrame.from_records(rows)


def predict_batch(model: Any, records: Records,
                  positive_threshold: Optional[float] = None,
                  config: Optional[PredictionConfig] = None) -> pd.DataFrame:
    """
    Predict m6A status for multiple observations.

    Args:
        model: Trained classifier: an object with predict_probability(), a
            fitted scikit-learn estimator with a 'Positive' class, or a callable
            FeatureTable -> probabilities
        records: DataFrame, or list of FeatureRecord / dicts, with columns
            gc_content, RNA_type, RNA_region, exon_length,
            distance_to_junction, evolutionary_conservation, DNA_5mer
        positive_threshold: Probability at or above which a site is Positive;
            overrides config.positive_threshold (default 0.5)
        config: Threshold, unknown-category policy and feature schema

    Returns:
        Copy of the input with predicted_m6A_prob and predicted_m6A_status
        appended, same rows in the same order

    Raises:
        SchemaError, EncodingError, CategoricalDomainError,
        ClassifierInvocationError
    """
    config = config if config is not None else PredictionConfig()
    threshold = (_check_threshold(positive_threshold) if positive_threshold is not None
                 else config.positive_threshold)

    feature_df = _as_frame(records, config.schema)
    clashes = [c for c in (PROB_COLUMN, STATUS_COLUMN) if c in feature_df.columns]
    if clashes:
        raise SchemaError(f"Input already contains output columns {clashes}", column=clashes[0])

    logger.debug("Scoring %d records (schema v%s, threshold %.3f)",
                 len(feature_df), config.schema.version, threshold)

    table = build_feature_table(feature_df, schema=config.schema,
                                policy=config.unknown_category_policy)
    prob = _invoke_classifier(model, table)
    status = derive_status(prob, threshold)

    result = feature_df.copy()
    result[PROB_COLUMN] = prob
    result[STATUS_COLUMN] = status
    return result


def predict_one(model: Any, gc_content: float, RNA_type: str, RNA_region: str,
                exon_length: float, distance_to_junction: float,
                evolutionary_conservation: float, DNA_5mer: str,
                positive_threshold: Optional[float] = None,
                config: Optional[PredictionConfig] = None) -> PredictionResult:
    """
    Predict m6A status for a single observation.

    Thin wrapper around predict_batch() on a one-row table.

    Example:
        >>> predict_one(rf, 0.52, 'mRNA', 'CDS', 1200, 35, 0.8, 'GGACT')
        PredictionResult(predicted_m6A_prob=0.72, predicted_m6A_status='Positive')
    """
    record = FeatureRecord(
        gc_content=gc_content,
        RNA_type=RNA_type,
        RNA_region=RNA_region,
        exon_length=exon_length,
        distance_to_junction=distance_to_junction,
        evolutionary_conservation=evolutionary_conservation,
        DNA_5mer=DNA_5mer,
    )
    result_df = predict_batch(model, [record], positive_threshold=positive_threshold,
                              config=config)
    row = result_df.iloc[0]
    return PredictionResult(
        predicted_m6A_prob=float(row[PROB_COLUMN]),
        predicted_m6A_status=str(row[STATUS_COLUMN]),
    )


prediction_multiple = predict_batch
prediction_single = predict_one
