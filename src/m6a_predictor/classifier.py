"""
Classifier contract for the prediction pipeline.

The pipeline only needs `predict_probability(features) -> P(Positive)` over a
FeatureTable. Trained scikit-learn style estimators (anything with
`predict_proba` and `classes_`) are wrapped in `SklearnClassifierAdapter`,
which expands the categorical table into the numeric matrix the estimator
was fitted on and picks out the Positive-class column.
"""

from typing import Any, Callable, List, Protocol, Sequence

import numpy as np
import pandas as pd

from .exceptions import ClassifierInvocationError, SchemaError
from .feature_extraction import MODEL_MATRIX_ENCODINGS, model_matrix_columns, to_model_matrix
from .schema import FEATURE_SCHEMA, FeatureSchema, M6AStatus


class ProbabilisticClassifier(Protocol):
    """Anything that scores a FeatureTable with P(Positive) per row."""

    def predict_probability(self, features: pd.DataFrame) -> Sequence[float]:
        ...


class SklearnClassifierAdapter:
    """Expose a fitted scikit-learn style estimator as a ProbabilisticClassifier."""

    def __init__(self, estimator: Any, positive_label: Any = M6AStatus.POSITIVE.value,
                 encoding: str = 'onehot', schema: FeatureSchema = FEATURE_SCHEMA):
        """
        Args:
            estimator: Fitted estimator with predict_proba() and classes_
            positive_label: Class label whose probability is returned
            encoding: Model matrix layout the estimator was fitted on,
                'onehot' or 'codes'
            schema: Feature schema of the incoming FeatureTable
        """
        if encoding not in MODEL_MATRIX_ENCODINGS:
            raise ValueError(f"Unknown encoding '{encoding}'; use one of {MODEL_MATRIX_ENCODINGS}")
        if not hasattr(estimator, 'predict_proba'):
            raise TypeError(f"{type(estimator).__name__} has no predict_proba()")

        self.estimator = estimator
        self.positive_label = positive_label
        self.encoding = encoding
        self.schema = schema

    @property
    def expected_columns(self) -> List[str]:
        return model_matrix_columns(self.schema, self.encoding)

    def check_conformance(self) -> None:
        """
        Compare the estimator's fitted inputs with the schema's model matrix.

        Raises:
            SchemaError: feature names or feature count differ
        """
        expected = self.expected_columns

        fitted_names = getattr(self.estimator, 'feature_names_in_', None)
        if fitted_names is not None and list(fitted_names) != expected:
            raise SchemaError(
                f"Classifier was fitted on columns {list(fitted_names)}, "
                f"schema v{self.schema.version} produces {expected}"
            )

        n_fitted = getattr(self.estimator, 'n_features_in_', None)
        if n_fitted is not None and n_fitted != len(expected):
            raise SchemaError(
                f"Classifier expects {n_fitted} features, "
                f"schema v{self.schema.version} produces {len(expected)}"
            )

    def positive_index(self) -> int:
        classes = list(getattr(self.estimator, 'classes_', []))
        if self.positive_label not in classes:
            raise ClassifierInvocationError(
                f"Classifier has no '{self.positive_label}' class; classes are {classes}"
            )
        return classes.index(self.positive_label)

    def predict_probability(self, features: pd.DataFrame) -> np.ndarray:
        self.check_conformance()
        idx = self.positive_index()

        matrix = to_model_matrix(features, self.schema, self.encoding)
        # Estimators fitted without feature names warn on a DataFrame
        X = matrix if hasattr(self.estimator, 'feature_names_in_') else matrix.to_numpy()

        proba = np.asarray(self.estimator.predict_proba(X))
        return proba[:, idx]


class _CallableClassifier:
    """Plain function `features -> probabilities` as a classifier."""

    def __init__(self, func: Callable[[pd.DataFrame], Sequence[float]]):
        self.func = func

    def predict_probability(self, features: pd.DataFrame) -> Sequence[float]:
        return self.func(features)


def as_classifier(model: Any) -> ProbabilisticClassifier:
    """
    Normalize a model object to the ProbabilisticClassifier contract.

    Accepts objects with predict_probability(), scikit-learn style estimators
    (wrapped with default adapter settings) and plain callables.
    """
    if hasattr(model, 'predict_probability'):
        return model
    if hasattr(model, 'predict_proba'):
        return SklearnClassifierAdapter(model)
    if callable(model):
        return _CallableClassifier(model)
    raise TypeError(
        f"{type(model).__name__} is not a classifier: expected predict_probability(), "
        f"predict_proba() or a callable"
    )
