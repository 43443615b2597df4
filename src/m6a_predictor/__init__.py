"""
m6a_predictor
=============

Inference-time feature pipeline for an m6A (N6-methyladenosine) site
classifier: positional encoding of DNA 5-mers, fixed-level categorical
annotations, schema-ordered feature assembly and thresholded labeling.

``schema``
    Versioned feature schema, closed category enums, record types.

``feature_extraction``
    DNA encoding, categorical normalization, FeatureTable assembly.

``classifier``
    Classifier contract and the scikit-learn estimator adapter.

``prediction``
    ``predict_batch`` / ``predict_one``.
"""

from .classifier import ProbabilisticClassifier, SklearnClassifierAdapter, as_classifier
from .exceptions import (
    CategoricalDomainError,
    ClassifierInvocationError,
    EncodingError,
    M6APredictionError,
    SchemaError,
)
from .feature_extraction import (
    DNAEncoder,
    build_feature_table,
    dna_encoding,
    model_matrix_columns,
    normalize_categorical,
    to_model_matrix,
)
from .prediction import (
    PredictionConfig,
    derive_status,
    predict_batch,
    predict_one,
    prediction_multiple,
    prediction_single,
)
from .schema import (
    FEATURE_SCHEMA,
    FeatureRecord,
    FeatureSchema,
    M6AStatus,
    PredictionResult,
    RNARegion,
    RNAType,
    UnknownCategoryPolicy,
)

__version__ = '0.1.0'
