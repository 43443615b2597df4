"""
Pytest configuration and common fixtures for m6a_predictor tests.
"""
import numpy as np
import pandas as pd
import pytest

from m6a_predictor import to_model_matrix, build_feature_table


class FixedProbabilityClassifier:
    """Returns preset probabilities and remembers the tables it scored."""

    def __init__(self, probabilities):
        self.probabilities = probabilities
        self.calls = []

    def predict_probability(self, features):
        self.calls.append(features)
        if callable(self.probabilities):
            return self.probabilities(features)
        return np.asarray(self.probabilities, dtype=float)


@pytest.fixture
def record_kwargs():
    """Feature values of a single site."""
    return dict(
        gc_content=0.52,
        RNA_type="mRNA",
        RNA_region="CDS",
        exon_length=1200,
        distance_to_junction=35,
        evolutionary_conservation=0.81,
        DNA_5mer="ATCGA",
    )


@pytest.fixture
def feature_df():
    """Small batch covering every RNA_type and RNA_region level."""
    return pd.DataFrame({
        "site_id": ["s1", "s2", "s3", "s4"],
        "gc_content": [0.52, 0.31, 0.47, 0.66],
        "RNA_type": ["mRNA", "lincRNA", "lncRNA", "pseudogene"],
        "RNA_region": ["CDS", "intron", "3'UTR", "5'UTR"],
        "exon_length": [1200, 85, 430, 2210],
        "distance_to_junction": [35, 4, 120, 0],
        "evolutionary_conservation": [0.81, 0.12, 0.45, 0.99],
        "DNA_5mer": ["ATCGA", "TGGCA", "GGACT", "AGACC"],
    })


@pytest.fixture
def fixed_classifier():
    """Factory for FixedProbabilityClassifier."""
    return FixedProbabilityClassifier


@pytest.fixture
def training_df():
    """Synthetic labelled sites; DRACH-like 'GAC' core marks Positive."""
    rng = np.random.default_rng(127)
    n = 80
    nts = np.array(list("ATCG"))
    kmers = ["".join(rng.choice(nts, size=5)) for _ in range(n)]
    # Guarantee both classes
    kmers[:n // 2] = ["GGAC" + k[4] for k in kmers[:n // 2]]
    labels = ["Positive" if k[1:4] == "GAC" else "Negative" for k in kmers]

    return pd.DataFrame({
        "gc_content": rng.uniform(0, 1, n),
        "RNA_type": rng.choice(["mRNA", "lincRNA", "lncRNA", "pseudogene"], n),
        "RNA_region": rng.choice(["CDS", "intron", "3'UTR", "5'UTR"], n),
        "exon_length": rng.integers(50, 5000, n),
        "distance_to_junction": rng.integers(0, 500, n),
        "evolutionary_conservation": rng.uniform(0, 1, n),
        "DNA_5mer": kmers,
        "label": labels,
    })


@pytest.fixture
def training_matrix(training_df):
    """One-hot model matrix and labels for fitting estimators."""
    table = build_feature_table(training_df)
    return to_model_matrix(table), training_df["label"].to_numpy()
