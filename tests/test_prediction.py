"""
Tests for batch and single-observation prediction.
"""

import numpy as np
import pandas as pd
import pytest

from m6a_predictor import (
    CategoricalDomainError,
    ClassifierInvocationError,
    EncodingError,
    FeatureRecord,
    PredictionConfig,
    PredictionResult,
    SchemaError,
    derive_status,
    predict_batch,
    predict_one,
    prediction_multiple,
    prediction_single,
)


# =================================================================
# Labeling
# =================================================================

def test_derive_status_inclusive_boundary():
    threshold = 0.6
    below = np.nextafter(threshold, 0.0)

    status = derive_status([threshold, below, 1.0, 0.0], threshold)
    assert status.tolist() == ["Positive", "Negative", "Positive", "Negative"]


def test_derive_status_deterministic():
    prob = np.linspace(0, 1, 11)
    assert derive_status(prob, 0.5).tolist() == derive_status(prob, 0.5).tolist()


@pytest.mark.parametrize("threshold", [-0.1, 1.5, float("nan")])
def test_invalid_threshold(threshold, feature_df, fixed_classifier):
    with pytest.raises(ValueError):
        derive_status([0.5], threshold)
    with pytest.raises(ValueError):
        predict_batch(fixed_classifier([0.5] * 4), feature_df, positive_threshold=threshold)
    with pytest.raises(ValueError):
        PredictionConfig(positive_threshold=threshold)


# =================================================================
# predict_batch
# =================================================================

def test_single_record_positive(record_kwargs, fixed_classifier):
    """Probability 0.72 at threshold 0.6 is Positive"""
    out = predict_batch(fixed_classifier([0.72]), [record_kwargs], positive_threshold=0.6)

    assert out["predicted_m6A_prob"].tolist() == [0.72]
    assert out["predicted_m6A_status"].tolist() == ["Positive"]


def test_single_record_negative(record_kwargs, fixed_classifier):
    """Probability 0.72 at threshold 0.8 is Negative"""
    out = predict_batch(fixed_classifier([0.72]), [record_kwargs], positive_threshold=0.8)
    assert out["predicted_m6A_status"].tolist() == ["Negative"]


def test_batch_preserves_rows_and_columns(feature_df, fixed_classifier):
    original = feature_df.copy()
    model = fixed_classifier([0.1, 0.5, 0.9, 0.49])

    out = predict_batch(model, feature_df)

    assert len(out) == len(feature_df)
    assert list(out.columns) == list(feature_df.columns) + [
        "predicted_m6A_prob", "predicted_m6A_status",
    ]
    pd.testing.assert_frame_equal(out[feature_df.columns], original)
    assert out["predicted_m6A_status"].tolist() == ["Negative", "Positive", "Positive", "Negative"]
    # Caller's table is left alone
    pd.testing.assert_frame_equal(feature_df, original)


def test_batch_keeps_input_index(feature_df, fixed_classifier):
    feature_df.index = ["a", "b", "c", "d"]
    out = predict_batch(fixed_classifier([0.1, 0.2, 0.3, 0.4]), feature_df)

    assert out.index.tolist() == ["a", "b", "c", "d"]
    assert out.loc["c", "predicted_m6A_prob"] == 0.3


def test_classifier_receives_schema_table(feature_df, fixed_classifier):
    model = fixed_classifier([0.5] * 4)
    predict_batch(model, feature_df)

    (table,) = model.calls
    assert table.columns[0] == "gc_content"
    assert table.columns[-1] == "nt_pos5"
    assert table["nt_pos3"].astype(str).tolist() == ["C", "G", "A", "A"]


def test_records_as_feature_records(record_kwargs, fixed_classifier):
    records = [FeatureRecord(**record_kwargs), FeatureRecord(**record_kwargs)]
    out = predict_batch(fixed_classifier([0.3, 0.8]), records)
    assert out["predicted_m6A_status"].tolist() == ["Negative", "Positive"]


def test_config_threshold_and_override(feature_df, fixed_classifier):
    model = fixed_classifier([0.65] * 4)
    config = PredictionConfig(positive_threshold=0.7)

    assert set(predict_batch(model, feature_df, config=config)["predicted_m6A_status"]) == {"Negative"}
    out = predict_batch(model, feature_df, positive_threshold=0.6, config=config)
    assert set(out["predicted_m6A_status"]) == {"Positive"}


def test_callable_model(feature_df):
    out = predict_batch(lambda table: table["gc_content"].to_numpy(), feature_df)
    np.testing.assert_allclose(out["predicted_m6A_prob"], feature_df["gc_content"])


def test_probability_table_output(feature_df, fixed_classifier):
    """A class-probability table is reduced to its Positive column"""
    probs = pd.DataFrame({"Negative": [0.8, 0.4, 0.3, 0.9],
                          "Positive": [0.2, 0.6, 0.7, 0.1]})
    out = predict_batch(fixed_classifier(lambda table: probs), feature_df)
    assert out["predicted_m6A_prob"].tolist() == [0.2, 0.6, 0.7, 0.1]


# =================================================================
# Failure modes
# =================================================================

def test_missing_column_fails_before_scoring(feature_df, fixed_classifier):
    model = fixed_classifier([0.5] * 4)

    with pytest.raises(SchemaError, match="exon_length"):
        predict_batch(model, feature_df.drop(columns="exon_length"))
    assert model.calls == []


def test_empty_record_list(fixed_classifier):
    with pytest.raises(SchemaError, match="no rows"):
        predict_batch(fixed_classifier([]), [])


def test_record_missing_field(record_kwargs, fixed_classifier):
    incomplete = dict(record_kwargs)
    del incomplete["exon_length"]

    with pytest.raises(SchemaError):
        predict_batch(fixed_classifier([0.5, 0.5]), [record_kwargs, incomplete])


def test_unequal_kmer_lengths(record_kwargs, fixed_classifier):
    short = dict(record_kwargs, DNA_5mer="ATCG")
    with pytest.raises(EncodingError):
        predict_batch(fixed_classifier([0.5, 0.5]), [short, record_kwargs])


def test_unknown_rna_type(record_kwargs, fixed_classifier):
    with pytest.raises(CategoricalDomainError) as exc_info:
        predict_batch(fixed_classifier([0.5]), [dict(record_kwargs, RNA_type="circRNA")])
    assert exc_info.value.column == "RNA_type"


def test_unknown_rna_type_missing_policy(record_kwargs, fixed_classifier):
    model = fixed_classifier([0.5])
    config = PredictionConfig(unknown_category_policy="missing")

    with pytest.warns(UserWarning):
        out = predict_batch(model, [dict(record_kwargs, RNA_type="circRNA")], config=config)

    assert out["RNA_type"].tolist() == ["circRNA"]
    assert model.calls[0]["RNA_type"].isna().all()


def test_output_column_clash(feature_df, fixed_classifier):
    feature_df["predicted_m6A_prob"] = 0.0
    with pytest.raises(SchemaError, match="output columns"):
        predict_batch(fixed_classifier([0.5] * 4), feature_df)


def test_classifier_failure_is_wrapped(feature_df, fixed_classifier):
    def boom(table):
        raise RuntimeError("model exploded")

    with pytest.raises(ClassifierInvocationError, match="model exploded") as exc_info:
        predict_batch(fixed_classifier(boom), feature_df)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.parametrize("probs", [
    [0.5, 0.5],
    [0.5, 0.5, 0.5, 1.2],
    [0.5, np.nan, 0.5, 0.5],
    [[0.5, 0.5]] * 4,
])
def test_malformed_probabilities(probs, feature_df, fixed_classifier):
    with pytest.raises(ClassifierInvocationError):
        predict_batch(fixed_classifier(probs), feature_df)


def test_probability_table_without_positive(feature_df, fixed_classifier):
    probs = pd.DataFrame({"yes": [0.5] * 4, "no": [0.5] * 4})
    with pytest.raises(ClassifierInvocationError, match="Positive"):
        predict_batch(fixed_classifier(lambda table: probs), feature_df)


def test_non_classifier_model(feature_df):
    with pytest.raises(TypeError):
        predict_batch(object(), feature_df)


# =================================================================
# predict_one
# =================================================================

def test_predict_one(record_kwargs, fixed_classifier):
    result = predict_one(fixed_classifier([0.72]), positive_threshold=0.6, **record_kwargs)

    assert result == PredictionResult(predicted_m6A_prob=0.72, predicted_m6A_status="Positive")


def test_predict_one_matches_batch(record_kwargs, fixed_classifier):
    model = fixed_classifier([0.37])

    single = predict_one(model, **record_kwargs)
    batch = predict_batch(model, [record_kwargs]).iloc[0]

    assert single.predicted_m6A_prob == batch["predicted_m6A_prob"]
    assert single.predicted_m6A_status == batch["predicted_m6A_status"]
    pd.testing.assert_frame_equal(model.calls[0], model.calls[1])


def test_predict_one_validates_like_batch(record_kwargs, fixed_classifier):
    with pytest.raises(CategoricalDomainError):
        predict_one(fixed_classifier([0.5]), **dict(record_kwargs, RNA_region="exon"))
    with pytest.raises(EncodingError):
        predict_one(fixed_classifier([0.5]), **dict(record_kwargs, DNA_5mer="ATCG"))


def test_legacy_aliases():
    assert prediction_multiple is predict_batch
    assert prediction_single is predict_one
