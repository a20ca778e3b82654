import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import LogisticRegression

from golf_top10.correlation import CorrelationAnalyzer
from golf_top10.exceptions import DataIntegrityError


def _make_binary_frame():
    # Balanced 10/10 target. One swapped pair against 1 - y gives r = -0.8,
    # two swapped pairs against y give r = 0.6.
    y = np.array([1] * 10 + [0] * 10)
    a = 1 - y
    a[[0, 10]] = a[[10, 0]]
    b = y.copy()
    b[[0, 1, 10, 11]] = b[[10, 11, 0, 1]]
    return pd.DataFrame(
        {
            "player_name": [f"P{i}" for i in range(20)],
            "top_10": y * 2,
            "b": b.astype(float),
            "a": a.astype(float),
            "top_ten_finisher": y.astype(bool),
        }
    )


def test_rank_orders_by_absolute_correlation():
    df = _make_binary_frame()
    ranking = CorrelationAnalyzer().rank(df)

    assert list(ranking.index) == ["a", "b"]
    assert ranking["a"] == pytest.approx(-0.8)
    assert ranking["b"] == pytest.approx(0.6)


def test_predictors_exclude_identifier_count_target_and_index_columns(season_df):
    analyzer = CorrelationAnalyzer(exclude_cols=["rounds"])
    predictors = analyzer.predictors(season_df)

    assert "player_name" not in predictors
    assert "top_10" not in predictors
    assert "top_ten_finisher" not in predictors
    assert "rounds" not in predictors
    assert "sg_total" in predictors


def test_constant_predictor_is_dropped():
    df = _make_binary_frame()
    df["flat"] = 3.0
    ranking = CorrelationAnalyzer().rank(df)
    assert "flat" not in ranking.index


def test_single_class_target_raises():
    df = _make_binary_frame()
    df["top_ten_finisher"] = True
    with pytest.raises(DataIntegrityError, match="single class"):
        CorrelationAnalyzer().rank(df)


def test_top_predictors_respects_top_n(season_df):
    analyzer = CorrelationAnalyzer(top_n=3, exclude_cols=["rounds"])
    ranking = analyzer.rank(season_df)
    top = analyzer.top_predictors(ranking)
    assert top == list(ranking.index[:3])


def test_collinear_pairs_keep_stronger_member(season_df):
    analyzer = CorrelationAnalyzer(top_n=6, exclude_cols=["rounds"])
    ranking = analyzer.rank(season_df)
    pairs, threshold = analyzer.collinear_pairs(season_df, ranking)

    assert not pairs.empty
    assert (pairs["correlation"].abs() > threshold).all()
    assert (pairs["var_a"] != pairs["var_b"]).all()
    # upper triangle only: each unordered pair appears once
    keys = {frozenset(p) for p in zip(pairs["var_a"], pairs["var_b"])}
    assert len(keys) == len(pairs)
    for _, row in pairs.iterrows():
        assert abs(ranking[row["preferred"]]) >= abs(ranking[row["discarded"]])


def test_collinear_tie_goes_to_higher_ranked_member():
    df = _make_binary_frame()
    df["a_copy"] = df["a"]
    analyzer = CorrelationAnalyzer(top_n=3)
    ranking = analyzer.rank(df)
    pairs, _ = analyzer.collinear_pairs(df, ranking)

    tie = pairs[pairs["var_a"].isin(["a", "a_copy"]) & pairs["var_b"].isin(["a", "a_copy"])]
    assert len(tie) == 1
    assert tie.iloc[0]["preferred"] == "a"
    assert tie.iloc[0]["discarded"] == "a_copy"


def test_prefer_breaks_exact_ties_by_rank_position():
    ranking = pd.Series({"x": 0.5, "y": -0.5})
    assert CorrelationAnalyzer._prefer("y", "x", ranking) == ("x", "y")
    assert CorrelationAnalyzer._prefer("x", "y", ranking) == ("x", "y")


def test_replacement_map_picks_strongest_partner():
    ranking = pd.Series({"x": 0.9, "y": -0.7, "z": 0.5, "w": 0.4})
    pairs = pd.DataFrame(
        [
            {"var_a": "x", "var_b": "z", "correlation": 0.8, "preferred": "x", "discarded": "z"},
            {"var_a": "y", "var_b": "z", "correlation": 0.7, "preferred": "y", "discarded": "z"},
            {"var_a": "y", "var_b": "w", "correlation": -0.6, "preferred": "y", "discarded": "w"},
        ]
    )
    replacements = CorrelationAnalyzer.replacement_map(pairs, ranking)
    assert replacements == {"z": "x", "w": "y"}


def test_univariate_models_are_keyed_in_predictor_order(season_df):
    analyzer = CorrelationAnalyzer()
    predictors = ["sg_total", "noise", "gir_percent"]
    models = analyzer.fit_univariate_models(season_df, predictors)

    assert list(models) == predictors
    assert all(isinstance(m, LogisticRegression) for m in models.values())

    summary = analyzer.univariate_summary(models, season_df)
    assert summary["predictor"].tolist() == predictors
    assert summary.loc[0, "coefficient"] > 0


def test_run_bundles_report(season_df):
    report = CorrelationAnalyzer(top_n=4, exclude_cols=["rounds"]).run(season_df)

    assert len(report.top_predictors) == 4
    assert report.ranking.index[0] == report.top_predictors[0]
    assert set(report.replacements).issubset(set(report.pairs["discarded"]))
    assert len(report.univariate) == 4
