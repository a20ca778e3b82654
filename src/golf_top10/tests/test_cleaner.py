import numpy as np
import pandas as pd
import pytest

from golf_top10.cleaner import DataCleaner, clean_column_name, clean_column_names
from golf_top10.exceptions import DataIntegrityError


def _make_raw(n_valid: int = 4, n_empty: int = 0) -> pd.DataFrame:
    names = [f"Player {i}" for i in range(n_valid)]
    top10 = [i % 3 for i in range(n_valid)]
    lead = [float(10 * (i + 1)) for i in range(n_valid)]
    df = pd.DataFrame({"PLAYER NAME": names, "Top 10": top10, "Points Behind Lead": lead})
    if n_empty:
        empty = pd.DataFrame([[None, np.nan, np.nan]] * n_empty, columns=df.columns)
        df = pd.concat([df, empty], ignore_index=True)
    return df


def test_clean_column_name_examples():
    assert clean_column_name("PLAYER NAME") == "player_name"
    assert clean_column_name("Top 10") == "top_10"
    assert clean_column_name("SG: Putts") == "sg_putts"
    assert clean_column_name("GIR %") == "gir_percent"
    assert clean_column_name("# of Rounds") == "number_of_rounds"
    assert clean_column_name("  Avg. Distance (yds) ") == "avg_distance_yds"
    assert clean_column_name("3-Putt Avoidance") == "x3_putt_avoidance"
    assert clean_column_name("???") == "x"


def test_clean_column_names_suffixes_duplicates():
    assert clean_column_names(["Score", "score", "SCORE"]) == ["score", "score_2", "score_3"]


def test_truncates_trailing_empty_rows_to_expected_count():
    raw = _make_raw(n_valid=195, n_empty=5)
    assert len(raw) == 200

    out = DataCleaner(expected_rows=195).clean(raw)

    assert len(out) == 195
    assert out["player_name"].notna().all()


def test_too_few_rows_raises():
    with pytest.raises(DataIntegrityError, match="at least 195"):
        DataCleaner(expected_rows=195).clean(_make_raw(n_valid=150))


def test_comma_formatted_text_is_parsed():
    raw = _make_raw(n_valid=2)
    raw["Total Distance"] = ["1,234", "987"]

    cleaner = DataCleaner(expected_rows=2)
    out = cleaner.clean(raw)

    assert out["total_distance"].tolist() == [1234.0, 987.0]
    assert pd.api.types.is_float_dtype(out["total_distance"])
    assert cleaner.coerced_ == ["total_distance"]


def test_unparseable_text_raises_with_column_and_value():
    raw = _make_raw(n_valid=2)
    raw["Total Distance"] = ["1,234", "far"]

    with pytest.raises(DataIntegrityError, match="total_distance.*'far'"):
        DataCleaner(expected_rows=2).clean(raw)


def test_missing_value_imputed_with_column_mean():
    raw = _make_raw(n_valid=4)
    raw["Points Behind Lead"] = [10.0, 20.0, np.nan, 30.0]

    cleaner = DataCleaner(expected_rows=4)
    out = cleaner.clean(raw)

    assert out.loc[2, "points_behind_lead"] == pytest.approx(20.0)
    assert cleaner.imputed_ == {"points_behind_lead": pytest.approx(20.0)}


def test_missing_text_statistic_is_parsed_then_imputed():
    raw = _make_raw(n_valid=3)
    raw["Total Distance"] = ["1,000", None, "3,000"]

    out = DataCleaner(expected_rows=3).clean(raw)

    assert out["total_distance"].tolist() == [1000.0, 2000.0, 3000.0]


def test_column_without_observed_values_raises():
    raw = _make_raw(n_valid=3)
    raw["Empty Stat"] = np.nan

    with pytest.raises(DataIntegrityError, match="empty_stat"):
        DataCleaner(expected_rows=3).clean(raw)


def test_missing_required_column_raises():
    raw = _make_raw(n_valid=3).drop(columns=["Top 10"])
    with pytest.raises(DataIntegrityError, match="top_10"):
        DataCleaner(expected_rows=3).clean(raw)


def test_target_is_true_when_any_top_ten():
    raw = _make_raw(n_valid=4)
    raw["Top 10"] = [0, 1, 5, 0]

    out = DataCleaner(expected_rows=4).clean(raw)

    assert out["top_ten_finisher"].tolist() == [False, True, True, False]
    assert out["top_ten_finisher"].dtype == bool


def test_cleaned_statistics_are_numeric_and_complete():
    raw = _make_raw(n_valid=4, n_empty=2)
    raw["Total Distance"] = ["1,100", "1,200", None, "1,300", None, None]

    cleaner = DataCleaner(expected_rows=4)
    out = cleaner.clean(raw)
    report = cleaner.quality_report(out)

    assert report["rows"] == 4
    assert report["missing_cells"] == 0
    assert report["non_numeric_columns"] == []


def test_clean_does_not_mutate_input():
    raw = _make_raw(n_valid=4, n_empty=1)
    raw["Total Distance"] = ["1,100", "1,200", "1,300", "1,400", None]
    before = raw.copy(deep=True)

    _ = DataCleaner(expected_rows=4).clean(raw)

    pd.testing.assert_frame_equal(raw, before)


def test_special_characters_are_dropped_from_names():
    assert clean_column_name("Par 3 & 4 Scoring") == "par_3_4_scoring"
    assert clean_column_names(["SG: Total", "Scrambling"]) == ["sg_total", "scrambling"]


def test_categorical_code_imputed_with_mode():
    raw = _make_raw(n_valid=4)
    raw["Season Code"] = [1, 2, np.nan, 2]

    cleaner = DataCleaner(expected_rows=4, categorical_cols=["season_code"])
    out = cleaner.clean(raw)

    assert out["season_code"].tolist() == [1, 2, 2, 2]
    assert cleaner.imputed_ == {"season_code": 2}


def test_categorical_without_observed_values_raises():
    raw = _make_raw(n_valid=3)
    raw["Season Code"] = np.nan

    with pytest.raises(DataIntegrityError, match="season_code"):
        DataCleaner(expected_rows=3, categorical_cols=["season_code"]).clean(raw)
