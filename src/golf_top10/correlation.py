from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import accuracy_score

from .exceptions import DataIntegrityError
from .models import make_logistic_regression
from .utils.logger import get_logger


@dataclass
class CorrelationReport:
    """Everything the exploratory correlation step produces."""
    ranking: pd.Series
    top_predictors: List[str]
    threshold: float
    pairs: pd.DataFrame
    replacements: Dict[str, str]
    univariate: pd.DataFrame = field(default_factory=pd.DataFrame)


class CorrelationAnalyzer:
    """Rank predictors by Pearson correlation with the top-10 target and
    flag collinear pairs among the strongest ones.

    The replacement map is advisory: nothing downstream prunes features
    with it.
    """

    PAIR_COLUMNS = ["var_a", "var_b", "correlation", "preferred", "discarded"]

    def __init__(
        self,
        target_col: str = "top_ten_finisher",
        id_col: str = "player_name",
        count_col: str = "top_10",
        exclude_cols: Optional[List[str]] = None,
        top_n: int = 20,
    ):
        self.target_col = target_col
        self.id_col = id_col
        self.count_col = count_col
        self.exclude_cols = list(exclude_cols or [])
        self.top_n = top_n
        self.logger = get_logger(self.__class__.__name__)

    def predictors(self, df: pd.DataFrame) -> List[str]:
        """Numeric statistic columns, by name, excluding identifiers and the raw count."""
        skip = {self.target_col, self.id_col, self.count_col, *self.exclude_cols}
        return [c for c in df.select_dtypes(include=["number"]).columns if c not in skip]

    def rank(self, df: pd.DataFrame, predictors: Optional[List[str]] = None) -> pd.Series:
        """Pearson r of each predictor against the 0/1 target, strongest |r| first."""
        predictors = self.predictors(df) if predictors is None else list(predictors)
        if not predictors:
            raise DataIntegrityError("No numeric predictors to correlate", stage="correlation")

        y = df[self.target_col].astype(int)
        if y.nunique() < 2:
            raise DataIntegrityError("Target has a single class", stage="correlation")

        coefs = df[predictors].corrwith(y)
        undefined = coefs.index[coefs.isna()].tolist()
        if undefined:
            self.logger.warning(f"Dropping constant predictors with undefined correlation: {undefined}")
            coefs = coefs.dropna()

        # stable sort keeps column order among equal |r|
        order = coefs.abs().sort_values(ascending=False, kind="mergesort").index
        ranking = coefs.loc[order]
        ranking.name = "correlation"
        return ranking

    def top_predictors(self, ranking: pd.Series) -> List[str]:
        return list(ranking.index[: self.top_n])

    @staticmethod
    def _prefer(a: str, b: str, ranking: pd.Series) -> tuple[str, str]:
        """Return (preferred, discarded); equal |r| goes to the higher-ranked name."""
        ra, rb = abs(ranking[a]), abs(ranking[b])
        if ra > rb:
            return a, b
        if rb > ra:
            return b, a
        position = {name: i for i, name in enumerate(ranking.index)}
        return (a, b) if position[a] <= position[b] else (b, a)

    def collinear_pairs(
        self,
        df: pd.DataFrame,
        ranking: pd.Series,
        predictors: Optional[List[str]] = None,
    ) -> tuple[pd.DataFrame, float]:
        """Upper-triangle pairs whose |r| exceeds |mean r| over all retained pairs."""
        top = self.top_predictors(ranking) if predictors is None else list(predictors)
        if len(top) < 2:
            return pd.DataFrame(columns=self.PAIR_COLUMNS), float("nan")

        matrix = df[top].corr().to_numpy()
        rows, cols = np.triu_indices(len(top), k=1)
        values = matrix[rows, cols]
        threshold = float(abs(np.nanmean(values)))

        records = []
        for i, j, r in zip(rows, cols, values):
            if np.isnan(r) or abs(r) <= threshold:
                continue
            a, b = top[i], top[j]
            preferred, discarded = self._prefer(a, b, ranking)
            records.append(
                {
                    "var_a": a,
                    "var_b": b,
                    "correlation": float(r),
                    "preferred": preferred,
                    "discarded": discarded,
                }
            )

        pairs = pd.DataFrame.from_records(records, columns=self.PAIR_COLUMNS)
        self.logger.info(
            f"{len(pairs)} of {len(values)} predictor pairs exceed |mean r| = {threshold:.3f}"
        )
        return pairs, threshold

    @staticmethod
    def replacement_map(pairs: pd.DataFrame, ranking: pd.Series) -> Dict[str, str]:
        """For each discarded variable, its strongest partner by |target r|."""
        position = {name: i for i, name in enumerate(ranking.index)}
        replacements: Dict[str, str] = {}
        for discarded, group in pairs.groupby("discarded", sort=False):
            candidates = group["preferred"].tolist()
            replacements[discarded] = max(
                candidates, key=lambda name: (abs(ranking[name]), -position[name])
            )
        return replacements

    def fit_univariate_models(
        self, df: pd.DataFrame, predictors: List[str]
    ) -> Dict[str, LogisticRegression]:
        """One unpenalized logistic regression per predictor, in the given order."""
        y = df[self.target_col].astype(int)
        models: Dict[str, LogisticRegression] = {}
        for name in predictors:
            model = make_logistic_regression(C=np.inf, max_iter=1000)
            model.fit(df[[name]], y)
            models[name] = model
        return models

    def univariate_summary(
        self, models: Dict[str, LogisticRegression], df: pd.DataFrame
    ) -> pd.DataFrame:
        y = df[self.target_col].astype(int)
        rows = []
        for name, model in models.items():
            rows.append(
                {
                    "predictor": name,
                    "coefficient": float(model.coef_[0][0]),
                    "intercept": float(model.intercept_[0]),
                    "accuracy": float(accuracy_score(y, model.predict(df[[name]]))),
                }
            )
        return pd.DataFrame(rows)

    def run(self, df: pd.DataFrame) -> CorrelationReport:
        ranking = self.rank(df)
        top = self.top_predictors(ranking)
        pairs, threshold = self.collinear_pairs(df, ranking, top)
        replacements = self.replacement_map(pairs, ranking)
        models = self.fit_univariate_models(df, top)

        return CorrelationReport(
            ranking=ranking,
            top_predictors=top,
            threshold=threshold,
            pairs=pairs,
            replacements=replacements,
            univariate=self.univariate_summary(models, df),
        )
