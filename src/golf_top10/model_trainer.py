import warnings
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.exceptions import ConvergenceWarning
from sklearn.metrics import accuracy_score, roc_auc_score
from sklearn.pipeline import Pipeline

from .exceptions import FitError
from .models import ModelSpec
from .partitioner import Fold
from .preprocessor import Preprocessor
from .utils.logger import get_logger


class ModelTrainer:
    """
    Fits one model variant with leakage-safe cross-validation:
    the recipe is fit only on each fold's analysis rows, then applied to
    its assessment rows.

    Provides:
      - cross_validate: per-fold and mean accuracy / ROC-AUC for one configuration
      - fit_final: recipe + model refit on the full training subset
      - predict / predict_proba on new rows
    """

    def __init__(
        self,
        spec: ModelSpec,
        features: List[str],
        target_col: str = "top_ten_finisher",
        id_col: str = "player_name",
        categorical_cols: Optional[List[str]] = None,
    ):
        if not features:
            raise FitError(f"{spec.name}: no features to train on")
        self.spec = spec
        self.features = list(features)
        self.target_col = target_col
        self.id_col = id_col
        self.categorical_cols = list(categorical_cols or [])

        self.logger = get_logger(self.__class__.__name__)
        self.final_model: Pipeline | None = None
        self.final_params: dict[str, Any] | None = None

    @property
    def n_features(self) -> int:
        return len(self.features)

    def feature_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """Selected features, with the identifier kept for traceability."""
        cols = ([self.id_col] if self.id_col in df.columns else []) + self.features
        return df[cols]

    def split_xy(self, df: pd.DataFrame) -> tuple[pd.DataFrame, np.ndarray]:
        return self.feature_frame(df), df[self.target_col].astype(int).to_numpy()

    def _make_pipeline(self, params: dict[str, Any], X_df: pd.DataFrame) -> Pipeline:
        recipe = Preprocessor(id_col=self.id_col, categorical_cols=self.categorical_cols).build(X_df)
        return Pipeline(
            steps=[
                ("recipe", recipe),
                ("model", self.spec.build_estimator(params, n_rows=len(X_df))),
            ]
        )

    def _fit(self, params: dict[str, Any], X_df: pd.DataFrame, y: np.ndarray, where: str) -> Pipeline:
        warnings.filterwarnings("ignore", category=ConvergenceWarning)
        pipe = self._make_pipeline(params, X_df)
        try:
            pipe.fit(X_df, y)
        except ValueError as exc:
            raise FitError(f"{self.spec.name} {params} failed on {where}: {exc}") from exc
        return pipe

    def cross_validate(
        self,
        params: dict[str, Any],
        train_df: pd.DataFrame,
        folds: List[Fold],
    ) -> Dict[str, Any]:
        """
        Score one configuration over fixed folds. Returns mean accuracy and
        ROC-AUC plus the per-fold values.
        """
        X_df, y = self.split_xy(train_df)
        fold_acc: list[float] = []
        fold_auc: list[float] = []

        for fold, (analysis, assessment) in enumerate(folds, start=1):
            y_val = y[assessment]
            if np.unique(y_val).size < 2 or np.unique(y[analysis]).size < 2:
                raise FitError(f"Fold {fold} is degenerate (single class)")

            pipe = self._fit(params, X_df.iloc[analysis], y[analysis], where=f"fold {fold}")
            X_val = X_df.iloc[assessment]
            val_proba = pipe.predict_proba(X_val)[:, 1]
            val_pred = pipe.predict(X_val)

            fold_acc.append(float(accuracy_score(y_val, val_pred)))
            fold_auc.append(float(roc_auc_score(y_val, val_proba)))

        return {
            "accuracy": float(np.mean(fold_acc)),
            "roc_auc": float(np.mean(fold_auc)),
            "fold_accuracy": fold_acc,
            "fold_roc_auc": fold_auc,
        }

    def fit_final(self, params: dict[str, Any], train_df: pd.DataFrame) -> Pipeline:
        """Fit recipe + model on the full training subset."""
        self.spec.validate(params, self.n_features)
        X_df, y = self.split_xy(train_df)
        self.final_model = self._fit(params, X_df, y, where="full training set")
        self.final_params = dict(params)
        self.logger.info(f"Fitted final {self.spec.name} on {len(X_df)} rows with {params}")
        return self.final_model

    def _require_fitted(self) -> Pipeline:
        if self.final_model is None:
            raise RuntimeError("Call fit_final() before predicting.")
        return self.final_model

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        return self._require_fitted().predict(self.feature_frame(df))

    def predict_proba(self, df: pd.DataFrame) -> np.ndarray:
        return self._require_fitted().predict_proba(self.feature_frame(df))[:, 1]
