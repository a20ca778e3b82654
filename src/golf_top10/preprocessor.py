from __future__ import annotations

from typing import List, Optional

import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from golf_top10.utils.logger import get_logger


class Preprocessor:
    """Builds the recipe: scale numeric predictors, one-hot encode categorical ones."""

    def __init__(
        self,
        id_col: str = "player_name",
        categorical_cols: Optional[List[str]] = None,
        verbose: bool = False,
    ):
        """
        Parameters
        ----------
        id_col:
            Player identifier. Kept in the frame for traceability but never
            transformed or used as a feature.
        categorical_cols:
            Columns to one-hot encode even if stored as numbers.
        verbose:
            If True, logs detected feature groups.
        """
        self.id_col = id_col
        self.categorical_cols = list(categorical_cols or [])
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)
        self.transformer: Optional[ColumnTransformer] = None

    def build(self, X: pd.DataFrame) -> ColumnTransformer:
        """Build (but do not fit) the preprocessing transformer."""
        features = X.drop(columns=[self.id_col], errors="ignore")
        text_cols = features.select_dtypes(include=["object", "string", "category"]).columns
        categorical = [
            col for col in features.columns
            if col in self.categorical_cols or col in text_cols
        ]
        numeric = [
            col for col in features.select_dtypes(include=["number", "bool"]).columns
            if col not in categorical
        ]

        self.transformer = ColumnTransformer(
            transformers=[
                ("num", StandardScaler(), numeric),
                ("cat", OneHotEncoder(handle_unknown="ignore", sparse_output=False), categorical),
            ],
            remainder="drop",
            verbose_feature_names_out=False,
        )

        if self.verbose:
            self.logger.info(f"Columns detected: numeric={len(numeric)}, categorical={len(categorical)}")

        return self.transformer
