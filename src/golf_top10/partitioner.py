from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.model_selection import StratifiedKFold, train_test_split

from .exceptions import ConfigurationError, FitError
from .utils.logger import get_logger

Fold = Tuple[np.ndarray, np.ndarray]


@dataclass(frozen=True)
class Split:
    """Row labels of the training and testing subsets."""
    train_index: pd.Index
    test_index: pd.Index

    def train(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.loc[self.train_index]

    def test(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.loc[self.test_index]


class Partitioner:
    """Seeded train/test split and stratified k-fold assignment."""

    def __init__(
        self,
        test_size: Union[int, float] = 59,
        n_splits: int = 5,
        split_seed: int = 2018,
        cv_seed: int = 1234,
    ):
        self.test_size = test_size
        self.n_splits = n_splits
        self.split_seed = split_seed
        self.cv_seed = cv_seed
        self.logger = get_logger(self.__class__.__name__)

    def split(self, df: pd.DataFrame, test_size=None, seed=None) -> Split:
        test_size = self.test_size if test_size is None else test_size
        seed = self.split_seed if seed is None else seed

        n = len(df)
        n_test = test_size if isinstance(test_size, int) else int(np.ceil(test_size * n))
        if not 0 < n_test < n:
            raise ConfigurationError(f"test_size={test_size} leaves no rows for one side of a {n}-row split")

        train_idx, test_idx = train_test_split(df.index, test_size=test_size, random_state=seed)
        split = Split(train_index=pd.Index(train_idx).sort_values(), test_index=pd.Index(test_idx).sort_values())

        if split.train_index.intersection(split.test_index).size or (
            split.train_index.size + split.test_index.size != n
        ):
            raise FitError("Train/test split is not a partition of the dataset", stage="partitioning")

        self.logger.info(f"Split {n} rows: train={len(split.train_index)}, test={len(split.test_index)} (seed={seed})")
        return split

    def folds(self, train_df: pd.DataFrame, target_col: str) -> List[Fold]:
        """Positional (analysis, assessment) arrays over train_df, fixed by cv_seed."""
        y = train_df[target_col].astype(int).to_numpy()
        counts = np.bincount(y, minlength=2)
        if counts.min() < self.n_splits:
            raise FitError(
                f"Need at least {self.n_splits} rows of each class for {self.n_splits}-fold CV, "
                f"got {counts.tolist()}",
                stage="partitioning",
            )

        skf = StratifiedKFold(n_splits=self.n_splits, shuffle=True, random_state=self.cv_seed)
        folds = list(skf.split(np.zeros(len(y)), y))

        for fold, (analysis, assessment) in enumerate(folds, start=1):
            for part, idx in (("analysis", analysis), ("assessment", assessment)):
                if np.unique(y[idx]).size < 2:
                    raise FitError(f"Fold {fold} {part} set has a single class", stage="partitioning")
        return folds
