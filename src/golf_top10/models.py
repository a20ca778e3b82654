"""
Model variants for the top-10 classifier.

Each variant describes its hyperparameter grid, how to build an unfitted
estimator for one configuration, and which cross-validated metric picks
the winner. Fitting, scoring and searching live in ``model_trainer`` and
``hyper_tuner``; the variants only hold what differs between models.
"""

from itertools import product
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from optuna.distributions import BaseDistribution, IntDistribution
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline
from sklearn.tree import DecisionTreeClassifier

from .exceptions import ConfigurationError


def regular_levels(low: float, high: float, levels: int, integer: bool = False) -> List[Any]:
    """Evenly spaced values over [low, high]; integer levels are rounded and de-duplicated."""
    values = np.linspace(low, high, levels)
    if integer:
        return list(dict.fromkeys(int(v) for v in np.round(values)))
    return [float(v) for v in values]


# scikit-learn 1.8 deprecates `penalty`; there l1_ratio and C alone pick it
_PENALTY_DEPRECATED = LogisticRegression().get_params()["penalty"] == "deprecated"


def make_logistic_regression(C: float = 1.0, l1_ratio: float = 0.0, **kwargs) -> LogisticRegression:
    """Elastic-net (or, with ``C=np.inf``, unpenalized) logistic regression
    built with whichever penalty API the installed scikit-learn expects."""
    if _PENALTY_DEPRECATED:
        return LogisticRegression(C=C, l1_ratio=l1_ratio, **kwargs)
    if np.isinf(C):
        return LogisticRegression(penalty=None, **kwargs)
    return LogisticRegression(penalty="elasticnet", C=C, l1_ratio=l1_ratio, **kwargs)


class ModelSpec:
    """Interface shared by the three classifiers."""

    name = "model"
    selection_metric = "accuracy"

    def __init__(self, random_state: int = 42):
        self.random_state = random_state

    def param_grid(self, n_features: int) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def build_estimator(self, params: Dict[str, Any], n_rows: int):
        raise NotImplementedError

    def search_space(self, n_features: int) -> Dict[str, BaseDistribution]:
        raise ConfigurationError(f"{self.name} does not define a random search space")

    def validate(self, params: Dict[str, Any], n_features: int) -> None:
        """Raise ConfigurationError if a configuration is outside its valid range."""

    def importance(self, model: Pipeline) -> Optional[pd.DataFrame]:
        """Model-specific importance, strongest first, or None if the model has none."""
        return None

    @staticmethod
    def _feature_names(model: Pipeline) -> List[str]:
        return list(model.named_steps["recipe"].get_feature_names_out())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(random_state={self.random_state})"


class LogisticSpec(ModelSpec):
    """Elastic-net logistic regression tuned over penalty strength and L1/L2 mixture."""

    name = "logistic_regression"
    selection_metric = "accuracy"

    def __init__(
        self,
        penalty_range: Sequence[float] = (-10.0, 0.0),
        penalty_levels: int = 3,
        mixture_levels: int = 3,
        max_iter: int = 5000,
        random_state: int = 42,
    ):
        super().__init__(random_state)
        self.penalty_range = tuple(penalty_range)
        self.penalty_levels = penalty_levels
        self.mixture_levels = mixture_levels
        self.max_iter = max_iter

    def param_grid(self, n_features: int) -> List[Dict[str, Any]]:
        # penalty levels are spaced on log10
        exponents = regular_levels(*self.penalty_range, self.penalty_levels)
        penalties = [float(10 ** e) for e in exponents]
        mixtures = regular_levels(0.0, 1.0, self.mixture_levels)
        return [{"penalty": p, "mixture": m} for p, m in product(penalties, mixtures)]

    def validate(self, params: Dict[str, Any], n_features: int) -> None:
        if params["penalty"] <= 0:
            raise ConfigurationError(f"penalty must be positive, got {params['penalty']}")
        if not 0.0 <= params["mixture"] <= 1.0:
            raise ConfigurationError(f"mixture must be in [0, 1], got {params['mixture']}")

    def build_estimator(self, params: Dict[str, Any], n_rows: int) -> LogisticRegression:
        # penalty is on the mean log-likelihood scale, sklearn's C on the summed one
        return make_logistic_regression(
            C=1.0 / (n_rows * params["penalty"]),
            l1_ratio=params["mixture"],
            solver="saga",
            max_iter=self.max_iter,
            random_state=self.random_state,
        )

    def importance(self, model: Pipeline) -> pd.DataFrame:
        coefs = model.named_steps["model"].coef_[0]
        return pd.DataFrame(
            {"feature": self._feature_names(model), "importance": np.abs(coefs), "sign": np.sign(coefs)}
        ).sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)


class DecisionTreeSpec(ModelSpec):
    """CART tree tuned over cost-complexity pruning and depth."""

    name = "decision_tree"
    selection_metric = "accuracy"

    def __init__(
        self,
        cost_complexity: Sequence[float] = (0.0, 0.05, 0.10, 0.15),
        tree_depth: Sequence[int] = (1, 5, 10),
        min_n: int = 5,
        random_state: int = 42,
    ):
        super().__init__(random_state)
        self.cost_complexity = [float(c) for c in cost_complexity]
        self.tree_depth = [int(d) for d in tree_depth]
        self.min_n = int(min_n)

    def param_grid(self, n_features: int) -> List[Dict[str, Any]]:
        return [
            {"cost_complexity": c, "tree_depth": d}
            for c, d in product(self.cost_complexity, self.tree_depth)
        ]

    def validate(self, params: Dict[str, Any], n_features: int) -> None:
        if params["cost_complexity"] < 0:
            raise ConfigurationError(f"cost_complexity must be >= 0, got {params['cost_complexity']}")
        if params["tree_depth"] < 1:
            raise ConfigurationError(f"tree_depth must be >= 1, got {params['tree_depth']}")
        if self.min_n < 2:
            raise ConfigurationError(f"min_n must be >= 2, got {self.min_n}")

    def build_estimator(self, params: Dict[str, Any], n_rows: int) -> DecisionTreeClassifier:
        return DecisionTreeClassifier(
            ccp_alpha=params["cost_complexity"],
            max_depth=params["tree_depth"],
            min_samples_split=self.min_n,
            random_state=self.random_state,
        )

    def importance(self, model: Pipeline) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "feature": self._feature_names(model),
                "importance": model.named_steps["model"].feature_importances_,
            }
        ).sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)


class RandomForestSpec(ModelSpec):
    """Random forest tuned over mtry and minimum node size, selected by ROC-AUC.

    ``param_grid`` is the refined regular grid; ``search_space`` is the broad
    region sampled by the random search that precedes it.
    """

    name = "random_forest"
    selection_metric = "roc_auc"

    def __init__(
        self,
        trees: int = 1000,
        n_random_candidates: int = 20,
        min_n_range: Sequence[int] = (2, 40),
        mtry_grid: Sequence[int] = (2, 8),
        min_n_grid: Sequence[int] = (30, 40),
        grid_levels: int = 5,
        random_state: int = 42,
    ):
        super().__init__(random_state)
        self.trees = int(trees)
        self.n_random_candidates = int(n_random_candidates)
        self.min_n_range = tuple(int(v) for v in min_n_range)
        self.mtry_grid = tuple(int(v) for v in mtry_grid)
        self.min_n_grid = tuple(int(v) for v in min_n_grid)
        self.grid_levels = int(grid_levels)

    def search_space(self, n_features: int) -> Dict[str, BaseDistribution]:
        return {
            "mtry": IntDistribution(1, n_features),
            "min_n": IntDistribution(*self.min_n_range),
        }

    def param_grid(self, n_features: int) -> List[Dict[str, Any]]:
        mtry = regular_levels(*self.mtry_grid, self.grid_levels, integer=True)
        min_n = regular_levels(*self.min_n_grid, self.grid_levels, integer=True)
        return [{"mtry": m, "min_n": n} for m, n in product(mtry, min_n)]

    def validate(self, params: Dict[str, Any], n_features: int) -> None:
        if not 1 <= params["mtry"] <= n_features:
            raise ConfigurationError(
                f"mtry={params['mtry']} outside [1, {n_features}] available predictors"
            )
        if params["min_n"] < 2:
            raise ConfigurationError(f"min_n must be >= 2, got {params['min_n']}")

    def build_estimator(self, params: Dict[str, Any], n_rows: int) -> RandomForestClassifier:
        return RandomForestClassifier(
            n_estimators=self.trees,
            max_features=int(params["mtry"]),
            min_samples_split=int(params["min_n"]),
            random_state=self.random_state,
            n_jobs=1,
        )

    def importance(self, model: Pipeline) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "feature": self._feature_names(model),
                "importance": model.named_steps["model"].feature_importances_,
            }
        ).sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)


def build_specs(models_cfg: Dict[str, Any]) -> Dict[str, ModelSpec]:
    """Instantiate the three variants from the ``models`` config section."""
    seed = models_cfg.get("rf_seed", 42)
    lr_cfg = models_cfg.get("logistic", {})
    dt_cfg = models_cfg.get("decision_tree", {})
    rf_cfg = dict(models_cfg.get("random_forest", {}))
    for key in ("holdout_test_size", "holdout_seed"):
        rf_cfg.pop(key, None)

    specs = [
        LogisticSpec(random_state=seed, **lr_cfg),
        DecisionTreeSpec(random_state=seed, **dt_cfg),
        RandomForestSpec(random_state=seed, **rf_cfg),
    ]
    return {spec.name: spec for spec in specs}
