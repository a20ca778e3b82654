from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np
import optuna
import pandas as pd
from joblib import Parallel, delayed
from optuna.trial import TrialState

from .exceptions import ConfigurationError, FitError, GridSearchError
from .model_trainer import ModelTrainer
from .partitioner import Fold
from .utils.logger import get_logger


@dataclass
class SearchResult:
    """Outcome of one search: a row per candidate plus the winner."""
    results: pd.DataFrame
    best_params: Dict[str, Any]
    best_score: float
    metric: str


def _score_candidate(
    trainer: ModelTrainer,
    params: Dict[str, Any],
    train_df: pd.DataFrame,
    folds: List[Fold],
    candidate: int,
) -> Dict[str, Any]:
    """Cross-validate one configuration. Runs inside a joblib worker."""
    try:
        scores = trainer.cross_validate(params, train_df, folds)
        status = "ok"
    except FitError as exc:
        scores = {"accuracy": np.nan, "roc_auc": np.nan}
        status = str(exc)
    return {
        "candidate": candidate,
        "params": dict(params),
        "accuracy": scores["accuracy"],
        "roc_auc": scores["roc_auc"],
        "status": status,
    }


class HyperTuner:
    """Cross-validated search over candidate configurations.

    Candidates are scored independently, so they are mapped over a joblib
    worker pool; results are merged back in candidate order and the best
    mean score wins, ties going to the earliest candidate.
    """

    def __init__(self, n_jobs: int = -1):
        self.n_jobs = n_jobs
        self.logger = get_logger(self.__class__.__name__)

    def _score_all(
        self,
        trainer: ModelTrainer,
        candidates: List[Dict[str, Any]],
        train_df: pd.DataFrame,
        folds: List[Fold],
    ) -> List[Dict[str, Any]]:
        if not candidates:
            raise ConfigurationError(f"{trainer.spec.name}: empty hyperparameter grid")
        for params in candidates:
            trainer.spec.validate(params, trainer.n_features)

        records = Parallel(n_jobs=self.n_jobs)(
            delayed(_score_candidate)(trainer, params, train_df, folds, i)
            for i, params in enumerate(candidates)
        )
        return sorted(records, key=lambda r: r["candidate"])

    def _select(self, records: List[Dict[str, Any]], metric: str, label: str) -> SearchResult:
        failed = [r for r in records if r["status"] != "ok"]
        for r in failed:
            self.logger.warning(f"{label}: candidate {r['candidate']} {r['params']} failed: {r['status']}")

        completed = [r for r in records if r["status"] == "ok"]
        if not completed:
            raise GridSearchError(f"{label}: none of {len(records)} candidates completed")

        # max() keeps the first of equal scores, i.e. candidate order
        best = max(completed, key=lambda r: r[metric])

        results = pd.DataFrame(
            [{"candidate": r["candidate"], **r["params"], "accuracy": r["accuracy"],
              "roc_auc": r["roc_auc"], "status": r["status"]} for r in records]
        )
        self.logger.info(
            f"{label}: best {metric}={best[metric]:.4f} with {best['params']} "
            f"({len(completed)}/{len(records)} candidates completed)"
        )
        return SearchResult(
            results=results,
            best_params=dict(best["params"]),
            best_score=float(best[metric]),
            metric=metric,
        )

    def grid_search(
        self,
        trainer: ModelTrainer,
        candidates: List[Dict[str, Any]],
        train_df: pd.DataFrame,
        folds: List[Fold],
        metric: Optional[str] = None,
    ) -> SearchResult:
        metric = metric or trainer.spec.selection_metric
        self.logger.info(
            f"Grid search {trainer.spec.name}: {len(candidates)} candidates x {len(folds)} folds"
        )
        records = self._score_all(trainer, candidates, train_df, folds)
        return self._select(records, metric, label=f"{trainer.spec.name} grid")

    def random_search(
        self,
        trainer: ModelTrainer,
        n_candidates: int,
        train_df: pd.DataFrame,
        folds: List[Fold],
        seed: int = 42,
        metric: Optional[str] = None,
    ) -> SearchResult:
        """
        Sample candidates from the variant's search space with a seeded
        Optuna sampler (ask), score them in parallel, then report back (tell).
        """
        metric = metric or trainer.spec.selection_metric
        distributions = trainer.spec.search_space(trainer.n_features)

        optuna.logging.set_verbosity(optuna.logging.WARNING)
        sampler = optuna.samplers.RandomSampler(seed=seed)
        study = optuna.create_study(direction="maximize", sampler=sampler)

        trials = [study.ask(distributions) for _ in range(n_candidates)]
        candidates = [dict(trial.params) for trial in trials]
        self.logger.info(
            f"Random search {trainer.spec.name}: {n_candidates} candidates x {len(folds)} folds (seed={seed})"
        )

        records = self._score_all(trainer, candidates, train_df, folds)
        for trial, record in zip(trials, records):
            if record["status"] == "ok":
                study.tell(trial, record[metric])
            else:
                study.tell(trial, state=TrialState.FAIL)

        return self._select(records, metric, label=f"{trainer.spec.name} random")
