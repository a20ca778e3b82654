import os
from typing import Any, Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from sklearn.inspection import permutation_importance
from sklearn.metrics import accuracy_score, confusion_matrix, roc_auc_score

from .model_trainer import ModelTrainer
from .utils.logger import get_logger


class Evaluator:
    """Score a finalized model on its test rows and rank features by permutation importance."""

    def __init__(
        self,
        n_repeats: int = 10,
        random_state: int = 42,
        figures_dir: Optional[str] = None,
        verbose: bool = True,
    ):
        self.n_repeats = n_repeats
        self.random_state = random_state
        self.figures_dir = figures_dir
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)

    def evaluate(self, trainer: ModelTrainer, test_df: pd.DataFrame) -> Dict[str, Any]:
        """Accuracy, ROC-AUC and confusion counts on the test rows."""
        _, y_true = trainer.split_xy(test_df)
        y_pred = np.asarray(trainer.predict(test_df)).astype(int)
        y_proba = trainer.predict_proba(test_df)

        if np.unique(y_true).size > 1:
            auc = float(roc_auc_score(y_true, y_proba))
        else:
            self.logger.warning(f"{trainer.spec.name}: test set has a single class; ROC-AUC undefined")
            auc = float("nan")

        tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
        metrics: Dict[str, Any] = {
            "model": trainer.spec.name,
            "accuracy": float(accuracy_score(y_true, y_pred)),
            "roc_auc": auc,
            "n_test": int(len(y_true)),
            "tn": int(tn),
            "fp": int(fp),
            "fn": int(fn),
            "tp": int(tp),
        }
        if self.verbose:
            self.logger.info(
                f"{trainer.spec.name} test accuracy={metrics['accuracy']:.4f}, ROC-AUC={auc:.4f}"
            )
        return metrics

    def permutation_importance(self, trainer: ModelTrainer, test_df: pd.DataFrame) -> pd.DataFrame:
        """Mean drop in test ROC-AUC when each feature is shuffled, strongest first."""
        if trainer.final_model is None:
            raise RuntimeError("Call fit_final() before computing importance.")

        X_df, y = trainer.split_xy(test_df)
        scoring = "roc_auc" if np.unique(y).size > 1 else "accuracy"
        result = permutation_importance(
            trainer.final_model,
            X_df,
            y,
            scoring=scoring,
            n_repeats=self.n_repeats,
            random_state=self.random_state,
        )
        importance = pd.DataFrame(
            {
                "feature": X_df.columns,
                "importance": result.importances_mean,
                "std": result.importances_std,
            }
        )
        importance = importance[importance["feature"] != trainer.id_col]
        return importance.sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)

    def plot_importance(self, importance: pd.DataFrame, model_name: str, top_n: int = 20) -> Optional[str]:
        """Save a bar plot of the top features when a figures directory is configured."""
        if not self.figures_dir:
            return None

        data = importance.head(top_n)
        plt.figure(figsize=(8, max(3, 0.35 * len(data))))
        sns.barplot(data=data, x="importance", y="feature", color="steelblue")
        plt.xlabel("Permutation importance (ROC-AUC drop)")
        plt.ylabel("")
        plt.title(f"Variable importance: {model_name}")

        os.makedirs(self.figures_dir, exist_ok=True)
        path = os.path.join(self.figures_dir, f"importance_{model_name}.png")
        plt.tight_layout()
        plt.savefig(path, dpi=200)
        plt.close()

        if self.verbose:
            self.logger.info(f"Saved importance plot: {path}")
        return path

    @staticmethod
    def summary_table(results: List[Dict[str, Any]]) -> pd.DataFrame:
        """One row per model, best test ROC-AUC first."""
        cols = ["model", "cv_metric", "cv_score", "accuracy", "roc_auc", "n_test"]
        table = pd.DataFrame(results)
        table = table[[c for c in cols if c in table.columns]]
        return table.sort_values("roc_auc", ascending=False, kind="mergesort").reset_index(drop=True)
