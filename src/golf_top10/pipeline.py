import warnings
from textwrap import indent
from typing import Any, Dict, Optional

import pandas as pd

from .cleaner import DataCleaner
from .config import Config
from .correlation import CorrelationAnalyzer, CorrelationReport
from .data_loader import DataLoader
from .evaluator import Evaluator
from .hyper_tuner import HyperTuner, SearchResult
from .model_trainer import ModelTrainer
from .models import ModelSpec, RandomForestSpec, build_specs
from .partitioner import Partitioner, Split
from .utils.logger import get_logger


def _block(df: pd.DataFrame) -> str:
    return indent(df.to_string(index=False), " " * 4)


class PipelineRunner:
    """End-to-end top-10 finisher analysis.

    Steps:
      1. Load the season CSV and clean it (truncate, rename, parse, impute)
      2. Rank predictors by correlation with the target, flag collinear pairs
      3. Split train/test and build CV folds
      4. Tune, refit and test each model variant
         (logistic regression, decision tree, random forest)
      5. Report test metrics and permutation importance"""

    def __init__(
        self,
        config_path: str,
        data_path: Optional[str] = None,
        n_jobs: Optional[int] = None,
    ):
        self.config = Config.from_yaml(config_path)
        if data_path is not None:
            self.config.data["path"] = data_path
        if n_jobs is not None:
            self.config.models["n_jobs"] = n_jobs
        self.logger = get_logger(self.__class__.__name__)
        warnings.filterwarnings(
            "ignore",
            message="X does not have valid feature names",
            category=UserWarning,
            module="sklearn",
        )

    def load_and_clean(self) -> pd.DataFrame:
        d = self.config.data
        raw = DataLoader(d["path"]).load()
        self.logger.info(f"Loaded dataset: {raw.shape[0]:,} rows x {raw.shape[1]} cols")

        cleaner = DataCleaner(
            expected_rows=d.get("expected_rows", 195),
            id_col=d.get("id_col", "player_name"),
            count_col=d.get("count_col", "top_10"),
            target_col=d.get("target_col", "top_ten_finisher"),
            categorical_cols=d.get("categorical_cols"),
        )
        df = cleaner.clean(raw)
        report = cleaner.quality_report(df)
        self.logger.info(
            f"Data quality: {report['rows']} rows, {report['columns']} cols, "
            f"{report['missing_cells']} missing cells, non-numeric stats={report['non_numeric_columns']}"
        )
        return df

    def explore(self, df: pd.DataFrame) -> CorrelationReport:
        d, c = self.config.data, self.config.correlation
        analyzer = CorrelationAnalyzer(
            target_col=d.get("target_col", "top_ten_finisher"),
            id_col=d.get("id_col", "player_name"),
            count_col=d.get("count_col", "top_10"),
            exclude_cols=c.get("exclude_cols"),
            top_n=c.get("top_n", 20),
        )
        report = analyzer.run(df)

        top = report.ranking.head(len(report.top_predictors)).reset_index()
        top.columns = ["predictor", "correlation"]
        self.logger.info(f"Top predictors by |r| with the target:\n{_block(top)}")
        if not report.pairs.empty:
            self.logger.info(f"Collinear pairs (|r| > {report.threshold:.3f}):\n{_block(report.pairs)}")
        if report.replacements:
            self.logger.info(f"Suggested replacements (advisory): {report.replacements}")
        self.logger.info(f"Univariate logistic fits:\n{_block(report.univariate)}")
        return report

    def _tune(
        self,
        trainer: ModelTrainer,
        train_df: pd.DataFrame,
        partitioner: Partitioner,
        tuner: HyperTuner,
    ) -> SearchResult:
        spec = trainer.spec
        target_col = trainer.target_col
        folds = partitioner.folds(train_df, target_col)

        if isinstance(spec, RandomForestSpec):
            broad = tuner.random_search(
                trainer,
                n_candidates=spec.n_random_candidates,
                train_df=train_df,
                folds=folds,
                seed=spec.random_state,
            )
            self.logger.info(f"Random search results:\n{_block(broad.results)}")

        search = tuner.grid_search(trainer, spec.param_grid(trainer.n_features), train_df, folds)
        self.logger.info(f"{spec.name} grid results:\n{_block(search.results)}")
        return search

    def train_variant(
        self,
        spec: ModelSpec,
        features: list,
        split: Split,
        df: pd.DataFrame,
        partitioner: Partitioner,
        tuner: HyperTuner,
        evaluator: Evaluator,
    ) -> Dict[str, Any]:
        d = self.config.data
        trainer = ModelTrainer(
            spec,
            features,
            target_col=d.get("target_col", "top_ten_finisher"),
            id_col=d.get("id_col", "player_name"),
            categorical_cols=d.get("categorical_cols"),
        )
        self.logger.info(f"Training {spec.name}")
        search = self._tune(trainer, split.train(df), partitioner, tuner)

        eval_split = split
        holdout = self.config.models.get("random_forest", {}).get("holdout_test_size")
        if isinstance(spec, RandomForestSpec) and holdout:
            self.logger.warning(
                f"Evaluating {spec.name} on a separate {holdout} holdout; "
                "its test metrics are not comparable with the other models"
            )
            eval_split = partitioner.split(
                df,
                test_size=holdout,
                seed=self.config.models["random_forest"].get("holdout_seed", 1111),
            )

        trainer.fit_final(search.best_params, eval_split.train(df))
        test_df = eval_split.test(df)

        metrics = evaluator.evaluate(trainer, test_df)
        importance = evaluator.permutation_importance(trainer, test_df)
        evaluator.plot_importance(importance, spec.name)
        self.logger.info(f"{spec.name} permutation importance:\n{_block(importance.head(10))}")

        model_importance = spec.importance(trainer.final_model)
        if model_importance is not None:
            self.logger.info(f"{spec.name} model importance:\n{_block(model_importance.head(10))}")

        metrics.update({"cv_metric": search.metric, "cv_score": search.best_score})
        return {
            "trainer": trainer,
            "search": search,
            "metrics": metrics,
            "importance": importance,
        }

    def run(self) -> Dict[str, Any]:
        cfg = self.config
        self.logger.info("Starting top-10 finisher pipeline")

        df = self.load_and_clean()
        correlation = self.explore(df)
        features = correlation.top_predictors

        s = cfg.split
        partitioner = Partitioner(
            test_size=s.get("test_size", 59),
            n_splits=s.get("n_splits", 5),
            split_seed=s.get("split_seed", 2018),
            cv_seed=s.get("cv_seed", 1234),
        )
        split = partitioner.split(df)

        tuner = HyperTuner(n_jobs=cfg.models.get("n_jobs", -1))
        evaluator = Evaluator(
            n_repeats=cfg.output.get("importance_repeats", 10),
            random_state=cfg.models.get("rf_seed", 42),
            figures_dir=cfg.output.get("figures_dir"),
        )

        results = {}
        for name, spec in build_specs(cfg.models).items():
            results[name] = self.train_variant(spec, features, split, df, partitioner, tuner, evaluator)

        summary = Evaluator.summary_table([r["metrics"] for r in results.values()])
        self.logger.info(f"Test-set summary:\n{_block(summary)}")
        self.logger.info("Pipeline finished")

        return {
            "data": df,
            "correlation": correlation,
            "split": split,
            "models": results,
            "summary": summary,
        }
