"""
Top-10 Finisher Analysis — season statistics classification pipeline

This package cleans one season of tour player statistics, explores how
each statistic correlates with finishing top 10 in at least one event,
and tunes, fits and evaluates three classifiers for that outcome.

Modules:
    config          — Load YAML configuration and seed overrides.
    data_loader     — Read the season CSV.
    cleaner         — Truncate, rename, parse and impute the raw export.
    correlation     — Rank predictors and flag collinear pairs.
    partitioner     — Seeded train/test split and CV folds.
    preprocessor    — Scale and encode features (the recipe).
    models          — Logistic regression, decision tree and random forest variants.
    model_trainer   — Fold-wise cross-validation and final refit.
    hyper_tuner     — Parallel grid search and Optuna random search.
    evaluator       — Test metrics and permutation importance.
    pipeline        — PipelineRunner, end to end from CSV to summary table.
    utils.logger    — get_logger for the shared stdout format.
"""

from .config import Config
from .data_loader import DataLoader
from .cleaner import DataCleaner
from .correlation import CorrelationAnalyzer
from .partitioner import Partitioner
from .preprocessor import Preprocessor
from .models import DecisionTreeSpec, LogisticSpec, RandomForestSpec
from .model_trainer import ModelTrainer
from .hyper_tuner import HyperTuner
from .evaluator import Evaluator
from .pipeline import PipelineRunner

__all__ = [
    "Config",
    "DataLoader",
    "DataCleaner",
    "CorrelationAnalyzer",
    "Partitioner",
    "Preprocessor",
    "LogisticSpec",
    "DecisionTreeSpec",
    "RandomForestSpec",
    "ModelTrainer",
    "HyperTuner",
    "Evaluator",
    "PipelineRunner",
]
