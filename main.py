import argparse
import sys

from golf_top10.exceptions import PipelineError
from golf_top10.pipeline import PipelineRunner
from golf_top10.utils.logger import get_logger


def main() -> None:
    """Run the full top-10 finisher pipeline on one season CSV."""
    parser = argparse.ArgumentParser(description="Predict top-10 finishers from season statistics")
    parser.add_argument("data_path", help="Season statistics CSV")
    parser.add_argument("--config", default="config/default.yaml", help="YAML config path")
    parser.add_argument("--n-jobs", type=int, default=None, help="Worker processes for tuning (-1 = all cores)")
    args = parser.parse_args()

    try:
        runner = PipelineRunner(args.config, data_path=args.data_path, n_jobs=args.n_jobs)
        runner.run()
    except PipelineError as exc:
        get_logger("main").error(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
