from pathlib import Path

import pandas as pd

from .exceptions import DataIntegrityError


class DataLoader:
    """Loads the season statistics CSV, keeping empty trailing rows."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> pd.DataFrame:
        if not self.path.exists():
            raise DataIntegrityError(f"Input file not found: {self.path}", stage="loading")
        # Empty rows stay in the frame; the cleaner truncates them.
        try:
            return pd.read_csv(self.path, skip_blank_lines=False)
        except pd.errors.EmptyDataError:
            raise DataIntegrityError(f"No header row in {self.path}", stage="loading") from None
