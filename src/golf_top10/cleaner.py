from typing import Any, Dict, List, Optional

import janitor  # noqa: F401  registers DataFrame.clean_names
import pandas as pd

from .exceptions import DataIntegrityError
from .utils.logger import get_logger

# spelled out before janitor strips them as special characters
_SYMBOLS = {"%": " percent ", "#": " number "}


def _spell_symbols(name: Any) -> str:
    text = str(name)
    for symbol, word in _SYMBOLS.items():
        text = text.replace(symbol, word)
    return text


def clean_column_names(columns: List[Any]) -> List[str]:
    """snake_case raw headers with janitor, e.g. 'SG: Putts %' -> 'sg_putts_percent'.

    Empty results become 'x', a leading digit gets an 'x' prefix and
    duplicates are suffixed with _2, _3, ...
    """
    header = pd.DataFrame(columns=[_spell_symbols(c) for c in columns])
    cleaned = header.clean_names(remove_special=True, strip_underscores=True).columns

    seen: Dict[str, int] = {}
    out = []
    for name in cleaned:
        name = str(name)
        if not name:
            name = "x"
        elif name[0].isdigit():
            name = "x" + name
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 1
        out.append(name)
    return out


def clean_column_name(name: Any) -> str:
    return clean_column_names([name])[0]


class DataCleaner:
    """Turns the raw season export into the cleaned player dataset.

    Steps, in order:
      1. truncate to the valid player rows
      2. normalize column names
      3. parse statistics stored as text with thousands separators
      4. mean-impute missing statistics, mode-impute categorical codes
      5. derive the boolean top-10 target
    """

    def __init__(
        self,
        expected_rows: int = 195,
        id_col: str = "player_name",
        count_col: str = "top_10",
        target_col: str = "top_ten_finisher",
        categorical_cols: Optional[List[str]] = None,
    ):
        self.expected_rows = expected_rows
        self.id_col = id_col
        self.count_col = count_col
        self.target_col = target_col
        self.categorical_cols = list(categorical_cols or [])
        self.logger = get_logger(self.__class__.__name__)
        self.imputed_: Dict[str, Any] = {}
        self.coerced_: List[str] = []

    def truncate(self, df: pd.DataFrame) -> pd.DataFrame:
        if len(df) < self.expected_rows:
            raise DataIntegrityError(
                f"Expected at least {self.expected_rows} rows, got {len(df)}"
            )
        tail = df.iloc[self.expected_rows:]
        if len(tail):
            non_empty = int(tail.notna().any(axis=1).sum())
            if non_empty:
                self.logger.warning(f"Dropping {non_empty} non-empty rows past row {self.expected_rows}")
            self.logger.info(f"Truncated {len(tail)} trailing rows")
        return df.iloc[: self.expected_rows].reset_index(drop=True)

    def coerce_numeric_text(self, df: pd.DataFrame) -> pd.DataFrame:
        """Parse text columns such as '1,234' into floats."""
        out = df.copy()
        skip = {self.id_col, *self.categorical_cols}
        text_cols = [
            col for col in out.select_dtypes(include=["object", "string"]).columns
            if col not in skip
        ]
        for col in text_cols:
            raw = out[col]
            text = raw.where(raw.isna(), raw.astype(str).str.replace(",", "", regex=False).str.strip())
            text = text.mask(text == "")
            parsed = pd.to_numeric(text, errors="coerce")
            bad = text.notna() & parsed.isna()
            if bad.any():
                value = out.loc[bad.idxmax(), col]
                raise DataIntegrityError(f"Column '{col}' has unparseable numeric text {value!r}")
            out[col] = parsed.astype(float)
            self.coerced_.append(col)
        if self.coerced_:
            self.logger.info(f"Parsed text statistics: {self.coerced_}")
        return out

    def impute(self, df: pd.DataFrame) -> pd.DataFrame:
        """Fill missing statistics with the observed mean, categorical codes with their mode."""
        out = df.copy()
        if self.id_col in out.columns and out[self.id_col].isna().any():
            row = int(out[self.id_col].isna().idxmax())
            raise DataIntegrityError(f"Missing '{self.id_col}' in row {row}")

        categorical = [col for col in self.categorical_cols if col in out.columns]
        numeric = [col for col in out.select_dtypes(include=["number"]).columns if col not in categorical]

        for col in numeric:
            missing = out[col].isna()
            if not missing.any():
                continue
            observed = out.loc[~missing, col]
            if observed.empty:
                raise DataIntegrityError(f"Cannot impute '{col}': no observed values")
            fill = float(observed.mean())
            out[col] = out[col].fillna(fill)
            self.imputed_[col] = fill
            self.logger.info(f"Imputed {int(missing.sum())} missing '{col}' with mean {fill:.4f}")

        # categorical codes get the most frequent level, never a mean
        for col in categorical:
            missing = out[col].isna()
            if not missing.any():
                continue
            modes = out[col].mode()
            if modes.empty:
                raise DataIntegrityError(f"Cannot impute '{col}': no observed values")
            fill = modes.iloc[0]
            out[col] = out[col].fillna(fill)
            self.imputed_[col] = fill
            self.logger.info(f"Imputed {int(missing.sum())} missing '{col}' with mode {fill!r}")
        return out

    def add_target(self, df: pd.DataFrame) -> pd.DataFrame:
        out = df.copy()
        out[self.target_col] = out[self.count_col] > 0
        return out

    def clean(self, raw: pd.DataFrame) -> pd.DataFrame:
        self.imputed_ = {}
        self.coerced_ = []

        df = self.truncate(raw)
        df.columns = clean_column_names(list(df.columns))

        missing = [c for c in (self.id_col, self.count_col) if c not in df.columns]
        if missing:
            raise DataIntegrityError(f"Required columns not found: {missing}")

        df = self.coerce_numeric_text(df)
        df = self.impute(df)
        df = self.add_target(df)

        self.logger.info(
            f"Cleaned dataset: {len(df)} players, "
            f"{int(df[self.target_col].sum())} with a top-10 finish"
        )
        return df

    def quality_report(self, df: pd.DataFrame) -> Dict[str, Any]:
        """Summarise rows, missing cells and columns that are still non-numeric."""
        stats = [c for c in df.columns if c not in {self.id_col, self.target_col, *self.categorical_cols}]
        non_numeric = [c for c in stats if not pd.api.types.is_numeric_dtype(df[c])]
        return {
            "rows": len(df),
            "columns": df.shape[1],
            "missing_cells": int(df.isna().sum().sum()),
            "non_numeric_columns": non_numeric,
            "imputed": dict(self.imputed_),
            "coerced": list(self.coerced_),
        }
