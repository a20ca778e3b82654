import numpy as np
import pandas as pd
import pytest


def _season(n: int = 80, seed: int = 0) -> pd.DataFrame:
    """Cleaned-looking season stats where skill drives top-10 finishes."""
    rng = np.random.default_rng(seed)
    skill = rng.normal(size=n)
    df = pd.DataFrame(
        {
            "player_name": [f"Player {i:03d}" for i in range(n)],
            "rounds": rng.integers(40, 100, n).astype(float),
            "sg_total": skill + rng.normal(scale=0.3, size=n),
            "sg_putting": 0.5 * skill + rng.normal(scale=0.5, size=n),
            "gir_percent": 65 + 3 * skill + rng.normal(size=n),
            "driving_distance": 295 + 5 * rng.normal(size=n),
            "scrambling": 58 + 2 * skill + rng.normal(size=n),
            "noise": rng.normal(size=n),
        }
    )
    df["top_10"] = np.where(skill > 0, rng.integers(1, 6, n), 0).astype(float)
    df["top_ten_finisher"] = df["top_10"] > 0
    return df


@pytest.fixture
def season_df() -> pd.DataFrame:
    return _season()


@pytest.fixture
def features() -> list:
    return ["sg_total", "sg_putting", "gir_percent", "driving_distance", "scrambling", "noise"]


@pytest.fixture
def raw_season_csv(tmp_path):
    """Raw export: original headers, comma-formatted distances, trailing empty rows."""
    df = _season()
    raw = pd.DataFrame(
        {
            "PLAYER NAME": df["player_name"],
            "Rounds": df["rounds"].astype(int),
            "Top 10": df["top_10"].astype(int),
            "SG: Total": df["sg_total"],
            "SG: Putting": df["sg_putting"],
            "GIR %": df["gir_percent"],
            "Total Distance": [f"{v * 100:,.0f}" for v in df["driving_distance"]],
            "Scrambling": df["scrambling"],
            "Noise": df["noise"],
        }
    )
    raw.loc[3, "SG: Putting"] = np.nan
    empty = pd.DataFrame([[np.nan] * raw.shape[1]] * 3, columns=raw.columns)
    path = tmp_path / "season.csv"
    pd.concat([raw, empty], ignore_index=True).to_csv(path, index=False)
    return path
