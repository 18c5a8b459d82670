from pathlib import Path

import pandas as pd
import pytest

import fixed_yield_demo
from fixed_yield_lab.visualization import Visualizer

CONFIGS = Path(__file__).resolve().parents[1] / "configs"


class NullCanvas:
    def __getattr__(self, name):
        return lambda *args, **kwargs: None


def test_demo_writes_outputs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(Visualizer, "_plt", staticmethod(lambda: NullCanvas()))
    monkeypatch.setenv("FIXED_YIELD_CONFIG", str(CONFIGS / "demo.toml"))
    monkeypatch.setenv("FIXED_YIELD_OUTDIR", str(tmp_path))

    fixed_yield_demo.main()

    sim = pd.read_csv(tmp_path / "simulation.csv", index_col=0)
    assert len(sim) == 120
    assert {"rate", "principal_price", "yield_price", "amm_rate"} <= set(sim.columns)
    assert (tmp_path / "pool_summary.csv").exists()
    events = pd.read_csv(tmp_path / "events.csv")
    assert "Deposited" in set(events["event"])
    assert "principal_price" in capsys.readouterr().out
