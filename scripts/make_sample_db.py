# scripts/make_sample_db.py
# 목적:
# - 뷰어와 sql_hints.txt 예제를 바로 돌려볼 수 있는 데모 SQLite 파일 생성
#   1) runs   : 런 단위 정보 (beam__GeV, started_at)
#   2) events : 이벤트 단위 측정값 (energy__MeV, momentum__GeV, detector)
# - 일부 energy__MeV 는 NULL 로 남겨 누락값 처리 확인용

from __future__ import annotations
import sys
import argparse
from pathlib import Path

import numpy as np
import pandas as pd
from sqlalchemy import create_engine

# --- project imports (레포 루트 추가) ---
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from viewer_core.config import setup_logging

DETECTORS = ["barrel", "endcap_a", "endcap_c"]

# 누락값 비율
MISSING_RATE = 0.02


def build_frames(n_runs: int, n_events: int, seed: int = 1) -> tuple[pd.DataFrame, pd.DataFrame]:
    rng = np.random.default_rng(seed)
    runs = pd.DataFrame({
        "run_id": np.arange(1, n_runs + 1),
        "beam__GeV": rng.choice([6.5, 6.8, 7.0], size=n_runs),
        "started_at": pd.date_range("2024-01-01", periods=n_runs, freq="D").strftime("%Y-%m-%d"),
    })
    energy = rng.gamma(shape=4.0, scale=35.0, size=n_events)
    events = pd.DataFrame({
        "event_id": np.arange(1, n_events + 1),
        "run_id": rng.integers(1, n_runs + 1, size=n_events),
        "energy__MeV": energy.round(3),
        "momentum__GeV": (energy / 1000.0 + rng.normal(0, 0.01, size=n_events)).round(5),
        "detector": rng.choice(DETECTORS, size=n_events),
    })
    missing = rng.random(n_events) < MISSING_RATE
    events.loc[missing, "energy__MeV"] = np.nan
    return runs, events


def write_sample_db(path: Path, n_runs: int = 12, n_events: int = 2000, seed: int = 1) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    eng = create_engine(f"sqlite:///{path}", future=True)
    runs, events = build_frames(n_runs, n_events, seed)
    runs.to_sql("runs", eng, if_exists="replace", index=False)
    events.to_sql("events", eng, if_exists="replace", index=False)
    eng.dispose()
    return path


def main():
    ap = argparse.ArgumentParser(description="Write a demo SQLite database for the viewer.")
    ap.add_argument("out", nargs="?", default="data/sample.sqlite", help="출력 파일 경로")
    ap.add_argument("--events", type=int, default=2000, help="이벤트 행 수")
    ap.add_argument("--runs", type=int, default=12, help="런 행 수")
    ap.add_argument("--seed", type=int, default=1)
    args = ap.parse_args()

    setup_logging("INFO")
    out = write_sample_db(Path(args.out), n_runs=args.runs, n_events=args.events, seed=args.seed)
    print(f"완료: {out} (runs={args.runs}, events={args.events})")


if __name__ == "__main__":
    main()
