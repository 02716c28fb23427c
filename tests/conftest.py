"""Pytest configuration, path setup and synthetic reference tables."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Mark that we're running under pytest to prevent stdout/stderr wrapping issues
os.environ["PYTEST_CURRENT_TEST"] = "true"
# Render figures off-screen
os.environ.setdefault("MPLBACKEND", "Agg")

# Add the repository root to sys.path for imports
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from models.reference_data import load_reference_data  # noqa: E402

BASELINE_CSV = """\
Time,cad,stroke,hf,af,pad,vte
0,1.0,,1.0,1.0,1.0,1.0
5,0.98,,0.97,0.99,0.99,0.99
10,0.95,,0.93,0.97,0.98,0.98
12,0.90,,0.90,0.95,0.97,0.97
15,,0.80,,,,
"""

COEFFICIENTS_CSV = """\
,cad,stroke,hf,af,pad,vte
age,0.5,0.4,0.6,0.3,0.2,0.1
sbp,0.2,0.3,NA,0.1,0.1,0.0
male_1.0,NA,0.1,0.2,0.25,0.3,0.1
ethnicity_1.0,0.15,0.0,0.0,0.0,0.0,0.0
current_smoking_1.0,0.4,0.3,0.2,0.1,0.5,0.1
townsend,0.05,0.02,0.01,0.01,0.02,0.01
prs,0.3,0.1,0.2,0.1,0.1,0.05
metscore,NA,NA,0.1,NA,NA,NA
proscore,NA,NA,0.1,NA,NA,NA
bogus_feature,0.9,NA,NA,NA,NA,NA
"""

SCALER_CSV = """\
feature,mean,variance
age,55,25
sbp,130,1
dbp,80,1
height,170,1
weight,75,1
waist_cir,90,1
waist_hip_ratio,0.9,1
bmi,26.0,1
baso,0.03,1
eos,0.15,1
hct,42,1
hb,14,1
lc,1.9,1
mc,0.5,1
nc,4.2,1
plt,250,1
wbc,6.8,1
"""

PERCENTILES_CSV = """\
outcome,score,p25,p50,p75
cad,townsend,-1.5,0.0,1.5
cad,prs,-0.8,0.0,1.2
cad,metscore,-0.5,0.0,0.5
cad,proscore,-0.6,0.0,0.6
stroke,townsend,-1.4,0.0,1.4
stroke,prs,-0.7,0.0,0.7
stroke,metscore,-0.4,0.0,0.4
stroke,proscore,-0.5,0.0,0.5
hf,townsend,-1.3,0.0,1.3
hf,prs,-0.6,0.0,0.6
hf,metscore,-0.3,0.0,0.3
"""

CINDEX_CSV = """\
metric,outcome,comparison_model,point_estimate,ci_lower,ci_upper
c_index,cad,Clinical,0.72,0.70,0.74
c_index,cad,Clinical_Genomics,0.74,0.72,0.76
c_index,cad,Clinical_Proteomics_Genomics,0.78,0.76,0.80
c_index,cad,Clinical_Metabolomics,0.73,0.71,0.75
c_index,cad,AgeSex,0.65,0.63,0.67
c_index,cad,PANEL_Genomics,0.76,0.74,0.78
c_index,stroke,Clinical,0.68,0.66,0.70
c_index,stroke,Clinical_Genomics_Metabolomics_Proteomics,0.71,0.69,0.73
c_index,hf,Clinical_Genomics,0.80,0.78,0.82
brier,cad,Clinical,0.05,0.04,0.06
"""

REFERENCE_TABLES = {
    "baseline_survivals.csv": BASELINE_CSV,
    "coefficients.csv": COEFFICIENTS_CSV,
    "PANEL_scaler_params.csv": SCALER_CSV,
    "percentiles.csv": PERCENTILES_CSV,
    "cindex_final.csv": CINDEX_CSV,
}


def write_reference_tables(directory: Path, overrides: dict | None = None) -> Path:
    """Write the synthetic tables to ``directory``.

    ``overrides`` maps a filename to replacement content, or to None to leave
    that file out.
    """

    directory.mkdir(parents=True, exist_ok=True)
    tables = {**REFERENCE_TABLES, **(overrides or {})}
    for filename, content in tables.items():
        if content is not None:
            (directory / filename).write_text(content, encoding="utf-8")
    return directory


@pytest.fixture
def reference_dir(tmp_path: Path) -> Path:
    return write_reference_tables(tmp_path / "data")


@pytest.fixture
def reference(reference_dir: Path):
    return load_reference_data(reference_dir)


@pytest.fixture
def patient_payload() -> dict:
    """Reference profile: age z = 2, every other biomarker z = 0, all ranks p50."""
    from risk_calculator import DEFAULT_PATIENT_PAYLOAD

    payload = dict(DEFAULT_PATIENT_PAYLOAD)
    payload["age"] = 65
    payload["flags"] = {}
    return payload
