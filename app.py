"""
Interactive Streamlit Demo: Cardiovascular Disease Risk Calculator

This application provides two views over the same reference data:
1. An individual 10-year risk calculator for six cardiovascular outcomes
2. A populational comparison of c-index across predictor combinations

⚠️ EDUCATIONAL USE ONLY - NOT FOR CLINICAL DECISION-MAKING ⚠️
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure project root is in path for imports
BASE_DIR = Path(__file__).resolve().parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

import streamlit as st
import matplotlib.pyplot as plt

from risk_calculator import (
    DEFAULT_DATA_DIR,
    DEFAULT_PATIENT_PAYLOAD,
    CardiovascularRiskCalculator,
)
from models.constants import (
    BASE_MODELS,
    BINARY_FLAG_LABELS,
    CONTINUOUS_VARIABLES,
    DISEASE_NAMES,
    ETHNICITY_LEVELS,
    FRIENDLY_VARIABLE_NAMES,
    OMICS_ORDER,
    PERCENTILE_VARIABLES,
)
from models.errors import DataLoadError, RiskCalculatorError
from models.form_input import FormInput, calculate_bmi
from models.reference_data import load_reference_data
from utils.visualization import NO_DATA_MESSAGE, build_performance_figure, build_results_table

DATA_SOURCE = os.environ.get("CVD_RISK_DATA_DIR", str(DEFAULT_DATA_DIR))

# =============================================================================
# Page Configuration
# =============================================================================

st.set_page_config(
    page_title="Cardiovascular Disease Risk Calculator",
    page_icon="🫀",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        color: #1E3A5F;
        text-align: center;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        font-size: 1.1rem;
        color: #666;
        text-align: center;
        margin-bottom: 2rem;
    }
    .risk-card {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        border-radius: 12px;
        padding: 1.5rem;
        color: white;
        text-align: center;
        box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1);
    }
    .risk-card h2 {
        margin: 0;
        font-size: 3rem;
        font-weight: 700;
    }
    .risk-card p {
        margin: 0.5rem 0 0 0;
        opacity: 0.9;
    }
</style>
""", unsafe_allow_html=True)

st.markdown('<h1 class="main-header">🫀 Cardiovascular Disease Risk Calculator</h1>', unsafe_allow_html=True)
st.markdown(
    '<p class="sub-header">10-year risk from clinical, genomic, metabolomic and proteomic predictors</p>',
    unsafe_allow_html=True,
)

# =============================================================================
# Load Reference Data
# =============================================================================


@st.cache_resource
def load_calculator(source: str) -> CardiovascularRiskCalculator:
    """Load every reference table once per process."""
    return CardiovascularRiskCalculator(load_reference_data(source))


try:
    calculator = load_calculator(DATA_SOURCE)
except DataLoadError as exc:
    st.error(f"Critical data files could not be loaded. The calculator is disabled.\n\n{exc}")
    st.stop()

tab_calc, tab_perf = st.tabs(["🧮 Individual Risk", "📊 Populational Predictive Performance"])

# =============================================================================
# Individual Risk Calculator
# =============================================================================

with tab_calc:
    disease = st.selectbox(
        "Outcome",
        options=list(DISEASE_NAMES),
        format_func=DISEASE_NAMES.get,
    )

    st.subheader("Demographics")
    col1, col2 = st.columns(2)
    with col1:
        sex = st.radio("Sex", options=["Male", "Female"], horizontal=True)
    with col2:
        ethnicity = st.radio(
            "Ethnicity",
            options=list(ETHNICITY_LEVELS),
            format_func=ETHNICITY_LEVELS.get,
            horizontal=True,
        )

    st.subheader("Clinical Measurements and Blood Counts")
    continuous: dict[str, str] = {}
    columns = st.columns(3)
    for index, name in enumerate(CONTINUOUS_VARIABLES):
        if name == "bmi":
            continue
        with columns[index % 3]:
            continuous[name] = st.text_input(
                FRIENDLY_VARIABLE_NAMES[name], value=str(DEFAULT_PATIENT_PAYLOAD[name])
            )

    bmi = calculate_bmi(continuous.get("height"), continuous.get("weight"))
    continuous["bmi"] = st.text_input(
        FRIENDLY_VARIABLE_NAMES["bmi"],
        value="" if bmi is None else f"{bmi:.1f}",
        help="Calculated from height (cm) and weight (kg); edit to override.",
    )

    st.subheader("Percentile Scores")
    percentiles: dict[str, int] = {}
    columns = st.columns(len(PERCENTILE_VARIABLES))
    for column, name in zip(columns, PERCENTILE_VARIABLES):
        with column:
            percentiles[name] = st.slider(FRIENDLY_VARIABLE_NAMES[name], 1, 99, 50)

    st.subheader("Lifestyle, Family History and Medication")
    flags: dict[str, int] = {}
    columns = st.columns(2)
    for index, label in enumerate(BINARY_FLAG_LABELS):
        with columns[index % 2]:
            flags[label] = int(st.radio(label, options=["No", "Yes"], horizontal=True) == "Yes")

    if st.button("Calculate Risk", type="primary"):
        form = FormInput(
            continuous=continuous,
            percentiles=percentiles,
            sex=sex,
            ethnicity=ethnicity,
            flags=flags,
        )
        outcome = calculator.run_calculation(form, disease)
        if not outcome.ok:
            st.error(outcome.message)

        st.markdown(f"""
        <div class="risk-card">
            <h2>{outcome.display}</h2>
            <p>10-year risk of {DISEASE_NAMES[disease].lower()}</p>
        </div>
        """, unsafe_allow_html=True)

# =============================================================================
# Populational Predictive Performance
# =============================================================================

with tab_perf:
    selected_outcomes = st.multiselect(
        "Cardiovascular diseases",
        options=list(DISEASE_NAMES),
        default=list(DISEASE_NAMES),
        format_func=DISEASE_NAMES.get,
    )
    base_model = st.radio("Base predictor", options=BASE_MODELS, index=1, horizontal=True)
    selected_omics = st.multiselect("Omics add-ons", options=OMICS_ORDER, default=OMICS_ORDER)

    if st.button("Generate Results"):
        try:
            records = calculator.compare_models(base_model, selected_omics, selected_outcomes)
        except RiskCalculatorError as exc:
            st.warning(str(exc))
        else:
            table = build_results_table(records)
            if table.empty:
                st.info(NO_DATA_MESSAGE)
            else:
                st.dataframe(table, hide_index=True)
            fig = build_performance_figure(records)
            st.pyplot(fig)
            plt.close(fig)

st.caption("""
---
**Disclaimer:** This tool is provided for educational and research purposes only.
It is NOT intended for clinical use or to guide patient care decisions.
""")
