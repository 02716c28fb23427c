"""Shared constants for the fixed feature set, outcomes, and model names."""

from __future__ import annotations

RISK_HORIZON_YEARS = 10.0
C_INDEX_METRIC = "c_index"
RISK_PLACEHOLDER = "--"

DISEASE_NAMES = {
    "cad": "Coronary artery disease",
    "stroke": "Stroke",
    "hf": "Heart failure",
    "af": "Atrial fibrillation",
    "pad": "Peripheral artery disease",
    "vte": "Venous thromboembolism",
}

# Canonical display order for tables, charts and legends.
DISEASE_ORDER = list(DISEASE_NAMES.values())

DISEASE_COLORS = {
    "Coronary artery disease": "#E64B35",
    "Stroke": "#4DBBD5",
    "Heart failure": "#00A087",
    "Atrial fibrillation": "#3C5488",
    "Peripheral artery disease": "#F39B7F",
    "Venous thromboembolism": "#8491B4",
}

CONTINUOUS_VARIABLES = [
    "age",
    "sbp",
    "dbp",
    "height",
    "weight",
    "waist_cir",
    "waist_hip_ratio",
    "bmi",
    "baso",
    "eos",
    "hct",
    "hb",
    "lc",
    "mc",
    "nc",
    "plt",
    "wbc",
]

PERCENTILE_VARIABLES = ["townsend", "prs", "metscore", "proscore"]

FRIENDLY_VARIABLE_NAMES = {
    "age": "Age (years)",
    "sbp": "Systolic Blood Pressure",
    "dbp": "Diastolic Blood Pressure",
    "height": "Height",
    "weight": "Weight",
    "waist_cir": "Waist Circumference",
    "waist_hip_ratio": "Waist-Hip Ratio",
    "bmi": "Body Mass Index",
    "baso": "Basophill Count",
    "eos": "Eosinophill Count",
    "hct": "Haematocrit",
    "hb": "Haemoglobin",
    "lc": "Lymphocyte Count",
    "mc": "Monocyte Count",
    "nc": "Neutrophill Count",
    "plt": "Platelet Count",
    "wbc": "Leukocyte Count",
    "townsend": "Townsend Deprivation Index",
    "prs": "Polygenic Risk Score",
    "metscore": "Metabolomic Score",
    "proscore": "Proteomic Score",
}

BINARY_FLAG_LABELS = {
    "Current Smoking": "current_smoking_1.0",
    "Daily Alcohol Intake": "daily_drinking_1.0",
    "Healthy Sleep": "healthy_sleep_1.0",
    "Physical activity": "physical_act_1.0",
    "Healthy diet": "healthy_diet_1.0",
    "Social connection": "social_active_1.0",
    "Family History of Heart Disease": "family_heart_hist_1.0",
    "Family History of Stroke": "family_stroke_hist_1.0",
    "Family History of Hypertension": "family_hypt_hist_1.0",
    "Family History of Diabetes": "family_diab_hist_1.0",
    "History of Hypertension": "hypt_hist_1.0",
    "History of Diabetes": "diab_hist_1.0",
    "Lipid-lowering Medication": "lipidlower_1.0",
    "Antihypertensive Medication": "antihypt_1.0",
}

SEX_FEATURE = "male_1.0"

# Level 0 is the reference category and has no indicator column.
ETHNICITY_LEVELS = {
    0: "White",
    1: "Asian",
    2: "Black",
    3: "Other",
}
ETHNICITY_FEATURES = {
    1: "ethnicity_1.0",
    2: "ethnicity_2.0",
    3: "ethnicity_3.0",
}

BASE_MODELS = ["AgeSex", "Clin", "PANEL"]
OMICS_ORDER = ["PRS", "MetScore", "ProScore"]

MODEL_NAME_ABBREVIATIONS = [
    ("Clinical", "Clin"),
    ("Genomics", "PRS"),
    ("Metabolomics", "MetScore"),
    ("Proteomics", "ProScore"),
    ("_", "+"),
]
