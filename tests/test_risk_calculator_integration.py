"""Integration tests for the calculator facade and the command-line entry point."""

from __future__ import annotations

import json
import logging

import pandas as pd
import pytest
from conftest import SCALER_CSV, write_reference_tables

from models.errors import InputValidationError
from models.form_input import FormInput
from models.reference_data import load_reference_data
from risk_calculator import (
    DEFAULT_PATIENT_PAYLOAD,
    CalculationOutcome,
    CardiovascularRiskCalculator,
    load_patient_profile,
    main,
    parse_args,
)
from utils.logging_config import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
    logger.handlers.clear()


@pytest.fixture
def calculator(reference):
    return CardiovascularRiskCalculator(reference)


def calculator_with(tmp_path, overrides) -> CardiovascularRiskCalculator:
    data_dir = write_reference_tables(tmp_path / "custom", overrides)
    return CardiovascularRiskCalculator(load_reference_data(data_dir))


class TestRunCalculation:
    def test_successful_outcome(self, calculator, patient_payload):
        outcome = calculator.run_calculation(FormInput.from_dict(patient_payload), "cad")

        assert isinstance(outcome, CalculationOutcome)
        assert outcome.ok
        assert outcome.message is None
        assert outcome.display == "13.0%"
        assert outcome.estimate.disease_name == "Coronary artery disease"

    def test_invalid_input(self, calculator, patient_payload):
        patient_payload["age"] = "sixty"
        outcome = calculator.run_calculation(FormInput.from_dict(patient_payload), "cad")

        assert outcome.display == "--"
        assert outcome.error.kind == "input_validation"
        assert outcome.message == "Please enter a valid number for: Age (years)"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("flags", {"Current Smoking": "yes"}),
            ("flags", {"Current Smoking": "2"}),
            ("ethnicity", "inf"),
            ("ethnicity", 2.5),
        ],
    )
    def test_invalid_categorical_answers(self, calculator, patient_payload, field, value):
        patient_payload[field] = value
        outcome = calculator.run_calculation(FormInput.from_dict(patient_payload), "cad")

        assert outcome.ok is False
        assert outcome.display == "--"
        assert outcome.error.kind == "input_validation"

    def test_numeric_string_flag(self, calculator, patient_payload):
        patient_payload["flags"] = {"Current Smoking": "1.0"}
        outcome = calculator.run_calculation(FormInput.from_dict(patient_payload), "cad")

        assert outcome.ok
        assert outcome.estimate.linear_predictor == pytest.approx(1.0 + 0.4)

    def test_zero_variance(self, tmp_path, patient_payload):
        scaler = SCALER_CSV.replace("plt,250,1", "plt,250,0")
        calculator = calculator_with(tmp_path, {"PANEL_scaler_params.csv": scaler})

        outcome = calculator.run_calculation(FormInput.from_dict(patient_payload), "cad")

        assert outcome.error.kind == "degenerate_scale"
        assert "Standard Deviation is 0" in outcome.message

    def test_missing_scaler_feature(self, tmp_path, patient_payload):
        scaler = SCALER_CSV.replace("wbc,6.8,1\n", "")
        calculator = calculator_with(tmp_path, {"PANEL_scaler_params.csv": scaler})

        outcome = calculator.run_calculation(FormInput.from_dict(patient_payload), "cad")

        assert outcome.error.kind == "config"
        assert outcome.error.feature == "wbc"

    def test_failure_is_logged(self, calculator, patient_payload, caplog):
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            calculator.run_calculation(FormInput.from_dict(patient_payload), "hf")
        assert "lookup" in caplog.text

    def test_repeated_calls_are_independent(self, calculator, patient_payload):
        form = FormInput.from_dict(patient_payload)
        first = calculator.run_calculation(form, "cad")
        calculator.run_calculation(form, "hf")
        again = calculator.run_calculation(form, "cad")
        assert first.estimate == again.estimate


class TestCompareModels:
    def test_display_order(self, calculator):
        records = calculator.compare_models("Clin", ["PRS", "MetScore", "ProScore"], ["cad", "hf"])
        ordered = [(r.canonical_model_name, r.outcome) for r in records]
        assert ordered == [
            ("Clin", "cad"),
            ("Clin+MetScore", "cad"),
            ("Clin+PRS", "cad"),
            ("Clin+PRS", "hf"),
            ("Clin+PRS+ProScore", "cad"),
        ]

    def test_panel_base(self, calculator):
        records = calculator.compare_models("PANEL", ["PRS"], ["cad"])
        assert [r.mapped_model_name for r in records] == ["PANEL+PRS"]

    def test_requires_selection(self, calculator):
        with pytest.raises(InputValidationError):
            calculator.compare_models("Clin", [], [])


class TestLoadPatientProfile:
    def test_default_profile(self):
        profile = load_patient_profile(None)
        assert profile == DEFAULT_PATIENT_PAYLOAD
        assert profile is not DEFAULT_PATIENT_PAYLOAD

    def test_missing_file_falls_back(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            profile = load_patient_profile(tmp_path / "absent.json")
        assert profile == DEFAULT_PATIENT_PAYLOAD
        assert "not found" in caplog.text

    def test_malformed_file_falls_back(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_patient_profile(path) == DEFAULT_PATIENT_PAYLOAD

    @pytest.mark.parametrize("content", ["[1, 2, 3]", "42", '"patient"', "null"])
    def test_non_object_json_falls_back(self, tmp_path, caplog, content):
        path = tmp_path / "patient.json"
        path.write_text(content, encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            profile = load_patient_profile(path)
        assert profile == DEFAULT_PATIENT_PAYLOAD
        assert "expected a JSON object" in caplog.text

    def test_main_with_list_profile(self, reference_dir, tmp_path):
        path = tmp_path / "patient.json"
        path.write_text("[]", encoding="utf-8")
        exit_code = main(
            ["--data-dir", str(reference_dir), "--patient", str(path), "--skip-comparison"]
        )
        assert exit_code == 0

    def test_reads_json(self, tmp_path):
        path = tmp_path / "patient.json"
        path.write_text(json.dumps({**DEFAULT_PATIENT_PAYLOAD, "age": 70}), encoding="utf-8")
        assert load_patient_profile(path)["age"] == 70


class TestCommandLine:
    def test_defaults(self):
        args = parse_args([])
        assert args.disease == "cad"
        assert args.base_model == "Clin"
        assert args.omics == ["PRS", "MetScore", "ProScore"]
        assert len(args.outcomes) == 6

    def test_main_writes_outputs(self, reference_dir, tmp_path):
        output_dir = tmp_path / "out"
        exit_code = main(["--data-dir", str(reference_dir), "--output-dir", str(output_dir)])

        assert exit_code == 0
        assert (output_dir / "cindex_comparison.png").exists()
        table = pd.read_csv(output_dir / "cindex_comparison.csv", dtype=str)
        assert list(table.columns) == ["Model", "Disease", "C-index", "95% CI"]
        assert table.iloc[0].tolist() == ["Clin", "Coronary artery disease", "0.72", "0.70–0.74"]

    def test_main_reports_risk(self, reference_dir, tmp_path, capfd):
        patient = tmp_path / "patient.json"
        patient.write_text(json.dumps({**DEFAULT_PATIENT_PAYLOAD, "age": 65}), encoding="utf-8")

        exit_code = main(
            ["--data-dir", str(reference_dir), "--patient", str(patient), "--skip-comparison"]
        )

        assert exit_code == 0
        assert "10-Year Risk: 13.0%" in capfd.readouterr().out

    def test_main_missing_data(self, tmp_path):
        assert main(["--data-dir", str(tmp_path / "missing"), "--skip-comparison"]) == 1

    def test_main_failed_calculation(self, reference_dir, capfd):
        exit_code = main(["--data-dir", str(reference_dir), "--disease", "hf", "--skip-comparison"])

        assert exit_code == 2
        assert "10-Year Risk: --" in capfd.readouterr().out

    def test_main_skip_comparison(self, reference_dir, tmp_path):
        output_dir = tmp_path / "out"
        main(
            [
                "--data-dir",
                str(reference_dir),
                "--output-dir",
                str(output_dir),
                "--skip-comparison",
            ]
        )
        assert not output_dir.exists()
