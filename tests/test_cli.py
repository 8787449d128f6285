"""
Tests for the finprojector command-line interface.
"""

import json
from pathlib import Path

import pytest

from finprojector.cli import main

DEBTS = [
    {
        "id": "card",
        "originalAmount": 5000,
        "currentBalance": 5000,
        "annualRatePercent": 18,
        "minimumPayment": 200,
    }
]

PORTFOLIO = {
    "debts": DEBTS,
    "investments": [
        {
            "id": "etf",
            "initialAmount": 1000,
            "currentValue": 1100,
            "annualRatePercent": 7,
            "purchaseDate": "2023-01-01",
            "type": "stocks",
        }
    ],
    "recurringTransactions": [
        {"id": "rent", "startDate": "2024-01-31", "frequency": "monthly", "amount": 950}
    ],
}


def _write(tmp_path: Path, data) -> str:
    path = tmp_path / "input.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def _run(capsys, *argv):
    code = main(["--now", "2024-01-01", *argv])
    return code, json.loads(capsys.readouterr().out or "null")


class TestDebtCommands:
    def test_debt(self, tmp_path, capsys):
        code, out = _run(capsys, "debt", _write(tmp_path, DEBTS))

        assert code == 0
        assert out["results"]["card"]["months_remaining"] == 32
        assert out["results"]["card"]["payoff_date"] == "2026-09-01"
        assert out["summary"]["total_debt"] == "5000.00"
        assert "schedule" not in out["results"]["card"]

    def test_debt_with_schedule(self, tmp_path, capsys):
        code, out = _run(capsys, "debt", _write(tmp_path, {"debts": DEBTS}), "--schedule")

        assert code == 0
        assert len(out["results"]["card"]["schedule"]["periods"]) == 32

    def test_compare(self, tmp_path, capsys):
        code, out = _run(capsys, "compare", _write(tmp_path, DEBTS), "--extra", "100")

        assert code == 0
        assert out["results"]["card"]["months_saved"] == 12

    def test_flagged_records_exit_2(self, tmp_path, capsys):
        records = DEBTS + [dict(DEBTS[0], id="stuck", minimumPayment=75)]
        code, out = _run(capsys, "debt", _write(tmp_path, records))

        assert code == 2
        assert out["flagged"][0]["instrument_id"] == "stuck"
        assert out["flagged"][0]["error"] == "NonAmortizingDebtError"

    def test_max_periods_override(self, tmp_path, capsys):
        with pytest.warns(Warning):
            code, out = _run(capsys, "--max-periods", "12", "debt", _write(tmp_path, DEBTS))

        assert code == 0
        assert out["results"]["card"]["status"] == "truncated"
        assert out["results"]["card"]["estimated_months"] == 32


def test_investment(tmp_path, capsys):
    code, out = _run(capsys, "investment", _write(tmp_path, PORTFOLIO))

    assert code == 0
    assert out["results"]["etf"]["projected_values"]["12"] == "1177.00"
    assert out["growth_projection"]["0"] == "1100.00"
    assert out["portfolio"]["allocation"][0]["asset_type"] == "stocks"


def test_recurring(tmp_path, capsys):
    code, out = _run(capsys, "recurring", _write(tmp_path, PORTFOLIO), "--days", "91")

    assert code == 0
    assert [item["date"] for item in out["upcoming"]] == ["2024-01-31", "2024-02-29", "2024-03-31"]
    assert out["net_amount"] == "-2850"


def test_portfolio(tmp_path, capsys):
    code, out = _run(capsys, "portfolio", _write(tmp_path, PORTFOLIO))

    assert code == 0
    assert set(out) == {"now", "debts", "investments", "recurring"}
    assert out["now"] == "2024-01-01"


def test_output_file(tmp_path, capsys):
    target = tmp_path / "out.json"
    code = main(["--now", "2024-01-01", "debt", _write(tmp_path, DEBTS), "-o", str(target)])

    assert code == 0
    assert json.loads(target.read_text(encoding="utf-8"))["results"]["card"]["months_remaining"] == 32


def test_config_file(tmp_path, capsys):
    config = tmp_path / "engine.yaml"
    config.write_text("projection:\n  horizons: [6]\n", encoding="utf-8")
    code, out = _run(capsys, "--config", str(config), "investment", _write(tmp_path, PORTFOLIO))

    assert code == 0
    assert list(out["results"]["etf"]["projected_values"]) == ["6"]


@pytest.mark.parametrize(
    "argv",
    [
        ["debt", "/nonexistent/debts.json"],
        ["--now", "2024-13-01", "debt", "-"],
    ],
)
def test_input_errors_exit_1(argv, capsys):
    assert main(argv) == 1


def test_bad_json_exit_1(tmp_path, capsys):
    path = tmp_path / "input.json"
    path.write_text("{not json", encoding="utf-8")
    assert main(["--now", "2024-01-01", "debt", str(path)]) == 1


def test_wrong_section_type_exit_1(tmp_path, capsys):
    assert main(["--now", "2024-01-01", "debt", _write(tmp_path, {"debts": {"id": "x"}})]) == 1


@pytest.mark.parametrize(
    "argv",
    [
        ["compare", "{input}", "--extra", "abc"],
        ["compare", "{input}", "--extra", "-5"],
        ["debt", "{input}", "--extra", "NaN"],
        ["recurring", "{input}", "--days", "-1"],
    ],
)
def test_bad_option_values_exit_1(tmp_path, capsys, argv):
    path = _write(tmp_path, PORTFOLIO)
    code = main(["--now", "2024-01-01", *[a.format(input=path) for a in argv]])

    assert code == 1
    assert capsys.readouterr().out == ""


def test_compare_echoes_extra(tmp_path, capsys):
    code, out = _run(capsys, "compare", _write(tmp_path, DEBTS), "--extra", "100.50")

    assert code == 0
    assert out["extra_payment"] == "100.50"
