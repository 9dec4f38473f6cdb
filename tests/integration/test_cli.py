"""
Integration tests for the opencsp command line.
"""

import json
import logging

import pytest

from opencsp.cli import build_parser, main
from opencsp.master import HIGHS_AVAILABLE


@pytest.fixture(autouse=True)
def isolated_cli(tmp_path, monkeypatch):
    """Run in an empty directory and restore global logging state afterwards."""
    monkeypatch.chdir(tmp_path)
    for name in ("OPENCSP_MAX_TIME", "OPENCSP_MASTER_TIME_LIMIT",
                 "OPENCSP_PRICING_TIME_LIMIT", "OPENCSP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging.captureWarnings(False)


GENERATE_ARGS = [
    "--stock-length", "100",
    "--num-items", "5",
    "--min-item-length", "10",
    "--max-item-length", "45",
    "--min-demand", "1",
    "--max-demand", "20",
    "--seed", "11",
]


class TestParser:
    """Tests for argument parsing."""

    def test_solve_defaults(self):
        args = build_parser().parse_args(["solve", "inst.csv"])
        assert args.command == "solve"
        assert args.max_time is None
        assert args.json_output is None

    def test_generate_requires_bounds(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["generate", "--stock-length", "10"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestGenerate:
    """Tests for `opencsp generate`."""

    def test_writes_csv(self, tmp_path):
        output = tmp_path / "inst.csv"

        code = main(["generate", *GENERATE_ARGS, "--output", str(output)])

        assert code == 0
        lines = output.read_text().splitlines()
        assert lines[0] == "Item,StockLength,Length,Demand"
        assert len(lines) == 6

    def test_invalid_interval(self, tmp_path):
        code = main([
            "generate", "--stock-length", "100", "--num-items", "3",
            "--min-item-length", "50", "--max-item-length", "10",
            "--min-demand", "1", "--max-demand", "5",
            "--output", str(tmp_path / "bad.csv"),
        ])
        assert code == 2

    def test_infeasible_interval(self, tmp_path):
        code = main([
            "generate", "--stock-length", "10", "--num-items", "3",
            "--min-item-length", "20", "--max-item-length", "30",
            "--min-demand", "1", "--max-demand", "5",
            "--output", str(tmp_path / "bad.csv"),
        ])
        assert code == 2


class TestSolve:
    """Tests for `opencsp solve`."""

    def test_missing_file(self, tmp_path):
        assert main(["solve", str(tmp_path / "missing.csv")]) == 2

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("StockLength,Length\n10,3\n")
        assert main(["solve", str(path)]) == 2

    @pytest.mark.parametrize("option", ["--max-time", "--master-time-limit", "--max-iterations"])
    def test_negative_budget_rejected(self, tmp_path, option):
        path = tmp_path / "inst.csv"
        path.write_text("StockLength,Length,Demand\n10,3,5\n")

        with pytest.raises(SystemExit) as exc_info:
            main(["solve", str(path), option, "-5"])

        assert exc_info.value.code == 2

    def test_infeasible_file(self, tmp_path):
        path = tmp_path / "long.csv"
        path.write_text("StockLength,Length,Demand\n10,12,1\n")
        assert main(["solve", str(path)]) == 2

    @pytest.mark.skipif(not HIGHS_AVAILABLE, reason="HiGHS not installed")
    def test_generate_then_solve(self, tmp_path, capsys):
        instance_path = tmp_path / "inst.csv"
        result_path = tmp_path / "result.json"
        assert main(["generate", *GENERATE_ARGS, "--output", str(instance_path)]) == 0

        code = main([
            "solve", str(instance_path),
            "--max-time", "60",
            "--master-time-limit", "5",
            "--pricing-time-limit", "5",
            "--json", str(result_path),
        ])

        assert code == 0
        assert "LP objective" in capsys.readouterr().out
        result = json.loads(result_path.read_text())
        assert result["status"] == "CONVERGED"
        assert result["proven_optimal"] is True
        assert len(result["dual_values"]) == 5

    @pytest.mark.skipif(not HIGHS_AVAILABLE, reason="HiGHS not installed")
    def test_iteration_limit_option(self, csv_instance_path, tmp_path):
        result_path = tmp_path / "result.json"

        code = main([
            "--verbose", "--log-file", str(tmp_path / "run.log"),
            "solve", str(csv_instance_path),
            "--max-iterations", "1", "--json", str(result_path),
        ])

        assert code == 0
        assert json.loads(result_path.read_text())["status"] == "ITERATION_LIMIT"
        assert "Iteration 1" in (tmp_path / "run.log").read_text()

    @pytest.mark.skipif(not HIGHS_AVAILABLE, reason="HiGHS not installed")
    def test_config_file(self, csv_instance_path, tmp_path):
        config_path = tmp_path / "custom.toml"
        config_path.write_text("[budgets]\nmax_iterations = 1\n")
        result_path = tmp_path / "result.json"

        code = main([
            "--config", str(config_path),
            "solve", str(csv_instance_path), "--json", str(result_path),
        ])

        assert code == 0
        assert json.loads(result_path.read_text())["status"] == "ITERATION_LIMIT"
