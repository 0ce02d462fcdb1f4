"""
Tests for the analyze_strategy command line script.
"""

import importlib.util
import json
import sys
from datetime import date
from pathlib import Path

import pytest
import yaml
from loguru import logger

SCRIPT = Path(__file__).parent.parent / "scripts" / "analyze_strategy.py"


@pytest.fixture(scope="module")
def script():
    spec = importlib.util.spec_from_file_location("analyze_strategy", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


def _strategy_file(tmp_path, data):
    path = tmp_path / "strategy.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestAnalyzeStrategyScript:
    """Test main() end to end."""

    def test_builder_format_with_validation(self, script, tmp_path, capsys):
        path = _strategy_file(tmp_path, {
            "builder": "iron_condor",
            "symbol": "SPY",
            "underlying_price": 450,
            "params": {"dte": 45, "volatility": 0.2},
        })

        exit_code = script.main([path, "--as-of", "2026-01-20", "--validate"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["strategy"]["strategy_type"] == "iron_condor"
        assert output["analysis"]["as_of"] == "2026-01-20"
        assert output["validation"]["is_valid"] is True
        assert "is_valid" in output["greeks_validation"]

    def test_spec_format(self, script, tmp_path, capsys):
        path = _strategy_file(tmp_path, {
            "type": "vertical_spread",
            "underlying": "SPY",
            "option_type": "call",
            "long_strike": 450,
            "short_strike": 460,
            "expiration": date(2026, 3, 20),
            "long_premium": 6.0,
            "short_premium": 2.0,
        })

        exit_code = script.main([path, "--price", "450", "--as-of", "2026-01-20"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["strategy"]["max_loss"] == pytest.approx(400.0)
        assert "validation" not in output

    def test_implied_volatility_from_leg(self, script, tmp_path, capsys):
        path = _strategy_file(tmp_path, {
            "type": "long_call",
            "underlying": "SPY",
            "strike": 450,
            "expiration": date(2026, 3, 20),
            "premium": 6.0,
            "underlying_price": 450,
        })

        exit_code = script.main([path, "--as-of", "2026-01-20", "--implied-from-leg", "0"])

        assert exit_code == 0
        profile = json.loads(capsys.readouterr().out)["analysis"]["volatility_profile"]
        # 6.00 for an at-the-money 59-day call implies well under 10% volatility
        assert profile[-1]["volatility"] < 0.15

    def test_missing_price(self, script, tmp_path):
        path = _strategy_file(tmp_path, {
            "type": "long_put",
            "underlying": "SPY",
            "strike": 440,
            "expiration": date(2026, 3, 20),
            "premium": 5.0,
        })

        assert script.main([path, "--as-of", "2026-01-20"]) == 1

    def test_unknown_type(self, script, tmp_path):
        path = _strategy_file(tmp_path, {"type": "jade_lizard", "underlying": "SPY"})

        assert script.main([path]) == 1

    def test_missing_file(self, script, tmp_path):
        assert script.main([str(tmp_path / "missing.yaml")]) == 1

    def test_leg_index_out_of_range(self, script, tmp_path):
        path = _strategy_file(tmp_path, {
            "builder": "vertical_spread",
            "symbol": "SPY",
            "underlying_price": 450,
            "params": {"direction": "bull"},
        })

        assert script.main([path, "--as-of", "2026-01-20", "--implied-from-leg", "5"]) == 1
