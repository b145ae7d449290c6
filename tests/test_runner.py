import pytest

from optsizer.account import AccountState
from optsizer.calculator import PositionCalculator
from optsizer.multiplier import MultiplierObservation
from optsizer.report import format_observation, history_frame, projected_premiums, summary_lines, trade_plan_lines
from optsizer.runner import CalculatorRunner, main
from optsizer.sizer import PositionParameters, SizingMethod, SizingResult
from optsizer.utils import AppConfig

SETTINGS = """
account:
  capital: 5000
  risk_percent: 1
position:
  take_profit: 0.5
  stop_loss: 1
  premium: 10
  lot_size: 0.15
  method: Conservative
history:
  default_multiplier: 50
  conservative_factor: 1.5
observations:
  - option_change: 20
    underlying_change: 1
  - option_change: 5
    underlying_change: 0
  - option_change: -30
    underlying_change: -1
logging:
  level: debug
"""


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.yml"
    path.write_text(SETTINGS)
    return path


def test_config_builds_account_and_position(settings_file):
    config = AppConfig.load(settings_file)

    assert config.account().risk_amount == 50
    params = config.position()
    assert params.avg_multiplier == 50
    assert params.method is SizingMethod.CONSERVATIVE
    assert config.conservative_factor() == 1.5
    assert config.observations() == [(20, 1), (5, 0), (-30, -1)]


def test_config_coerces_quoted_numbers(tmp_path):
    path = tmp_path / "settings.yml"
    path.write_text(
        'position:\n  take_profit: "0.5"\n  stop_loss: "1"\n  premium: "10"\n  lot_size: "2"\n  avg_multiplier: null\n'
        'observations:\n  - option_change: "20"\n    underlying_change: "2"\n'
    )
    config = AppConfig.load(path)

    params = config.position()
    assert (params.take_profit, params.stop_loss, params.premium, params.lot_size) == (0.5, 1.0, 10.0, 2.0)
    assert params.avg_multiplier is None
    assert params.is_complete() is False
    assert config.observations() == [(20.0, 2.0)]


def test_config_defaults_follow_model_defaults():
    config = AppConfig(settings={})

    assert config.account() == AccountState()
    assert config.position() == PositionParameters()


def test_missing_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load(tmp_path / "nope.yml")


def test_runner_replays_and_skips_invalid(settings_file):
    runner = CalculatorRunner.from_config(AppConfig.load(settings_file))

    recorded = runner.replay(AppConfig.load(settings_file).observations())

    assert [obs.multiplier for obs in recorded] == [20, 30]
    assert runner.calculator.avg_multiplier == 25
    assert runner.calculator.result.effective_multiplier == 30


def test_runner_clear_requires_confirmation():
    answers = iter([False, True])
    runner = CalculatorRunner(PositionCalculator(), confirm=lambda: next(answers))
    runner.calculator.record_observation(10, 1)

    assert runner.clear_history() is False
    assert len(runner.calculator.history) == 1

    assert runner.clear_history() is True
    assert runner.calculator.history == ()
    assert runner.clear_history() is False


def test_main_logs_summary(settings_file, caplog):
    caplog.set_level("INFO")

    main(str(settings_file))

    assert "Lots to buy:" in caplog.text
    assert "Skipping observation (5.0, 0.0)" in caplog.text


def test_projected_premiums():
    result = SizingResult(option_move_tp=21.45, option_move_sl=130)

    at_tp, at_sl = projected_premiums(5, result)

    assert at_tp == pytest.approx(6.0725)
    assert at_sl == pytest.approx(-1.5)


def test_history_frame_is_newest_first():
    history = [MultiplierObservation(10, 1, 10), MultiplierObservation(-6, 2, 3)]

    frame = history_frame(history)

    assert list(frame.columns) == ["option_change", "underlying_change", "multiplier"]
    assert frame["multiplier"].tolist() == [3, 10]
    assert history_frame([]).empty


def test_format_observation_signs_values():
    text = format_observation(MultiplierObservation(101, 1.17, 101 / 1.17))

    assert text == "Multiplier: 86.32x | Option: +101.00% | Underlying: +1.17%"
    assert "Option: -16.39%" in format_observation(MultiplierObservation(-16.39, -0.23, 71.26))


def test_summary_lines_cover_result():
    calc = PositionCalculator()
    calc.record_observation(65, 1)

    lines = summary_lines(calc.snapshot())

    assert lines[0] == "Risk amount: $200.00"
    assert "Current multiplier: 65.00x" in lines
    assert "Lots to buy: 30.769 (lot size 1.0)" in lines
    assert "Potential loss: -$200.00" in lines
    assert lines[-1].startswith("Multiplier: 65.00x")


def test_trade_plan_lines_relate_cost_risk_and_reward():
    lines = trade_plan_lines(PositionCalculator().snapshot())

    assert lines == [
        "Buy 30.769 lots (size: 1.0) at $5.00/contract",
        "Total cost: $153.85 (1.54% of capital)",
        "Risk: $200.00 (130.00% of position)",
        "Reward: $33.00 (21.45% of position)",
    ]


def test_trade_plan_lines_absent_without_lots():
    calc = PositionCalculator()
    calc.set_premium(None)

    assert trade_plan_lines(calc.snapshot()) == []
    assert not any(line.startswith("Total cost") for line in summary_lines(calc.snapshot()))
