from pathlib import Path

from gassi.config.rule_config import DEFAULT_CONFIG_PATH, RuleConfig, load_rule_config


def test_default_config_is_cached():
    assert load_rule_config() is load_rule_config()


def test_packaged_defaults(cfg):
    assert cfg.timezone() == "Europe/Berlin"
    assert cfg.days_per_month() == 30.44
    assert cfg.growth_knots()[0] == (2.0, 7.0)
    assert cfg.growth_knots()[-1] == (18.0, 34.0)
    assert cfg.growth_model_age_range() == (2.0, 18.0)
    assert cfg.rule_age_range("weight_deviation") is None
    assert cfg.interval_min_events() == 3
    assert cfg.interval_overnight_gap_minutes() == 720
    assert cfg.cluster_gap_hours() == 1.5
    assert cfg.match_window_hours() == 2.0
    assert cfg.lookback_days(weekend=False) == 14
    assert cfg.lookback_days(weekend=True) == 60
    assert cfg.dedup_include_kind() is False


def test_overrides_merge_into_a_new_config(cfg):
    tuned = cfg.with_overrides({"rules": {"missed_break": {"params": {"alert_after_hours": 10}}}})

    assert tuned.rule_params("missed_break")["alert_after_hours"] == 10
    # siblings survive the merge
    assert tuned.rule_params("missed_break")["warning_after_hours"] == 6
    assert cfg.rule_params("missed_break")["alert_after_hours"] == 8


def test_missing_sections_fall_back_to_defaults():
    empty = RuleConfig(raw={})

    assert empty.timezone() == "Europe/Berlin"
    assert empty.rule_enabled("anything") is True
    assert empty.rule_params("anything") == {}
    assert empty.growth_model_age_range() == (2.0, 18.0)
    assert empty.lookback_days(weekend=True) == 60


def test_explicit_path_is_read_fresh(tmp_path: Path):
    p = tmp_path / "rules.yaml"
    p.write_text("time:\n  timezone: UTC\n", encoding="utf-8")

    custom = load_rule_config(p)

    assert custom.timezone() == "UTC"
    assert load_rule_config().timezone() == "Europe/Berlin"
    assert DEFAULT_CONFIG_PATH.name == "rules.yaml"
