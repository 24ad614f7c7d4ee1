from __future__ import annotations

from uireel.config.runtime_config import default_policy, normalized_editable, parse_env, validate_setup


def test_default_policy_values(monkeypatch) -> None:
    for key in ("UIREEL_CANVAS_WIDTH", "UIREEL_FINAL_HOLD_S", "UIREEL_RENDER_MODE", "UIREEL_MAX_ACTIONS"):
        monkeypatch.delenv(key, raising=False)
    policy = default_policy()
    assert (policy.canvas_width, policy.canvas_height) == (1920, 1080)
    assert policy.final_hold_s == 1.0
    assert policy.render_mode == "screenshot"
    assert policy.max_actions == 500


def test_policy_env_values_are_clamped_or_ignored(monkeypatch) -> None:
    monkeypatch.setenv("UIREEL_CANVAS_WIDTH", "99999")
    monkeypatch.setenv("UIREEL_FINAL_HOLD_S", "not-a-number")
    monkeypatch.setenv("UIREEL_RENDER_MODE", "Hybrid")
    monkeypatch.setenv("UIREEL_FRAME_RATE", "0")
    policy = default_policy()
    assert policy.canvas_width == 7680
    assert policy.final_hold_s == 1.0
    assert policy.render_mode == "hybrid"
    assert policy.frame_rate == 1


def test_validate_setup_reports_errors_and_warnings(tmp_path) -> None:
    result = validate_setup(
        {
            "UIREEL_CANVAS_WIDTH": "abc",
            "UIREEL_MAX_SCENES": "0",
            "UIREEL_FINAL_HOLD_S": "-1",
            "UIREEL_RENDER_MODE": "hybrid",
            "UIREEL_ASSETS_DIR": str(tmp_path / "missing"),
            "UIREEL_COLOUR": "blue",
        }
    )
    assert result["ok"] is False
    assert "UIREEL_CANVAS_WIDTH must be an integer" in result["errors"]
    assert "UIREEL_MAX_SCENES must be between 1 and 1000" in result["errors"]
    assert "UIREEL_FINAL_HOLD_S must not be negative" in result["errors"]
    assert any("is not a directory" in row for row in result["warnings"])
    assert "UIREEL_COLOUR is not a recognised setting" in result["warnings"]


def test_validate_setup_rejects_final_hold_above_clamp(monkeypatch) -> None:
    result = validate_setup({"UIREEL_FINAL_HOLD_S": "90"})
    assert result["ok"] is False
    assert result["errors"] == ["UIREEL_FINAL_HOLD_S must be at most 60"]
    assert validate_setup({"UIREEL_FINAL_HOLD_S": "60"})["ok"] is True

    monkeypatch.setenv("UIREEL_FINAL_HOLD_S", "90")
    assert default_policy().final_hold_s == 60.0


def test_validate_setup_accepts_hybrid_with_assets(tmp_path) -> None:
    result = validate_setup({"UIREEL_RENDER_MODE": "hybrid", "UIREEL_ASSETS_DIR": str(tmp_path)})
    assert result == {"ok": True, "errors": [], "warnings": []}


def test_parse_env_and_normalized_editable(tmp_path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("# comment\nUIREEL_RENDER_MODE=reconstructed\nOTHER=1\n\n", encoding="utf-8")
    values = parse_env(env_path)
    assert values == {"UIREEL_RENDER_MODE": "reconstructed", "OTHER": "1"}
    assert normalized_editable(values) == {"UIREEL_RENDER_MODE": "reconstructed"}
    assert parse_env(tmp_path / "absent.env") == {}
