import pytest

from classement.config import AppConfig, load_config


def test_defaults_without_file():
    config = load_config(None)
    assert config.engine.timezone == "Europe/Paris"
    assert config.engine.postponed_tokens == ("report",)
    assert config.engine.form_length == 5
    assert config.api.cg_no == 89


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "\n".join(
            [
                "engine:",
                "  timezone: Europe/Brussels",
                "  postponed_tokens: [Report, Remis]",
                "  form_length: 3",
                "  include_unplayed_teams: false",
                "api:",
                "  base_url: https://api.example/api/",
                "  cg_no: 12",
                "  timeout: oops",
            ]
        ),
        encoding="utf-8",
    )
    config = load_config(path)

    assert config.engine.timezone == "Europe/Brussels"
    assert config.engine.postponed_tokens == ("report", "remis")
    assert config.engine.form_length == 3
    assert config.engine.include_unplayed_teams is False
    assert config.api.base_url == "https://api.example/api"
    assert config.api.cg_no == 12
    assert config.api.timeout == 30


def test_load_config_rejects_non_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_from_mapping_ignores_invalid_sections():
    config = AppConfig.from_mapping({"engine": "nope", "api": None})
    assert config.engine.form_length == 5
    assert config.api.timeout == 30
