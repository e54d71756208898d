import pytest

from ob_scanner.strategies.smc_detector import DetectorConfig
from ob_scanner.utils.config_loader import load_config, load_credentials


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_detector_section_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "detector:\n"
        "  impulsive_min_body_ratio: 0.3\n"
        "  require_fvg: false\n"
        "  unknown_key: 1\n"
    )

    config = DetectorConfig.from_dict(load_config(str(path))["detector"])

    assert config.impulsive_min_body_ratio == 0.3
    assert config.require_fvg is False
    assert config.significant_volume_factor == 0.6
    assert config.min_fvg_depth_ratio == 0.05


def test_default_detector_config():
    assert DetectorConfig.from_dict(None) == DetectorConfig()
    assert DetectorConfig(require_bos=False, require_fvg=False).describe() == \
        "Required: C3 close past C2, Unmitigated"


def test_load_credentials(tmp_path, monkeypatch):
    # Registers cleanup for whatever load_dotenv writes
    for name in ("BINANCE_FUTURES_BASE_URL", "SCANNER_API_KEY"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    env = tmp_path / ".env"
    env.write_text("SCANNER_API_KEY=secret\n")

    creds = load_credentials(str(env))

    assert creds["api_key"] == "secret"
    assert creds["futures_base_url"] == "https://fapi.binance.com"
