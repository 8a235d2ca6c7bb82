import pytest

from errors import SettingsError
from settings import AppConfig, ModelTransform, Settings, load_settings


def test_defaults_match_browser_app():
    settings = Settings()
    assert settings.tracking_smoothing == 0.5
    assert settings.lip_sync_sensitivity == 0.7
    assert settings.blink_interval == 4.0
    assert settings.mirror_mode


@pytest.mark.parametrize(
    "changes",
    [
        {"tracking_smoothing": 1.0},
        {"tracking_smoothing": -0.1},
        {"lip_sync_sensitivity": 1.5},
        {"blink_interval": 0},
        {"tracking_speed": float("nan")},
        {"tracking_smoothing": "0.5"},
        {"blink_interval": None},
        {"mirror_mode": "no"},
        {"tracking_speed": True},
    ],
)
def test_invalid_settings_rejected(changes):
    with pytest.raises(SettingsError):
        Settings(**changes)


def test_replace_validates():
    with pytest.raises(SettingsError):
        Settings().replace(tracking_smoothing=2.0)


def test_toggled():
    assert Settings(debug_mode=False).toggled("debug_mode").debug_mode
    with pytest.raises(SettingsError):
        Settings().toggled("tracking_speed")


def test_transform_nudges_clamp_scale():
    transform = ModelTransform()
    assert transform.rescaled(10.0).scale == 3.0
    assert transform.rescaled(-10.0).scale == 0.1
    assert transform.moved(dx=0.02, dy=-0.1).position == pytest.approx((0.02, -0.6, 0.0))
    assert transform.rotated(10.0).rotated(-25.0).rotation_y == -15.0


def test_load_settings_accepts_camel_case(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "settings:\n"
        "  trackingSmoothing: 0.2\n"
        "  mirrorMode: false\n"
        "  lip_sync_sensitivity: 0.9\n"
        "  showFPS: false\n"
        "transform:\n"
        "  position: {x: 0.1, y: -0.4, z: 0}\n"
        "  scale: 1.2\n"
        "vmcPort: 39540\n",
        encoding="utf-8",
    )
    config = load_settings(path)
    assert config.settings.tracking_smoothing == 0.2
    assert not config.settings.mirror_mode
    assert config.settings.lip_sync_sensitivity == 0.9
    assert not config.settings.show_fps
    assert config.transform.position == (0.1, -0.4, 0.0)
    assert config.transform.scale == 1.2
    assert config.vmc_port == 39540


def test_load_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_settings(path) == AppConfig()


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("settings:\n  warpDrive: true\n", encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)
    path.write_text("renderer: {}\n", encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)


def test_invalid_yaml_rejected(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("settings: [unclosed\n", encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)


def test_wrong_value_types_in_file_rejected(tmp_path):
    path = tmp_path / "typed.yaml"
    path.write_text('settings:\n  trackingSmoothing: "0.5"\n', encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)
    path.write_text('transform:\n  scale: big\n', encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)
