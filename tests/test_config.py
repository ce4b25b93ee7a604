from pathlib import Path

import pytest

from bh_movie.config import ConfigurationError, MovieConfig, build_movie_config, load_movie_config
from bh_movie.core.playback import OverrunPolicy
from bh_movie.settings import reset_settings_cache
from bh_movie.variants import available_variants, resolve_variant


def test_defaults_match_original_scene():
    config = build_movie_config()
    assert config.playback.capture_enabled is False
    assert config.playback.scene_variant == "A"
    assert config.playback.fps == 60.0
    assert config.playback.overrun is OverrunPolicy.STOP
    assert config.scene.fov_deg == 75.0
    assert config.scene.look_at == (13.0, 0.0, 0.0)
    assert config.scene.trail_capacity == 10000
    assert config.video.codec == "VP80"


def test_environment_supplies_playback_defaults(monkeypatch):
    monkeypatch.setenv("BH_MOVIE_CAPTURE", "1")
    monkeypatch.setenv("BH_MOVIE_CAPTURE_SECONDS", "12")
    monkeypatch.setenv("BH_MOVIE_VARIANT", "2")
    reset_settings_cache()

    config = build_movie_config()
    assert config.playback.capture_enabled is True
    assert config.playback.capture_duration_s == 12.0
    assert config.playback.scene_variant == "2"


def test_yaml_overrides_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("BH_MOVIE_VARIANT", "A")
    reset_settings_cache()
    path = tmp_path / "movie.yaml"
    path.write_text(
        "playback:\n"
        "  scene_variant: 2\n"
        "  capture_enabled: true\n"
        "  capture_duration_s: 2.5\n"
        "  overrun: clamp\n"
        "video:\n"
        "  resolution: [320, 240]\n"
        "scene:\n"
        "  sky_texture: sky/milky_way.jpg\n"
        "trajectory_root: data\n",
        encoding="utf-8",
    )

    config = load_movie_config(path)
    assert config.playback.scene_variant == "2"
    assert config.playback.overrun is OverrunPolicy.CLAMP
    assert config.video.resolution == (320, 240)
    assert config.capture_frame_count == 150
    assert config.trajectory_root == (tmp_path / "data").resolve()
    assert config.scene.sky_texture == (tmp_path / "sky" / "milky_way.jpg").resolve()


def test_missing_file_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        load_movie_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "text",
    [
        "playback: [1, 2]\n",
        "playback:\n  fps: -1\n",
        "playback:\n  overrun: rewind\n",
        "video:\n  codec: VP8\n",
        "scene:\n  near: 10\n  far: 5\n",
        "- just\n- a list\n",
        "playback: {unclosed\n",
    ],
)
def test_invalid_yaml_is_a_configuration_error(tmp_path, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_movie_config(path)


def test_unbounded_capture_has_no_frame_count():
    assert MovieConfig().capture_frame_count is None


@pytest.mark.parametrize(
    "name, expected",
    [("A", "A"), ("a", "A"), ("1", "A"), ("subsupercritical", "A"), ("B", "B"), (" 2 ", "B"), ("Pairwise", "B")],
)
def test_resolve_variant_accepts_aliases(name, expected):
    assert resolve_variant(name).name == expected


@pytest.mark.parametrize("name", ["C", "3", "", "movie"])
def test_unknown_variant_is_fatal(name):
    with pytest.raises(ConfigurationError):
        resolve_variant(name)


def test_variant_sources_put_camera_first():
    variant = resolve_variant("B")
    sources = variant.sources(Path("/data"))
    assert sources[0] == Path("/data/pairwise/cameraTrajectory.csv")
    assert [path.name for path in sources[1:]] == [f"ray{idx}.csv" for idx in range(1, 7)]
    assert variant.radial_axis is True
    assert len(variant.palette) == variant.ray_count == 6


def test_variant_a_has_three_rays_and_no_radial_axis():
    variant = resolve_variant("A")
    assert variant.palette == (0xFF0000, 0x00FF00, 0x48B8D0)
    assert not variant.radial_axis
    assert available_variants() == ["A", "B"]
