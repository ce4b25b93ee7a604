import yaml

from bh_movie.cli import main


def test_scaffold_then_validate(tmp_path, make_trajectory_root, capsys):
    root = make_trajectory_root(frames=5)
    config_path = tmp_path / "movie.yaml"

    assert main(["scaffold", str(config_path), "--trajectories", str(root), "--seconds", "2"]) == 0
    data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    assert data["playback"]["scene_variant"] == "A"
    assert data["trajectory_root"] == str(root)

    assert main(["validate", str(config_path)]) == 0
    out = capsys.readouterr().out
    assert "Variant A" in out
    assert "Frames: 5" in out


def test_scaffold_refuses_to_overwrite(tmp_path):
    config_path = tmp_path / "movie.yaml"
    config_path.write_text("{}\n", encoding="utf-8")
    assert main(["scaffold", str(config_path)]) == 1


def test_validate_unknown_variant_fails(make_trajectory_root):
    root = make_trajectory_root()
    assert main(["validate", "--trajectories", str(root), "--variant", "Q"]) == 1


def test_validate_missing_config_file(tmp_path):
    assert main(["validate", str(tmp_path / "absent.yaml")]) == 2


def test_validate_missing_trajectories(tmp_path):
    assert main(["validate", "--trajectories", str(tmp_path / "nowhere")]) == 1


def test_render_png_frames(tmp_path, make_trajectory_root):
    root = make_trajectory_root(frames=6)
    config_path = tmp_path / "movie.yaml"
    config_path.write_text("video:\n  resolution: [48, 32]\n", encoding="utf-8")
    output = tmp_path / "out"

    code = main(
        [
            "render",
            str(config_path),
            "--trajectories",
            str(root),
            "--format",
            "png",
            "--output",
            str(output),
            "--timestamp",
            "test",
        ]
    )
    assert code == 0
    frames = sorted((output / "captures" / "test" / "frames").glob("*.png"))
    assert len(frames) == 6


def test_render_stops_after_requested_seconds(tmp_path, make_trajectory_root):
    root = make_trajectory_root(frames=40)
    config_path = tmp_path / "movie.yaml"
    config_path.write_text(
        "playback:\n  fps: 10\n  overrun: loop\nvideo:\n  resolution: [48, 32]\n  format: png\n",
        encoding="utf-8",
    )
    output = tmp_path / "out"
    code = main(
        ["render", str(config_path), "--trajectories", str(root), "--seconds", "0.5",
         "--output", str(output), "--timestamp", "t"]
    )
    assert code == 0
    assert len(list((output / "captures" / "t" / "frames").glob("*.png"))) == 5


def test_render_refuses_unbounded_loop(tmp_path, make_trajectory_root):
    root = make_trajectory_root()
    config_path = tmp_path / "movie.yaml"
    config_path.write_text("playback:\n  overrun: loop\n", encoding="utf-8")
    assert main(["render", str(config_path), "--trajectories", str(root)]) == 1


def test_render_unknown_variant_writes_nothing(tmp_path, make_trajectory_root):
    root = make_trajectory_root()
    output = tmp_path / "out"
    code = main(["render", "--trajectories", str(root), "--variant", "nope", "--output", str(output)])
    assert code == 1
    assert not output.exists()


def test_preview_writes_png(tmp_path, make_trajectory_root):
    root = make_trajectory_root(frames=4)
    target = tmp_path / "preview" / "plot.png"
    assert main(["preview", "--trajectories", str(root), "--output", str(target)]) == 0
    assert target.exists()
