import numpy as np
import pytest

from bh_movie.config import SceneConfig
from bh_movie.core.camera import PerspectiveCamera
from bh_movie.core.colors import hex_to_bgr
from bh_movie.core.renderer import SceneRenderer, occluded_by_sphere
from bh_movie.core.scene import build_scene
from bh_movie.variants import resolve_variant


RESOLUTION = (160, 120)


def _camera(position=(60.0, 0.0, 0.0), target=(0.0, 0.0, 0.0)):
    camera = PerspectiveCamera(fov_deg=75.0, resolution=RESOLUTION)
    camera.set_position(position)
    camera.look_at(target)
    return camera


def test_target_projects_to_frame_centre():
    camera = _camera()
    pixels, depth = camera.project(np.array([[0.0, 0.0, 0.0]]))
    np.testing.assert_allclose(pixels[0], (80.0, 60.0))
    assert depth[0] == pytest.approx(60.0)


def test_up_is_positive_z_and_right_follows():
    camera = _camera()
    pixels, _ = camera.project(np.array([[0.0, 0.0, 10.0], [0.0, 10.0, 0.0]]))
    assert pixels[0, 1] < 60.0  # above centre
    assert pixels[1, 0] > 80.0  # +y is to the right when looking along -x


def test_points_behind_camera_have_no_pixels():
    camera = _camera()
    pixels, depth = camera.project(np.array([[100.0, 0.0, 0.0]]))
    assert depth[0] < 0
    assert np.isnan(pixels[0]).all()
    assert not camera.in_view_depth(depth)[0]


def test_projected_radius_of_sphere():
    camera = _camera()
    radius = camera.projected_radius((0.0, 0.0, 0.0), 13.0)
    expected = camera.focal_px * np.tan(np.arcsin(13.0 / 60.0))
    assert radius == pytest.approx(expected)
    assert camera.projected_radius((100.0, 0.0, 0.0), 1.0) == 0.0


def test_sphere_hides_points_behind_it():
    eye = np.array([60.0, 0.0, 0.0])
    points = np.array([[-30.0, 0.0, 0.0], [30.0, 0.0, 0.0], [-30.0, 0.0, 40.0], [5.0, 0.0, 0.0]])
    hidden = occluded_by_sphere(eye, points, np.zeros(3), 13.0)
    assert hidden.tolist() == [True, False, False, True]


def test_everything_hidden_from_inside_sphere():
    hidden = occluded_by_sphere(np.zeros(3), np.array([[50.0, 0.0, 0.0]]), np.zeros(3), 13.0)
    assert hidden.tolist() == [True]


def _renderer(variant="A", sky=None):
    scene = build_scene(resolve_variant(variant), SceneConfig(), sky_texture=sky)
    return SceneRenderer(scene, RESOLUTION), scene


def test_black_hole_covers_centre_of_sky():
    sky = np.full((64, 128, 3), 255, dtype=np.uint8)
    renderer, _ = _renderer(sky=sky)
    frame = renderer.render(_camera())
    assert frame.shape == (120, 160, 3)
    assert frame[60, 80].tolist() == [0, 0, 0]
    assert frame[2, 2].tolist() == [255, 255, 255]
    assert renderer.frames_rendered == 1


def test_ray_marker_drawn_in_palette_color():
    renderer, scene = _renderer()
    ray = scene.rays[0]
    ray.move_to((30.0, 0.0, 20.0))
    camera = _camera()
    frame = renderer.render(camera)
    pixels, _ = camera.project(np.array([ray.position]))
    u, v = np.round(pixels[0]).astype(int)
    assert tuple(frame[v, u]) == hex_to_bgr(ray.color)


def test_marker_behind_black_hole_is_hidden():
    renderer, scene = _renderer()
    ray = scene.rays[1]
    ray.move_to((-30.0, 0.0, 0.0))
    frame = renderer.render(_camera())
    assert frame[60, 80].tolist() == [0, 0, 0]
    assert not np.any(np.all(frame == hex_to_bgr(ray.color), axis=-1))


def test_trail_is_drawn_once_two_points_exist():
    renderer, scene = _renderer()
    ray = scene.rays[2]
    color = hex_to_bgr(ray.color)
    ray.move_to((20.0, -20.0, 25.0))
    ray.move_to((20.0, 20.0, 25.0))
    frame = renderer.render(_camera())
    # midpoint of the segment, away from the end markers
    column = frame[5:18, 80]
    assert np.any(np.all(column == color, axis=-1))


def test_variant_b_draws_radial_axis():
    _, scene_a = _renderer("A")
    _, scene_b = _renderer("B")
    assert len(scene_a.lines) == 1
    assert len(scene_b.lines) == 2
    assert scene_b.lines[1].end == (40.0, 0.0, 0.0)


def test_rejects_camera_of_other_size():
    renderer, _ = _renderer()
    camera = PerspectiveCamera(fov_deg=75.0, resolution=(10, 10))
    with pytest.raises(ValueError):
        renderer.render(camera)
