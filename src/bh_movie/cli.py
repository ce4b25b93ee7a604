"""
Command-line interface for black hole ray movies.

Usage:
    bh-movie render [config.yaml] [--variant B] [--seconds 10] [--output outputs]
    bh-movie view [config.yaml] [--variant B]
    bh-movie validate [config.yaml] [--variant B]
    bh-movie preview [config.yaml] --output preview.png
    bh-movie scaffold path/to/config.yaml [--variant B]
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

from .assets import AssetLoadingError, TrajectorySet, load_trajectory_set
from .config import ConfigurationError, MovieConfig, build_movie_config, load_movie_config
from .core.colors import hex_to_rgb_float
from .core.playback import OverrunPolicy
from .exporters import create_capture_sink
from .scaffold import write_stub
from .session import MovieSession
from .settings import trajectory_root as default_trajectory_root
from .variants import VariantSpec, available_variants, resolve_variant

Logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


def add_shared_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "config",
        type=Path,
        nargs="?",
        help="Optional YAML session file; environment defaults are used when omitted.",
    )
    parser.add_argument(
        "--variant",
        type=str,
        default=None,
        help=f"Override the scene variant ({', '.join(available_variants())}).",
    )
    parser.add_argument(
        "--trajectories",
        type=Path,
        default=None,
        help="Directory holding the per-variant trajectory folders (defaults to BH_MOVIE_TRAJECTORIES).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bh-movie",
        description="Play precomputed camera and ray trajectories around a black hole.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # render command
    render_parser = subparsers.add_parser(
        "render",
        help="Render offline and capture the frames to a video (or PNG frames).",
    )
    add_shared_config_arguments(render_parser)
    render_parser.add_argument(
        "--seconds",
        type=float,
        default=None,
        help="Capture duration in seconds (overrides playback.capture_duration_s).",
    )
    render_parser.add_argument(
        "--frames",
        type=int,
        default=None,
        help="Stop after this many frames.",
    )
    render_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Root directory for captures (defaults to BH_MOVIE_OUTPUTS or outputs/).",
    )
    render_parser.add_argument(
        "--format",
        choices=("webm", "png"),
        default=None,
        help="Capture container (overrides video.format).",
    )
    render_parser.add_argument(
        "--timestamp",
        type=str,
        default=None,
        help="Override timestamp component of the output directory (mainly for testing).",
    )

    # view command
    view_parser = subparsers.add_parser(
        "view",
        help="Play the movie in a window (captures too when capture is enabled).",
    )
    add_shared_config_arguments(view_parser)
    view_parser.add_argument("--output", type=Path, default=None, help="Root directory for captures.")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate configuration and trajectories; prints a summary without rendering.",
    )
    add_shared_config_arguments(validate_parser)

    # preview command
    preview_parser = subparsers.add_parser(
        "preview",
        help="Plot the full trajectories to a static 3D PNG.",
    )
    add_shared_config_arguments(preview_parser)
    preview_parser.add_argument("--output", type=Path, required=True, help="Path of the PNG to write.")

    # scaffold command
    scaffold_parser = subparsers.add_parser(
        "scaffold",
        help="Write a stub YAML session file.",
    )
    scaffold_parser.add_argument("path", type=Path, help="Path where the YAML stub will be written.")
    scaffold_parser.add_argument("--name", type=str, default="black_hole_rays", help="Movie name metadata.")
    scaffold_parser.add_argument("--variant", type=str, default="A", help="Scene variant (default A).")
    scaffold_parser.add_argument("--trajectories", type=Path, default=None, help="Trajectory root to record.")
    scaffold_parser.add_argument("--capture", action="store_true", help="Enable capture in the stub.")
    scaffold_parser.add_argument("--seconds", type=float, default=None, help="Capture duration in seconds.")
    scaffold_parser.add_argument("--fps", type=float, default=60.0, help="Frames per second (default 60).")

    return parser


def load_config_from_args(args: argparse.Namespace) -> MovieConfig:
    """Load the YAML file (or environment defaults) and apply CLI overrides."""
    config_path: Optional[Path] = args.config
    if config_path is not None:
        config = load_movie_config(config_path)
    else:
        config = build_movie_config()
    if args.variant:
        config.playback.scene_variant = args.variant
    if args.trajectories:
        config.trajectory_root = Path(args.trajectories).resolve()
    return config


def summarize_configuration(config: MovieConfig, variant: VariantSpec, trajectories: TrajectorySet) -> str:
    playback = config.playback
    capture = (
        f"on, {playback.capture_duration_s} s" if playback.capture_enabled and playback.capture_duration_s
        else ("on, until stopped" if playback.capture_enabled else "off")
    )
    width, height = config.video.resolution
    lines = [
        f"Variant {variant.name}: {variant.description}",
        f"  Video: {width}x{height} px @ {playback.fps:.2f} fps | capture {capture} ({config.video.format})",
        f"  Overrun policy: {playback.overrun.value}",
        f"  Trail capacity: {config.scene.trail_capacity} points",
        f"  Frames: {trajectories.frame_count}",
        f"  Camera: {trajectories.sources[0]}",
        f"  Rays ({trajectories.ray_count}):",
    ]
    for source, ray, color in zip(trajectories.sources[1:], trajectories.rays, variant.palette):
        lines.append(f"    - {source.name}: {ray.shape[0]} rows, color #{color:06X}")
    return "\n".join(lines)


def render_command(args: argparse.Namespace) -> int:
    if args.config is not None and not args.config.exists():
        Logger.error("Configuration file not found: %s", args.config)
        return 2

    try:
        config = load_config_from_args(args)
        config.playback.capture_enabled = True
        if args.seconds is not None:
            if args.seconds <= 0:
                raise ConfigurationError("--seconds must be positive")
            config.playback.capture_duration_s = args.seconds
        if args.format:
            config.video.format = args.format

        unbounded = (
            config.playback.capture_duration_s is None
            and args.frames is None
            and config.playback.overrun is not OverrunPolicy.STOP
        )
        if unbounded:
            raise ConfigurationError(
                f"Overrun policy '{config.playback.overrun.value}' never ends; pass --seconds or --frames."
            )

        # Resolve before creating any output so a bad variant leaves nothing behind
        resolve_variant(config.playback.scene_variant)
        capture, output_dir = create_capture_sink(config, output_root=args.output, timestamp=args.timestamp)
        session = MovieSession.from_config(config, capture=capture, frame_clock=True)
    except (ConfigurationError, AssetLoadingError) as exc:
        Logger.error("Render failed: %s", exc)
        return 1
    except Exception as exc:  # pylint: disable=broad-except
        Logger.error("Render failed: %s", exc)
        if Logger.isEnabledFor(logging.DEBUG):
            Logger.exception("Stack trace")
        return 1

    previous_handler = signal.signal(signal.SIGINT, lambda *_: session.request_stop())
    try:
        frames = session.run(max_frames=args.frames)
    finally:
        session.stop()
        signal.signal(signal.SIGINT, previous_handler)

    Logger.info("Render complete: %d frame(s). Artefacts written to: %s", frames, output_dir)
    return 0


def view_command(args: argparse.Namespace) -> int:
    if args.config is not None and not args.config.exists():
        Logger.error("Configuration file not found: %s", args.config)
        return 2

    try:
        config = load_config_from_args(args)
        resolve_variant(config.playback.scene_variant)
        capture = None
        if config.playback.capture_enabled:
            capture, output_dir = create_capture_sink(config, output_root=args.output)
            Logger.info("Capture enabled; writing to %s", output_dir)
        session = MovieSession.from_config(config, capture=capture)
    except Exception as exc:  # pylint: disable=broad-except
        Logger.error("Could not start playback: %s", exc)
        if Logger.isEnabledFor(logging.DEBUG):
            Logger.exception("Stack trace")
        return 1

    try:
        from .gui import run as run_gui  # Local import to avoid Qt initialization unless needed
    except Exception as exc:  # noqa: BLE001
        Logger.error("Viewer UI is unavailable: %s", exc)
        session.stop()
        return 1

    run_gui(session)
    session.stop()
    return 0


def validate_command(args: argparse.Namespace) -> int:
    if args.config is not None and not args.config.exists():
        Logger.error("Configuration file not found: %s", args.config)
        return 2

    try:
        config = load_config_from_args(args)
        variant = resolve_variant(config.playback.scene_variant)
        root = Path(config.trajectory_root or default_trajectory_root())
        trajectories = load_trajectory_set(variant.sources(root))
        print(summarize_configuration(config, variant, trajectories))

        capture_frames = config.capture_frame_count
        if capture_frames is not None and capture_frames > trajectories.frame_count:
            Logger.warning(
                "Capture window (%d frames) is longer than the trajectories (%d frames); overrun policy '%s' applies.",
                capture_frames,
                trajectories.frame_count,
                config.playback.overrun.value,
            )
        Logger.info("Validation succeeded.")
        return 0
    except Exception as exc:  # pylint: disable=broad-except
        Logger.error("Validation failed: %s", exc)
        if Logger.isEnabledFor(logging.DEBUG):
            Logger.exception("Stack trace")
        return 1


def preview_command(args: argparse.Namespace) -> int:
    if args.config is not None and not args.config.exists():
        Logger.error("Configuration file not found: %s", args.config)
        return 2

    try:
        config = load_config_from_args(args)
        variant = resolve_variant(config.playback.scene_variant)
        root = Path(config.trajectory_root or default_trajectory_root())
        trajectories = load_trajectory_set(variant.sources(root))
    except Exception as exc:  # noqa: BLE001
        Logger.error("Preview failed: %s", exc)
        return 1

    try:
        _write_preview_image(args.output, trajectories, variant, config)
        Logger.info("Preview image saved to %s", args.output)
    except Exception as exc:  # noqa: BLE001
        Logger.error("Failed to write preview image: %s", exc)
        return 1
    return 0


def scaffold_command(args: argparse.Namespace) -> int:
    try:
        write_stub(
            target_path=args.path,
            name=args.name,
            variant=args.variant,
            trajectory_root=args.trajectories,
            capture_enabled=args.capture,
            capture_duration_s=args.seconds,
            fps=args.fps,
        )
    except Exception as exc:  # noqa: BLE001
        Logger.error("Scaffold failed: %s", exc)
        return 1

    Logger.info("Session stub written to %s", args.path)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "render":
        return render_command(args)
    if args.command == "view":
        return view_command(args)
    if args.command == "validate":
        return validate_command(args)
    if args.command == "preview":
        return preview_command(args)
    if args.command == "scaffold":
        return scaffold_command(args)

    parser.print_help()
    return 1


def _write_preview_image(
    output_path: Path,
    trajectories: TrajectorySet,
    variant: VariantSpec,
    config: MovieConfig,
) -> None:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig = plt.figure(figsize=(7, 6))
    ax = fig.add_subplot(projection="3d")
    camera = trajectories.camera
    ax.plot(camera[:, 0], camera[:, 1], camera[:, 2], color="0.5", linestyle="--", label="camera")
    for idx, (ray, color) in enumerate(zip(trajectories.rays, variant.palette)):
        rgb = hex_to_rgb_float(color)
        ax.plot(ray[:, 0], ray[:, 1], ray[:, 2], color=rgb, label=f"ray{idx + 1}")
        ax.scatter(*ray[0], marker="o", color=rgb)
        ax.scatter(*ray[-1], marker="s", color=rgb)
    half = config.scene.spin_axis_half_length
    ax.plot([0, 0], [0, 0], [-half, half], color="0.2")
    ax.legend(loc="upper right")
    ax.set_title(f"Trajectory Preview (variant {variant.name})")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")
    fig.tight_layout()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)


if __name__ == "__main__":
    sys.exit(main())
