"""
MapSketch CLI - Main entry point.

Replays scripted drawing sessions and exposes the geometry helpers.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import cv2

from mapsketch_draw import Coordinate, DrawConfig, DrawError, ShapeKind
from mapsketch_draw import circle_to_ring, haversine_distance_meters
from mapsketch_draw.rendering import ShapeVisualizer, Viewport
from mapsketch_mqtt import LogEvent, ShapeEventPublisher, create_logger

from .registry import StepNotAvailableError
from .replay import SessionReplayer, load_yaml_config


def setup_logging(verbose: bool = False) -> None:
    """Console logging for the drawing core (stderr, stdout carries JSON)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def write_snapshot(replayer: SessionReplayer, output: Path) -> None:
    """
    Render committed shapes and the live preview to an image file.

    Raises:
        ValueError: If there is nothing to draw or the image cannot be written
    """
    committed = replayer.engine.get_committed_geometry()
    preview = replayer.engine.get_preview_geometry()
    viewport = Viewport.fit([committed, preview])

    frame = ShapeVisualizer().render(committed, preview, viewport)
    if not cv2.imwrite(str(output), frame):
        raise ValueError(f"Could not write snapshot to {output}")


def run_replay(args: argparse.Namespace) -> None:
    """Replay a script and print the committed FeatureCollection."""
    cli_logger = create_logger("cli")

    config = DrawConfig.from_yaml(args.config) if args.config else DrawConfig()
    script = load_yaml_config(args.script)
    steps = script.get('steps')
    if not isinstance(steps, list):
        raise ValueError(f"{args.script}: 'steps' must be a list")

    replayer = SessionReplayer(config=config)

    publisher = None
    if args.publish:
        publisher = ShapeEventPublisher(
            broker_host=args.broker,
            broker_port=args.port,
            topic=args.topic,
            session_id=args.session_id,
            logger=create_logger("publisher"),
        )
        if not publisher.connect():
            raise ConnectionError(f"Cannot connect to MQTT broker at {args.broker}:{args.port}")
        publisher.attach(replayer.engine)

    try:
        result = replayer.run(steps)
    finally:
        replayer.engine.teardown()
        if publisher is not None:
            publisher.disconnect()

    cli_logger.info(
        event=LogEvent.SESSION_REPLAYED,
        message=f"Replayed {result.steps_run} steps",
        metadata={
            'script': str(args.script),
            'committed_ids': result.committed_ids,
            'validation_errors': result.validation_errors,
        }
    )

    if args.snapshot:
        write_snapshot(replayer, args.snapshot)
        print(f"✅ Snapshot written to {args.snapshot}", file=sys.stderr)

    kind = ShapeKind(args.kind) if args.kind else None
    print(json.dumps(replayer.engine.get_committed_geometry(kind), indent=2))


def run_circle(args: argparse.Namespace) -> None:
    ring = circle_to_ring(Coordinate(args.lng, args.lat), args.radius, steps=args.steps)
    print(json.dumps({"type": "Polygon", "coordinates": [[c.to_list() for c in ring]]}))


def run_distance(args: argparse.Namespace) -> None:
    distance = haversine_distance_meters(
        Coordinate(args.lng1, args.lat1),
        Coordinate(args.lng2, args.lat2),
    )
    print(f"{distance:.3f}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mapsketch",
        description="MapSketch CLI - Replay drawing sessions and compute shape geometry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replay a scripted session and print committed GeoJSON
  mapsketch replay config/sessions/park.yaml

  # Only circles, with a PNG snapshot
  mapsketch replay config/sessions/park.yaml --kind circle --snapshot park.png

  # Publish shape events while replaying
  mapsketch replay config/sessions/park.yaml --publish --broker localhost --topic mapsketch/shapes

  # Geometry helpers
  mapsketch circle 127.0 37.5 120 --steps 32
  mapsketch distance 127.0 37.5 127.01 37.5
"""
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # replay command
    replay = subparsers.add_parser('replay', help='Replay a scripted drawing session')
    replay.add_argument('script', type=Path, help='Path to session script YAML')
    replay.add_argument('--config', type=Path, help='Path to drawing config YAML')
    replay.add_argument('--snapshot', type=Path, help='Write a PNG/JPG snapshot here')
    replay.add_argument(
        '--kind',
        choices=[kind.value for kind in ShapeKind],
        help='Only print shapes of this kind'
    )
    replay.add_argument('--publish', action='store_true', help='Publish shape events via MQTT')
    replay.add_argument('--broker', default='localhost', help='MQTT broker host (default: localhost)')
    replay.add_argument('--port', type=int, default=1883, help='MQTT broker port (default: 1883)')
    replay.add_argument('--topic', default='mapsketch/shapes', help='MQTT topic (default: mapsketch/shapes)')
    replay.add_argument('--session-id', default='cli', help='Session id stamped on messages (default: cli)')

    # circle command
    circle = subparsers.add_parser('circle', help='Print the polygon ring approximating a circle')
    circle.add_argument('lng', type=float, help='Center longitude')
    circle.add_argument('lat', type=float, help='Center latitude')
    circle.add_argument('radius', type=float, help='Radius in meters')
    circle.add_argument('--steps', type=int, default=64, help='Ring segments (default: 64)')

    # distance command
    distance = subparsers.add_parser('distance', help='Great-circle distance in meters')
    distance.add_argument('lng1', type=float)
    distance.add_argument('lat1', type=float)
    distance.add_argument('lng2', type=float)
    distance.add_argument('lat2', type=float)

    return parser


COMMANDS = {
    'replay': run_replay,
    'circle': run_circle,
    'distance': run_distance,
}


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)

    try:
        COMMANDS[args.command](args)
    except (DrawError, StepNotAvailableError, ValueError, FileNotFoundError, ConnectionError) as e:
        create_logger("cli").error(
            event=LogEvent.SCRIPT_ERROR,
            message=f"{args.command} failed",
            exc_info=e,
        )
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
