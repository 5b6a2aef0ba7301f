"""CLI entry point for chronoglobe."""

import argparse
import logging
import random
import sys
from pathlib import Path

from chronoglobe.config import Config, load_config
from chronoglobe.models import ViewMode, ZoomLevel
from chronoglobe.scheduler import ManualScheduler
from chronoglobe.snapshot import SnapshotError, load_snapshot
from chronoglobe.timeline_view import TimelineView

logger = logging.getLogger(__name__)


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("snapshot", help="YAML/JSON file with chapters and memories")
    p.add_argument("--birth-year", type=int, default=None, help="Overrides the snapshot's birth year")
    p.add_argument("--current-year", type=int, default=None, help="Defaults to this year")
    p.add_argument(
        "--zoom", choices=[z.value for z in ZoomLevel], default=ZoomLevel.DECADES.value,
        help="Timeline zoom level",
    )
    p.add_argument("--view-year", type=int, default=None, help="Year cursor for years/months zoom")


def _add_globe_opts(p: argparse.ArgumentParser) -> None:
    p.add_argument("--mode", choices=[m.value for m in ViewMode], default=None,
                   help="Globe or list disclosure (default from config)")
    p.add_argument("--frames", type=int, default=0, help="Auto-rotation frames to run first")
    p.add_argument("--seed", type=int, default=None, help="Seed for sphere positions")


def build_view(args: argparse.Namespace, config: Config) -> TimelineView:
    snap = load_snapshot(Path(args.snapshot))
    view = TimelineView(
        snap.chapters, snap.memories,
        scheduler=ManualScheduler(),
        birth_year=args.birth_year or snap.birth_year,
        current_year=args.current_year,
        config=config,
        rng=random.Random(args.seed) if getattr(args, "seed", None) is not None else None,
    )
    zoom = ZoomLevel(args.zoom)
    while view.zoom.zoom_level != zoom and view.zoom.zoom_in():
        pass
    if args.view_year is not None:
        view.zoom.view_year = args.view_year
    return view


def _disclose(view: TimelineView, chapter_id: str, args: argparse.Namespace) -> bool:
    view.tap_chapter(chapter_id)
    if view.globe is None:
        print(f"Chapter not found: {chapter_id}")
        return False
    if args.mode:
        view.globe.set_view_mode(ViewMode(args.mode))
    if args.frames:
        view.scheduler.run_frames(args.frames)  # type: ignore[attr-defined]
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Chapter timeline and memory globe")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    # layout command
    layout_parser = sub.add_parser("layout", help="Print chapter placements")
    _add_common(layout_parser)

    # markers command
    markers_parser = sub.add_parser("markers", help="Print timeline axis markers")
    _add_common(markers_parser)

    # render command
    render_parser = sub.add_parser("render", help="Write the timeline as static HTML")
    _add_common(render_parser)
    _add_globe_opts(render_parser)
    render_parser.add_argument("-o", "--output", default="data/timeline.html", help="Output HTML path")
    render_parser.add_argument("--disclose", default=None, help="Chapter id to open")

    # globe command
    globe_parser = sub.add_parser("globe", help="Render one chapter's globe as PNG")
    _add_common(globe_parser)
    _add_globe_opts(globe_parser)
    globe_parser.add_argument("chapter_id", help="Chapter to disclose")
    globe_parser.add_argument("-o", "--output", default=None, help="Output PNG path")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    config = load_config(Path(args.config) if args.config else None)
    try:
        view = build_view(args, config)
    except SnapshotError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "layout":
            window = view.window
            print(f"{window.zoom_level.value} window {window.start_year}-{window.end_year}")
            for p in view.placements():
                print(
                    f"  {p.chapter_id}: offset {p.horizontal_offset_pct:.1f}% "
                    f"width {p.horizontal_width_pct:.1f}% slot {p.vertical_slot} "
                    f"({p.start_year}-{p.end_year}, {p.memory_count} memories)"
                )

        elif args.command == "markers":
            frame = view.render()
            print(frame.zoom_label)
            print("  " + " ".join(m.label for m in frame.markers))

        elif args.command == "render":
            from chronoglobe.output.html_timeline import generate_timeline_html, sphere_payload

            if args.disclose and not _disclose(view, args.disclose, args):
                return 1
            path = generate_timeline_html(
                view.render(), args.output, config, sphere_payload(view.globe),
            )
            print(f"Output: {path}")

        elif args.command == "globe":
            from chronoglobe.output.globe_card import render_globe_card

            if not _disclose(view, args.chapter_id, args):
                return 1
            output = Path(args.output or f"data/globe/{args.chapter_id}.png")
            path = render_globe_card(view.globe.render(), output, config.render, config.globe)  # type: ignore[union-attr]
            print(f"Output: {path}")
    finally:
        view.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
