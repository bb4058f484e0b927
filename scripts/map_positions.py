"""Map a batch of raw car positions onto a track's display path.

Usage:
  uv run python scripts/map_positions.py \\
      --track track.json \\
      --positions positions.json

``track.json``::

    {"reference_path": [[x, y], ...], "display_path": [[x, y], ...]}

``display_path`` is optional.  ``positions.json`` is a list of
``{"driver_number": 44, "x": ..., "y": ...}`` objects in tick order; repeated
samples of one driver use the previous result as the projection hint.
"""

from __future__ import annotations

import argparse
import json
import math
import sys

from dotenv import load_dotenv

from trackmap.config import configure_logging, load_settings
from trackmap.session.mapper import TrackSession
from trackmap.track.models import Path


def _load_json(path: str):
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"  [!] Cannot read {path}: {exc}", file=sys.stderr)
        sys.exit(1)


def main() -> None:
    ap = argparse.ArgumentParser(description="Map car positions through track progress")
    ap.add_argument("--track", required=True, help="JSON file with reference/display paths")
    ap.add_argument("--positions", required=True, help="JSON file with position samples")
    args = ap.parse_args()

    load_dotenv()
    settings = load_settings()
    configure_logging(settings)

    track = _load_json(args.track)
    samples = _load_json(args.positions)

    reference = Path.from_xy(track.get("reference_path", []))
    display_raw = track.get("display_path")
    display = Path.from_xy(display_raw) if display_raw else None

    print(f"Reference : {len(reference)} points")
    print(f"Display   : {len(display) if display is not None else 'none (pass-through)'}")
    print()

    session = TrackSession(
        reference,
        display,
        window=settings.window_config(),
        max_backward=settings.max_backward,
    )
    for s in samples:
        cp = session.map_position(int(s["driver_number"]), float(s["x"]), float(s["y"]))
        heading = (
            f"  hdg={math.degrees(cp.heading.heading):7.2f}" if cp.heading is not None else ""
        )
        flag = "  (rejected jump)" if cp.rejected else ""
        print(
            f"#{cp.driver_number:<3} progress={cp.progress:.4f}"
            f"  x={cp.x:.2f}  y={cp.y:.2f}{heading}{flag}"
        )


if __name__ == "__main__":
    main()
