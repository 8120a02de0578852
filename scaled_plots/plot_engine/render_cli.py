# scaled_plots/plot_engine/render_cli.py
"""
render_cli.py — Render JSON plot descriptions to PNG files.

What it does:
- Loads every *.json plot in the input folder
- Calls PlotGenerator.generate(plot, settings)
- Saves a PNG per file into the output folder
- Prints a pass/fail summary plus A4 size warnings (and exits non-zero if any fail)

Run:
  python -m scaled_plots.plot_engine.render_cli --in plots --out render_out

Optional:
  --settings settings.json   global PlotSettings (camelCase or snake_case keys)
  --scale                    apply the device scale factor (sharper PNGs)
  --size-only                only print the physical size in mm, render nothing
"""

from __future__ import annotations

import argparse
import json
import os
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

# Force headless backend before importing pyplot anywhere
os.environ.setdefault("MPLBACKEND", "Agg")

from .. import utils  # noqa: E402
from .models import PlotSettings, plot_from_dict, plot_settings_from_dict  # noqa: E402
from .plot_common import plot_has_error_code  # noqa: E402


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise TypeError(f"Top-level JSON must be an object/dict: {path.name}")
    return data


def _safe_slug(name: str) -> str:
    keep = []
    for ch in name:
        if ch.isalnum() or ch in ("-", "_", "."):
            keep.append(ch)
        else:
            keep.append("_")
    return "".join(keep)


def _size_note(size) -> str:
    note = f"{size.width:.1f} x {size.height:.1f} mm"
    if size.exceeds_a4:
        sides = [s for s, flag in (("width", size.exceeds_width), ("height", size.exceeds_height)) if flag]
        note += f"  (exceeds A4 {' and '.join(sides)})"
    return note


def _render_one(
    in_path: Path,
    out_dir: Path,
    plot_settings: PlotSettings,
    apply_scale: bool,
    size_only: bool,
) -> Tuple[bool, str]:
    """
    Returns (ok, message).
    """
    try:
        plot = plot_from_dict(_load_json(in_path), plot_settings)

        # Import here so MPLBACKEND is set first.
        from .plotter import PlotGenerator

        generator = PlotGenerator()
        size = generator.calculate_plot_size_mm(plot)
        if size_only:
            return True, f"OK  -> {in_path.name}: {_size_note(size)}"

        result = generator.generate(plot, plot_settings, apply_scale_factor=apply_scale)
        if plot_has_error_code(result):
            return False, f"FAIL -> {in_path.name}: {result.value} error"

        out_path = out_dir / (_safe_slug(in_path.stem) + ".png")
        utils.save_bytes_file(utils.data_url_to_bytes(result.base64), out_path)
        return True, f"OK  -> {out_path.name}  {_size_note(size)}"

    except Exception as e:
        tb = traceback.format_exc()
        return False, f"FAIL -> {in_path.name}: {e}\n{tb}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Render JSON plot descriptions to PNGs.")
    parser.add_argument("--in", dest="in_dir", required=True, help="Folder containing *.json plots.")
    parser.add_argument(
        "--out",
        dest="out_dir",
        default="render_out",
        help="Output folder for PNGs (default: render_out).",
    )
    parser.add_argument("--settings", dest="settings", default=None, help="JSON file with plot settings.")
    parser.add_argument("--scale", dest="scale", action="store_true", help="Apply the device scale factor.")
    parser.add_argument("--size-only", dest="size_only", action="store_true", help="Only report sizes in mm.")
    args = parser.parse_args(argv)

    in_dir = Path(args.in_dir).expanduser().resolve()
    out_dir = Path(args.out_dir).expanduser().resolve()

    if not in_dir.exists() or not in_dir.is_dir():
        print(f"Input folder not found: {in_dir}")
        return 2

    if args.settings:
        raw_settings = utils.load_json_file(args.settings)
        if not isinstance(raw_settings, dict):
            print(f"Could not read settings: {args.settings}")
            return 1
        try:
            plot_settings = plot_settings_from_dict(raw_settings)
        except ValueError as e:
            print(f"Invalid settings: {e}")
            return 1
    else:
        plot_settings = plot_settings_from_dict(None)

    if not args.size_only:
        out_dir.mkdir(parents=True, exist_ok=True)

    json_files = sorted(in_dir.glob("*.json"))
    if not json_files:
        print(f"No *.json files found in: {in_dir}")
        return 0

    print(f"Rendering {len(json_files)} file(s)")
    print(f"  in : {in_dir}")
    print(f"  out: {out_dir}")
    print("")

    ok_count = 0
    fail_count = 0
    failed: List[str] = []

    for p in json_files:
        ok, msg = _render_one(p, out_dir, plot_settings, args.scale, args.size_only)
        if ok:
            ok_count += 1
        else:
            fail_count += 1
            failed.append(p.name)
        print(msg)

    print("")
    print("Summary")
    print("-------")
    print(f"Passed: {ok_count}")
    print(f"Failed: {fail_count}")
    if failed:
        print("Failed files:")
        for f in failed:
            print(f"  - {f}")

    return 1 if fail_count > 0 else 0


if __name__ == "__main__":
    raise SystemExit(main())
