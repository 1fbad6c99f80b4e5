from __future__ import annotations

import argparse
import logging
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from aurora_compass.compass_core.config_loader import (
    build_observer,
    build_overlay_config,
    dump_effective_config,
    load_overlay_config,
)
from aurora_compass.compass_core.display import frame_summary
from aurora_compass.compass_core.model import Target
from aurora_compass.compass_core.resolvers import SyncResolver
from aurora_compass.compass_core.session import STATUS_TRACKING, CompassSession
from aurora_compass.compass_io.gazetteer import GazetteerResolver
from aurora_compass.compass_io.report import (
    LookRecord,
    ReportMetadata,
    record_from_selection,
    write_look_report_tsv,
)
from aurora_compass.compass_io.targets import load_targets

SOFTWARE_VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="aurora_compass_cli",
        description="Point an observer at the best aurora target.",
    )
    p.add_argument("--config", help="Run configuration file (TOML)")
    p.add_argument(
        "--set",
        action="append",
        default=[],
        help="Override config key=value (repeatable).",
    )
    p.add_argument("--targets", help="Target table (CSV/TSV); overrides input.targets_file")
    p.add_argument(
        "--gazetteer",
        help="Place table for offline names; overrides input.gazetteer_file",
    )
    p.add_argument(
        "--heading",
        action="append",
        type=float,
        default=[],
        help="Device heading in degrees (repeatable, applied in order).",
    )
    p.add_argument("--out", help="Report TSV path; overrides output.out_tsv")
    p.add_argument(
        "--dump-effective-config",
        action="store_true",
        help="Print final merged config and exit.",
    )
    p.add_argument(
        "--log-dir",
        default="logs",
        help="Directory where the run log will be created.",
    )
    p.add_argument("--verbose", action="store_true", help="Debug logging to stderr.")
    return p


def _init_logger(project_root: str, log_dir: str) -> Tuple[str, Any]:
    os.makedirs(os.path.join(project_root, log_dir), exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%SZ")
    path = os.path.join(project_root, log_dir, f"run_{stamp}.log")

    def _log(msg: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(msg.rstrip() + "\n")

    return path, _log


def _log_header(log, project_root: str, paths: Dict[str, Any], cfg: Dict[str, Any]):
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    log(f"[{now}] Run started")
    log(f"Project root: {project_root}")
    if paths.get("config_path"):
        log(f"Run config: {os.path.relpath(paths['config_path'], project_root)}")
    if paths.get("site_path"):
        log(f"Site config: {os.path.relpath(paths['site_path'], project_root)}")
    log("")
    log("----- Effective configuration -----")
    log(dump_effective_config(cfg).rstrip())
    log("-----------------------------------")
    log("")


def _observer_slug(cfg_observer: Dict[str, Any]) -> str:
    name = str(cfg_observer.get("name", "observer")).strip()
    tok = re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_").lower()
    return tok or "observer"


def _output_path(cfg: Dict[str, Any], project_root: str) -> str:
    out_cfg = cfg.get("output", {})
    out_path = out_cfg.get("out_tsv", "")
    if not out_path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%SZ")
        template = out_cfg.get("filename_template", "looks_{observer}_{stamp}.tsv")
        base = template.format(observer=_observer_slug(cfg.get("observer", {})), stamp=stamp)
        out_path = os.path.join(out_cfg.get("out_dir", os.path.join("output", "looks")), base)
    if not os.path.isabs(out_path):
        out_path = os.path.join(project_root, out_path)
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    return out_path


def _make_resolver(cfg: Dict[str, Any], project_root: str):
    gz = cfg.get("input", {}).get("gazetteer_file", "")
    if gz:
        if not os.path.isabs(gz):
            gz = os.path.join(project_root, gz)
        return GazetteerResolver.from_file(gz)

    # No gazetteer: names come only from the target table itself.
    def _passthrough(points: List[Target]) -> List[Target]:
        return list(points)

    return SyncResolver(_passthrough)


def run(cfg: Dict[str, Any], headings: List[float], project_root: str, log) -> int:
    inp = cfg.get("input", {})
    targets_file = inp.get("targets_file", "")
    if not targets_file:
        msg = "No target table given. Use --targets or input.targets_file"
        print(f"ERROR: {msg}"); log(f"ERROR: {msg}")
        return 2
    if not os.path.isabs(targets_file):
        targets_file = os.path.join(project_root, targets_file)

    overlay = build_overlay_config(cfg)
    observer = build_observer(cfg)

    targets = load_targets(targets_file, min_probability=float(inp.get("min_probability", 0.0)))
    msg = f"Loaded {len(targets)} targets from {os.path.relpath(targets_file, project_root)}"
    print(msg); log(msg)

    session = CompassSession(overlay, _make_resolver(cfg, project_root), targets)
    frame = session.update_location(observer)

    if frame.status != STATUS_TRACKING:
        msg = f"No aurora target in the {overlay.hemisphere.value} hemisphere"
        print(f"ERROR: {msg}"); log(f"ERROR: {msg}")
        return 2

    out_path = _output_path(cfg, project_root)
    print(f"Output TSV: {os.path.relpath(out_path, project_root)}")
    md = ReportMetadata(
        observer_name=str(cfg.get("observer", {}).get("name", "Observer")),
        observer=observer,
        target_altitude_m=overlay.target_altitude_m,
        hemisphere=overlay.hemisphere.value,
        software_version=SOFTWARE_VERSION,
    )

    rows: List[LookRecord] = []
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    for heading in headings or [0.0]:
        session.update_heading(heading)
        frame = session.poll()
        rows.append(
            record_from_selection(
                stamp,
                frame.selection,
                heading_deg=heading,
                rotation_deg=frame.rotation_deg,
                name=frame.label,
            )
        )
        msg = f"  heading={heading:.1f} -> rotation={frame.rotation_deg:.1f} (deg)"
        print(msg); log(msg)

    for line in frame_summary(frame):
        print(line); log(line)

    write_look_report_tsv(out_path, md, rows, append=False)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    project_root = os.getcwd()
    sets = list(args.set)
    if args.targets:
        sets.append(f"input.targets_file={args.targets}")
    if args.gazetteer:
        sets.append(f"input.gazetteer_file={args.gazetteer}")
    if args.out:
        sets.append(f"output.out_tsv={args.out}")

    try:
        cfg, paths = load_overlay_config(project_root, args.config, sets)
    except (ValueError, OSError) as e:
        print(f"ERROR: {e}")
        return 2

    print("----- Effective configuration -----")
    print(dump_effective_config(cfg).rstrip())
    print("-----------------------------------")
    if args.dump_effective_config:
        return 0

    log_path, log = _init_logger(project_root, args.log_dir)
    _log_header(log, project_root, paths, cfg)
    print(f"Log file: {os.path.relpath(log_path, project_root)}")

    try:
        code = run(cfg, args.heading, project_root, log)
    except (ValueError, OSError) as e:
        print(f"ERROR: {e}"); log(f"ERROR: {e}")
        return 2
    if code == 0:
        print("Done.")
    return code


if __name__ == "__main__":
    raise SystemExit(main())
