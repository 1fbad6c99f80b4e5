from __future__ import annotations

import copy
import os
from typing import Any, Dict, Iterable, Optional, Tuple

import tomli_w

try:
    import tomllib as toml  # py311+
except ImportError:
    import tomli as toml  # older interpreters

from .model import DEFAULT_TARGET_ALTITUDE_M, GeoPoint, Hemisphere, OverlayConfig

DEFAULTS: Dict[str, Any] = {
    "observer": {
        "name": "Observer",
        "latitude_deg": 0.0,
        "longitude_deg": 0.0,
        "altitude_m": 0.0,
    },
    "overlay": {
        "target_altitude_m": DEFAULT_TARGET_ALTITUDE_M,
        "hemisphere": "north",
        "apply_stale_resolutions": True,
        "clear_distance_deg": 0.1,
        "horizon_bias_deg": 5.0,
    },
    "input": {
        "targets_file": "",
        "gazetteer_file": "",
        "min_probability": 0.0,
    },
    "output": {
        "out_tsv": "",
        "out_dir": os.path.join("output", "looks"),
        "filename_template": "looks_{observer}_{stamp}.tsv",
    },
}


def load_toml(path: str) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return toml.load(f)


def merge_dicts(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = merge_dicts(out[k], v)
        else:
            out[k] = v
    return out


def apply_sets(cfg: Dict[str, Any], sets: Iterable[str]) -> Dict[str, Any]:
    for item in sets:
        if "=" not in item:
            raise ValueError(f"--set requires key=value, got: {item}")
        key, val = item.split("=", 1)
        path = key.strip().split(".")
        cursor = cfg
        for p in path[:-1]:
            if p not in cursor or not isinstance(cursor[p], dict):
                cursor[p] = {}
            cursor = cursor[p]
        cursor[path[-1]] = parse_scalar(val.strip())
    return cfg


def parse_scalar(s: str):
    sl = s.lower()
    if sl in ("true", "false"):
        return sl == "true"
    try:
        if "." in s or "e" in sl:
            return float(s)
        return int(s)
    except ValueError:
        return s


def _resolve(project_root: str, path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.normpath(os.path.join(project_root, path))


def load_overlay_config(
    project_root: str,
    config_path: Optional[str],
    set_overrides: Iterable[str] = (),
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Compose defaults, optional site file, run file and --set overrides.

    Returns (effective_cfg, summary_paths); summary_paths has the keys
    ``config_path`` and ``site_path``.
    """
    summary: Dict[str, Any] = {"config_path": None, "site_path": None}

    run_cfg: Dict[str, Any] = {}
    if config_path:
        config_path = _resolve(project_root, config_path)
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")
        run_cfg = load_toml(config_path)
        summary["config_path"] = config_path

    site_cfg: Dict[str, Any] = {}
    site_ref = run_cfg.pop("include_site", None)
    if site_ref:
        base = os.path.dirname(config_path) if config_path else project_root
        site_path = site_ref if os.path.isabs(site_ref) else os.path.join(base, site_ref)
        if not os.path.exists(site_path):
            raise FileNotFoundError(f"Site file not found: {site_path}")
        site_cfg = load_toml(site_path)
        summary["site_path"] = site_path

    # Merge order: defaults -> site -> run
    cfg = merge_dicts(copy.deepcopy(DEFAULTS), site_cfg)
    cfg = merge_dicts(cfg, run_cfg)

    # Apply --set overrides last
    cfg = apply_sets(cfg, set_overrides)
    return cfg, summary


def build_overlay_config(cfg: Dict[str, Any]) -> OverlayConfig:
    ov = cfg.get("overlay", {})
    return OverlayConfig(
        target_altitude_m=float(ov.get("target_altitude_m", DEFAULT_TARGET_ALTITUDE_M)),
        hemisphere=Hemisphere.parse(ov.get("hemisphere", "north")),
        apply_stale_resolutions=bool(ov.get("apply_stale_resolutions", True)),
        clear_distance_deg=float(ov.get("clear_distance_deg", 0.1)),
        horizon_bias_deg=float(ov.get("horizon_bias_deg", 5.0)),
    )


def build_observer(cfg: Dict[str, Any]) -> GeoPoint:
    obs = cfg.get("observer", {})
    return GeoPoint(
        latitude_deg=float(obs.get("latitude_deg", 0.0)),
        longitude_deg=float(obs.get("longitude_deg", 0.0)),
        altitude_m=float(obs.get("altitude_m", 0.0)),
    )


def dump_effective_config(cfg: Dict[str, Any]) -> str:
    return tomli_w.dumps(cfg)


__all__ = [
    "DEFAULTS",
    "load_toml",
    "merge_dicts",
    "apply_sets",
    "parse_scalar",
    "load_overlay_config",
    "build_overlay_config",
    "build_observer",
    "dump_effective_config",
]
