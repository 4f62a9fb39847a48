#!/usr/bin/env python3
"""
Fractal Sculptures - Orchestrator

Run fractal generation modules and export the instanced scenes.

Usage:
    python src/run_all.py --modules S M --depth 3
    python src/run_all.py --modules M --config configs/menger.json --no-export
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional
from datetime import datetime

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from common.config import Config, FractalKind
from common.io import save_scene, save_instances_csv
from common.scene import FractalScene

logger = logging.getLogger(__name__)


def run_module_s(config: Config) -> FractalScene:
    """Run Option S: Sierpinski Tetrahedron."""
    from option_S_sierpinski.build import build_sierpinski
    return build_sierpinski(replace(config, fractal=FractalKind.SIERPINSKI))


def run_module_m(config: Config) -> FractalScene:
    """Run Option M: Menger Grid."""
    from option_M_menger.build import build_menger
    return build_menger(replace(config, fractal=FractalKind.MENGER))


MODULE_RUNNERS: Dict[str, Callable[[Config], FractalScene]] = {
    'S': run_module_s,
    'M': run_module_m
}

MODULE_KINDS = {
    'S': FractalKind.SIERPINSKI,
    'M': FractalKind.MENGER
}


def export_scene(scene: FractalScene, kind: FractalKind, config: Config) -> Dict[str, str]:
    """
    Write GLB + sidecar (and CSV if enabled) for one scene.

    Returns:
        Mapping of artifact kind to written path
    """
    out_dir = config.get_output_path(kind)
    stem = f"{kind.value}_d{config.depth}"
    written = {}

    if len(scene.sink) == 0:
        logger.warning(f"{kind.value}: no instances, skipping GLB export")
    else:
        glb_path = out_dir / f"{stem}.glb"
        save_scene(scene.sink.to_trimesh_scene(scene.registry), glb_path, scene.metadata)
        written["glb"] = str(glb_path)
        written["metadata"] = str(glb_path.with_suffix('.json'))

    if config.export_csv:
        csv_path = out_dir / f"{stem}_instances.csv"
        save_instances_csv(scene.sink, csv_path)
        written["csv"] = str(csv_path)

    return written


def run_all(
    modules: List[str],
    config: Config,
    export: bool = True
) -> dict:
    """
    Run specified modules.

    Args:
        modules: List of module letters (S, M)
        config: Configuration
        export: Whether to write scene files

    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "config": config.to_dict(),
        "modules": modules,
        "results": {},
        "errors": []
    }

    for module in modules:
        module = module.upper()
        if module not in MODULE_RUNNERS:
            logger.warning(f"Unknown module: {module}")
            continue

        logger.info(f"\n--- Module {module} ---")
        try:
            scene = MODULE_RUNNERS[module](config)
            result = {
                "status": "success",
                "metadata": scene.metadata.to_dict(),
                "instances_by_mesh": [
                    {"mesh": handle.name, "id": handle.id, "count": count}
                    for handle, count in scene.sink.counts_by_mesh().items()
                ]
            }
            if export:
                result["files"] = export_scene(scene, MODULE_KINDS[module], config)
            summary["results"][module] = result
        except Exception as e:
            logger.error(f"Module {module} failed: {e}")
            summary["results"][module] = {
                "status": "error",
                "error": str(e)
            }
            summary["errors"].append({
                "module": module,
                "error": str(e)
            })

    return summary


def build_config(args: argparse.Namespace) -> Config:
    """Config file (if any) overridden by explicit CLI flags."""
    config = Config.from_json(args.config) if args.config else Config()

    overrides = {}
    if args.depth is not None:
        overrides["depth"] = args.depth
    if args.scale is not None:
        overrides["initial_scale"] = args.scale
    if args.placeholders is not None:
        overrides["n_placeholders"] = args.placeholders
    if args.output is not None:
        overrides["output_dir"] = args.output
    if args.debug_texture:
        overrides["use_debug_texture"] = True
    if args.anchor:
        overrides["anchor_to_placeholder"] = True
    if args.no_csv:
        overrides["export_csv"] = False

    return replace(config, **overrides)


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Fractal Sculptures - Generate instanced fractal scenes"
    )
    parser.add_argument(
        "--modules", "-m",
        nargs="+",
        default=["S", "M"],
        help="Modules to run (S, M)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="JSON config file"
    )
    parser.add_argument(
        "--depth", "-d",
        type=int,
        default=None,
        help="Recursion depth (default 4)"
    )
    parser.add_argument(
        "--scale", "-s",
        type=float,
        default=None,
        help="Initial scale (default 1.0)"
    )
    parser.add_argument(
        "--placeholders", "-n",
        type=int,
        default=None,
        help="Number of placeholders to expand"
    )
    parser.add_argument(
        "--anchor",
        action="store_true",
        help="Seed each fractal at its placeholder instead of the origin"
    )
    parser.add_argument(
        "--debug-texture",
        action="store_true",
        help="Use the UV debug texture material"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output directory"
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Generate only, do not write scene files"
    )
    parser.add_argument(
        "--no-csv",
        action="store_true",
        help="Do not write the instance table"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    config = build_config(args)

    logger.info(f"Running modules {args.modules} at depth {config.depth}")
    logger.info(f"Output: {config.output_dir}")

    summary = run_all(
        modules=args.modules,
        config=config,
        export=not args.no_export
    )

    # Save summary
    summary_path = config.output_dir / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)

    logger.info(f"\nSummary saved to: {summary_path}")

    n_success = sum(1 for r in summary["results"].values() if r.get("status") == "success")
    n_errors = len(summary["errors"])

    logger.info(f"\n{'='*60}")
    logger.info(f"COMPLETE: {n_success} successful, {n_errors} errors")
    logger.info(f"{'='*60}")

    if n_errors > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
