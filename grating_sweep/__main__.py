"""Command-line interface: run a sequential grating efficiency sweep.

Results go to --outputFile, rewritten after every step; --progressFile, if
given, holds only the progress block for external monitoring.

Example::

    python -m grating_sweep --mode constantIncidence --min 100 --max 120 \\
        --increment 5 --incidenceAngle 88 --eV --outputFile out.txt \\
        --progressFile progress.txt --gratingType blazed --gratingPeriod 1 \\
        --gratingGeometry 2.5,30 --gratingMaterial Au --N 15
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from grating_sweep.adapters.presets_local.store import LocalPresetStore
from grating_sweep.adapters.registry import list_solvers, make_solver
from grating_sweep.domain.errors import ArtifactOpenError
from grating_sweep.domain.models import SweepConfiguration
from grating_sweep.exporting.writer import ResumableWriter
from grating_sweep.orchestration.controller import SweepController
from grating_sweep.orchestration.session import GEOMETRY_FIELDS, build_config

logger = logging.getLogger("grating_sweep")

_REQUIRED = ("mode", "min", "max", "increment", "gratingType", "gratingPeriod",
             "gratingGeometry", "gratingMaterial", "N")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="grating-sweep",
        description="Run a series of sequential grating efficiency calculations.",
    )
    g = p.add_argument_group("grating")
    g.add_argument("--gratingType", choices=list(GEOMETRY_FIELDS))
    g.add_argument("--gratingPeriod", type=float, help="grating period (um)")
    g.add_argument(
        "--gratingGeometry",
        help="comma-separated geometry: rectangular depth,valley; blazed blaze,antiBlaze; "
        "sinusoidal depth; trapezoidal depth,valley,blaze,antiBlaze (um / deg)",
    )
    g.add_argument("--gratingMaterial", help="material name, e.g. Au, Ni, C, SiO2")
    g.add_argument("--N", type=int, help="truncation index: orders -N..N")

    m = p.add_argument_group("operating mode")
    m.add_argument(
        "--mode", choices=["constantIncidence", "constantIncludedAngle", "constantWavelength"]
    )
    m.add_argument("--min", type=float)
    m.add_argument("--max", type=float)
    m.add_argument("--increment", type=float)
    m.add_argument("--incidenceAngle", type=float, help="incidence angle (deg)")
    m.add_argument("--includedAngle", type=float, help="included angle (deg)")
    m.add_argument("--toOrder", type=int, help="order held at the included angle")
    m.add_argument("--wavelength", type=float, help="fixed wavelength (um, or eV with --eV)")

    o = p.add_argument_group("output")
    o.add_argument("--outputFile", type=Path, required=True)
    o.add_argument("--progressFile", type=Path)
    o.add_argument("--eV", action="store_true", help="wavelength inputs are photon energies (eV)")
    o.add_argument("--printDebugOutput", action="store_true",
                   help="log intermediate solver results for each step")

    x = p.add_argument_group("run")
    x.add_argument("--solver", choices=list_solvers(), default="scalar")
    x.add_argument("--preset", help="load the sweep configuration from a saved preset")
    x.add_argument("--preset-dir", type=Path, default=None, help="preset directory")
    x.add_argument("--save-preset", help="save the resolved configuration under this name")
    x.add_argument("--verbose", "-v", action="store_true", help="log every sweep step")
    return p


def config_from_args(args: argparse.Namespace) -> SweepConfiguration:
    if args.preset:
        return LocalPresetStore(args.preset_dir).load(args.preset)
    missing = [f"--{name}" for name in _REQUIRED if getattr(args, name) is None]
    if missing:
        raise ValueError(f"missing required option(s): {', '.join(missing)}")
    return build_config(
        mode=args.mode,
        minimum=args.min,
        maximum=args.max,
        increment=args.increment,
        grating_type=args.gratingType,
        grating_period=args.gratingPeriod,
        grating_geometry=args.gratingGeometry,
        grating_material=args.gratingMaterial,
        N=args.N,
        incidence_deg=args.incidenceAngle,
        included_deg=args.includedAngle,
        to_order=args.toOrder,
        wavelength=args.wavelength,
        energy_units=args.eV,
        debug_output=args.printDebugOutput,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.printDebugOutput:
        logging.getLogger("grating_sweep.adapters").setLevel(logging.DEBUG)

    try:
        cfg = config_from_args(args)
        solver = make_solver(args.solver)
        solver.validate(cfg.grating)
        writer = ResumableWriter(args.outputFile, args.progressFile)
        controller = SweepController(cfg, solver, writer)
    except (ValueError, OSError) as e:
        sys.stderr.write(f"Invalid command-line options: {e}\n")
        return 1

    if args.save_preset:
        path = LocalPresetStore(args.preset_dir).save(args.save_preset, cfg)
        logger.info("saved preset %s", path)

    with writer:
        try:
            controller.run()
        except ArtifactOpenError as e:
            sys.stderr.write(f"{e}\n")
            return 1

    logger.info(
        "%s: %d/%d steps, status=%s",
        args.outputFile,
        controller.progress.completed_steps,
        controller.total_steps,
        controller.status,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
