"""
Command-line interface.

Usage:
    watffem INPUT OUTPUT [--config FILE] [--integration {nodal,analytical}]
                         [--solver {ldlt,spsolve}] [--keep-constrained-loads]
                         [--vtk FILE] [-v]

Reads a problem from INPUT, runs the static analysis and writes the
displacements followed by the element von Mises stresses to OUTPUT.
The output file is only created once the analysis has succeeded.

Exit status:
    0  success
    1  input error (malformed file, degenerate element, bad configuration)
    2  usage error (from argparse)
    3  singular system (insufficient constraints, disconnected mesh)
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .errors import InputError, SingularSystemError
from .io.config import SolverConfig, load_config, INTEGRATION_NAMES, SOLVER_NAMES
from .io.reader import read_problem
from .io.writer import write_results
from .postprocess.vtk import export_vtk_unstructured_2d
from .solver.elasticity import analyze

logger = logging.getLogger(__name__)

EXIT_INPUT_ERROR = 1
EXIT_SINGULAR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watffem",
        description="2D plane-stress finite element analysis")
    parser.add_argument("input", help="problem description (text)")
    parser.add_argument("output", help="result file: displacements, then von Mises stresses")
    parser.add_argument("--config", "-c", metavar="FILE",
                        help="JSON solver configuration")
    parser.add_argument("--integration", choices=INTEGRATION_NAMES,
                        help="quadrilateral integration rule (default: nodal)")
    parser.add_argument("--solver", choices=SOLVER_NAMES,
                        help="linear solver (default: ldlt)")
    parser.add_argument("--keep-constrained-loads", action="store_false", default=None,
                        dest="zero_constrained_loads",
                        help="keep loads applied at constrained DOFs instead of zeroing them")
    parser.add_argument("--vtk", metavar="FILE",
                        help="also export mesh and results in VTK format")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="increase log output (-v info, -vv debug)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        config = load_config(args.config) if args.config else SolverConfig()
        config = config.replace(integration=args.integration,
                                solver=args.solver,
                                zero_constrained_loads=args.zero_constrained_loads)
    except (InputError, OSError) as e:
        print(f"error: {args.config}: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    try:
        problem = read_problem(args.input)
        result = analyze(problem, config)
    except InputError as e:
        print(f"error: {args.input}: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except SingularSystemError as e:
        print(f"error: {args.input}: {e}", file=sys.stderr)
        return EXIT_SINGULAR
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    try:
        write_results(args.output, result.displacements, result.stresses)
        if args.vtk:
            export_vtk_unstructured_2d(args.vtk, problem.mesh,
                                       result.displacements, result.stresses)
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    logger.info("wrote %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
