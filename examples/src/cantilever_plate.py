#!/usr/bin/env python3
"""
Example: cantilever plate under a tip load (plane stress).

This example demonstrates the complete FEM pipeline:
1. Create a structured mesh of the plate
2. Clamp the left edge and load the free end
3. Assemble, constrain and solve K u = f
4. Recover element von Mises stresses and export to VTK

Problem:
    Plate [0, L] x [0, h], thickness 1
    u = 0 on x = 0
    Total shear force P at x = L, split over the end nodes

Reference (Timoshenko beam, plane stress):
    w_tip = P L³ / (3 E I) + P L / (κ G A),  I = h³ / 12, κ = 5/6

Linear triangles are stiff in bending, so their tip deflection
approaches the reference from below as the mesh is refined.

Usage:
    ./examples/src/cantilever_plate.py
    ./examples/src/cantilever_plate.py --kind quad --integration analytical
"""

import numpy as np
import sys
from pathlib import Path

# Add project root to path (two levels up from examples/src/)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from watfFEM.material import Material
from watfFEM.discretization.mesh import Constraint, ConstraintType
from watfFEM.geometry.primitives import make_rectangle_mesh, nodes_where
from watfFEM.io.config import SolverConfig
from watfFEM.problem import Problem
from watfFEM.solver.elasticity import ElasticitySolver
from watfFEM.postprocess.vtk import export_vtk_unstructured_2d


LENGTH = 10.0
HEIGHT = 1.0
LOAD = -1.0


def reference_deflection(E: float, nu: float) -> float:
    inertia = HEIGHT**3 / 12.0
    shear_modulus = E / (2.0 * (1.0 + nu))
    bending = LOAD * LENGTH**3 / (3.0 * E * inertia)
    shear = LOAD * LENGTH / (5.0 / 6.0 * shear_modulus * HEIGHT)
    return bending + shear


def build_problem(nx: int, ny: int, kind: str, E: float, nu: float) -> Problem:
    mesh = make_rectangle_mesh((0.0, LENGTH), (0.0, HEIGHT), nx=nx, ny=ny, kind=kind)
    problem = Problem(Material(poisson_ratio=nu, young_modulus=E), mesh)

    clamped = nodes_where(mesh, lambda x, y: abs(x) < 1e-12)
    problem.constraints = [Constraint(int(n), ConstraintType.UXY) for n in clamped]

    # Consistent nodal forces of a uniform shear traction on the end edge
    end = nodes_where(mesh, lambda x, y: abs(x - LENGTH) < 1e-12)
    share = LOAD / ny
    for n in end:
        y = mesh.y[n]
        on_corner = abs(y) < 1e-12 or abs(y - HEIGHT) < 1e-12
        problem.set_load(int(n), 0.0, 0.5 * share if on_corner else share)
    return problem


def run(nx: int = 40,
        ny: int = 4,
        kind: str = "triangle",
        integration: str = "nodal",
        E: float = 1.0e4,
        nu: float = 0.3,
        export_vtk: bool = True,
        verbose: bool = True):
    """
    Run the cantilever example.

    Parameters:
        nx, ny: Number of cells along and across the plate
        kind: "triangle" or "quad"
        integration: Quadrilateral integration rule
        E, nu: Young's modulus and Poisson's ratio
        export_vtk: Whether to export VTK file
        verbose: Print progress information

    Returns:
        Dictionary with results (solution, tip deflection, reference)
    """
    if verbose:
        print("=" * 60)
        print("FEM Cantilever Plate Example")
        print("=" * 60)
        print(f"Mesh: {nx} x {ny} cells, {kind} elements")

    problem = build_problem(nx, ny, kind, E, nu)
    mesh = problem.mesh

    if verbose:
        print(f"Nodes: {mesh.n_nodes}")
        print(f"Elements: {mesh.n_elements}")
        print(f"DOFs: {mesh.n_dof}")

    solver = ElasticitySolver(problem, SolverConfig(integration=integration))
    result = solver.analyze()

    end = nodes_where(mesh, lambda x, y: abs(x - LENGTH) < 1e-12)
    tip = result.nodal_displacements[end, 1].mean()
    reference = reference_deflection(E, nu)

    if verbose:
        print(f"\nTip deflection: {tip:.6e}")
        print(f"Reference:      {reference:.6e}")
        print(f"Ratio:          {tip / reference:.4f}")
        print(f"Max von Mises:  {result.stresses.max():.6e}")
        reaction = result.reactions[1::2].sum()
        print(f"Sum of vertical reactions: {reaction:.6e} (applied: {LOAD:.6e})")

    if export_vtk:
        output_dir = Path(__file__).parent.parent / "output"
        output_dir.mkdir(exist_ok=True)
        vtk_file = output_dir / f"cantilever_{kind}.vtk"
        export_vtk_unstructured_2d(vtk_file, mesh, result.displacements, result.stresses)
        if verbose:
            print(f"\nExported to: {vtk_file}")

    return {
        'result': result,
        'tip_deflection': tip,
        'reference': reference,
        'mesh': mesh,
    }


def refinement_study(kind: str = "triangle", integration: str = "nodal"):
    """Tip deflection under uniform mesh refinement."""
    print("=" * 60)
    print(f"Refinement Study ({kind})")
    print("=" * 60)
    print(f"{'nx x ny':>10} {'DOFs':>8} {'tip':>15} {'ratio':>8}")
    print("-" * 45)

    ratios = []
    for ny in [1, 2, 4, 8]:
        nx = 10 * ny
        out = run(nx=nx, ny=ny, kind=kind, integration=integration,
                  export_vtk=False, verbose=False)
        ratio = out['tip_deflection'] / out['reference']
        ratios.append(ratio)
        print(f"{f'{nx}x{ny}':>10} {out['mesh'].n_dof:>8} "
              f"{out['tip_deflection']:>15.6e} {ratio:>8.4f}")

    return ratios


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="2D Cantilever Plate FEM Example")
    parser.add_argument("--nx", type=int, default=40,
                        help="Number of cells along the plate (default: 40)")
    parser.add_argument("--ny", type=int, default=4,
                        help="Number of cells across the plate (default: 4)")
    parser.add_argument("--kind", choices=["triangle", "quad"], default="triangle",
                        help="Element kind (default: triangle)")
    parser.add_argument("--integration", choices=["nodal", "analytical"], default="nodal",
                        help="Quadrilateral integration rule (default: nodal)")
    parser.add_argument("--refine", "-r", action="store_true",
                        help="Run refinement study")
    parser.add_argument("--no-vtk", action="store_true",
                        help="Skip VTK export")

    args = parser.parse_args()

    if args.refine:
        refinement_study(kind=args.kind, integration=args.integration)
    else:
        run(nx=args.nx, ny=args.ny, kind=args.kind, integration=args.integration,
            export_vtk=not args.no_vtk)
