"""Run one method on a named benchmark problem (thin CLI glue).

Usage:
  python scripts/run_problem.py root brent omega --tol 1e-12
  python scripts/run_problem.py quad romberg sine --max-iter 24 --plot out/sine.png
  python scripts/run_problem.py --list

Policy:
- No numerics here: no update rules or quadrature.
- Orchestration only.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

# Allow running directly from a src-layout repo without installation.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from itermath.integrator import INTEGRATION_METHODS, Integrator
from itermath.problems import (
    list_quadrature_problems,
    list_root_problems,
    load_quadrature_problem,
    load_root_problem,
)
from itermath.rootfinder import TWO_POINT_METHODS, RootFinder
from itermath.visualize import ConvergenceRecorder, plot_convergence

ROOT_METHODS = TWO_POINT_METHODS + ("newton",)
QUAD_METHODS = INTEGRATION_METHODS + ("kronrod",)


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run an iterative method on a named problem")
    p.add_argument("kind", nargs="?", choices=("root", "quad"), help="Problem family")
    p.add_argument("method", nargs="?", help=f"Root: {', '.join(ROOT_METHODS)}; quad: {', '.join(QUAD_METHODS)}")
    p.add_argument("problem", nargs="?", help="Problem name (see --list)")
    p.add_argument("--tol", type=float, default=1e-12, help="Tolerance (default: 1e-12)")
    p.add_argument("--max-iter", type=int, default=None, help="Iteration budget (default: method family default)")
    p.add_argument("--plot", type=str, default=None, help="Save a convergence plot to this path")
    p.add_argument("--list", action="store_true", help="List available problems and exit")
    p.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    return p.parse_args(argv)


def run_root(method: str, name: str, tol: float, max_iter: int | None, recorder: ConvergenceRecorder):
    if method not in ROOT_METHODS:
        raise SystemExit(f"Unknown root method '{method}'. Choose from: {', '.join(ROOT_METHODS)}")

    problem = load_root_problem(name)
    kwargs = {"tolerance": tol, "observer": recorder}
    if max_iter is not None:
        kwargs["max_iterations"] = max_iter
    rf = RootFinder(**kwargs)

    match method:
        case "newton":
            result = rf.newton(problem.f, problem.df, problem.guess)
        case _:
            low, high = problem.bracket
            result = getattr(rf, method)(problem.f, low, high)

    print(f"{problem.name} [{method}]: {result}")
    print(f"  iterations={result.iterations}  |x - root|={abs(result.value - problem.root):.3e}")
    return result


def run_quad(method: str, name: str, tol: float, max_iter: int | None, recorder: ConvergenceRecorder):
    if method not in QUAD_METHODS:
        raise SystemExit(f"Unknown quadrature method '{method}'. Choose from: {', '.join(QUAD_METHODS)}")

    problem = load_quadrature_problem(name)
    kwargs = {"tolerance": tol, "observer": recorder}
    if max_iter is not None:
        kwargs["max_iterations"] = max_iter
    integrator = Integrator(**kwargs)

    if method == "kronrod":
        value = integrator.kronrod(problem.f, problem.a, problem.b)
        print(f"{problem.name} [kronrod]: {value:.15g}")
        print(f"  |I - exact|={abs(value - problem.exact):.3e}")
        return value

    result = getattr(integrator, method)(problem.f, problem.a, problem.b)
    print(f"{problem.name} [{method}]: {result}")
    print(f"  iterations={result.iterations}  |I - exact|={abs(result.value - problem.exact):.3e}")
    return result


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.list:
        print("root problems:       " + ", ".join(list_root_problems()))
        print("quadrature problems: " + ", ".join(list_quadrature_problems()))
        return 0

    if not (args.kind and args.method and args.problem):
        raise SystemExit("kind, method and problem are required (or use --list)")

    recorder = ConvergenceRecorder()
    try:
        if args.kind == "root":
            run_root(args.method, args.problem, args.tol, args.max_iter, recorder)
        else:
            run_quad(args.method, args.problem, args.tol, args.max_iter, recorder)
    except ValueError as e:
        raise SystemExit(str(e)) from e

    if args.plot is not None:
        if not recorder.steps:
            raise SystemExit(f"Method '{args.method}' records no iteration history to plot")
        plot_convergence(
            {f"{args.method} / {args.problem}": recorder.history()},
            tolerance=args.tol,
            out=args.plot,
            title=f"{args.kind}: {args.problem}",
        )
        print(f"Saved: {args.plot}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
