"""
Command-line planner: read the network, search for the optimal plan, print it.

    railplan --station A --station B --route AB,A,B,10 \
        --package P,5,A,B --train T,5,A
"""
import logging
import sys

from railplan.exceptions import RailPlanError, UnknownStationError
from railplan.optimization.core import solve_delivery_problem
from railplan.utils.cli import build_problem, load_parameters, parse_args, print_parameter_help
from railplan.utils.logging import Colors, ProgressTracker, setup_logging
from railplan.utils.save_results import save_plan_results

logger = logging.getLogger(__name__)


def format_instructions(plan) -> list:
    """One line per route hop, like a dispatcher's sheet."""
    lines = []
    for leg in plan.route_legs():
        first, second = leg.route.station_pair
        lines.append(
            f"W={leg.begin_at:g}, T={leg.train.name}, N1={first.name}, "
            f"P1=[{','.join(p.name for p in leg.picked_packages)}], "
            f"N2={second.name}, P2=[{','.join(p.name for p in leg.dropped_packages)}] "
            f"via {leg.route.name}"
        )
    return lines


def main(argv=None) -> int:
    """Run the delivery planner."""
    parser = parse_args()
    args = parser.parse_args(argv)

    if args.help_params:
        print_parameter_help()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        params = load_parameters(args)
    except (FileNotFoundError, TypeError, ValueError) as e:
        parser.error(str(e))

    try:
        problem = build_problem(args)
    except (UnknownStationError, FileNotFoundError, ValueError) as e:
        parser.error(str(e))

    steps = ['Build Network', 'Search Plan', 'Save Results']
    progress = ProgressTracker(steps, disable=not args.verbose)
    summary = problem.summary()
    progress.advance(
        f"Loaded {Colors.BOLD}{summary['stations']}{Colors.RESET} stations, "
        f"{Colors.BOLD}{summary['packages']}{Colors.RESET} packages, "
        f"{Colors.BOLD}{summary['trains']}{Colors.RESET} trains"
    )

    try:
        solution = solve_delivery_problem(problem, params)
    except RailPlanError as e:
        progress.advance(str(e), status='error')
        progress.close("Planning failed")
        logger.error(str(e))
        return 1
    progress.advance(f"Optimal makespan: {Colors.BOLD}{solution.makespan:g}{Colors.RESET} minutes")

    for line in format_instructions(solution.plan):
        print(line)
    for package in solution.plan.pre_delivered:
        print(f"{package.name} is already at {package.destination.name}")
    print(f"Optimal time: {solution.makespan:g} minutes")

    if args.output:
        save_plan_results(solution, params, filename=args.output, format=args.format)
        progress.advance(f"Results saved to {args.output}")
    else:
        progress.advance("Results not saved (no --output given)", status='info')
    progress.close()

    return 1 if solution.violations else 0


if __name__ == "__main__":
    sys.exit(main())
