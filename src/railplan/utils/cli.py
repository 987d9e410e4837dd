from argparse import ArgumentParser, ArgumentTypeError, RawTextHelpFormatter
from typing import Any, Dict, List
import math
import sys

from railplan.config.parameters import Parameters
from railplan.core_types import OutputFormat
from railplan.network.problem import DeliveryProblem, PackageRecord, RouteRecord, TrainRecord
from railplan.utils.logging import Colors

# Nested configuration keys each flag overrides
NESTED_OVERRIDES = {
    'max_expanded_states': ('search', 'max_expanded_states'),
    'time_limit': ('search', 'time_limit_sec'),
}


def _split(value: str, expected: int, usage: str) -> List[str]:
    parts = value.split(',')
    if len(parts) != expected or any(not part.strip() for part in parts):
        raise ArgumentTypeError(usage)
    return [part.strip() for part in parts]


def _number(value: str, field: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise ArgumentTypeError(f"could not parse {field} `{value}` as a number") from None
    if not math.isfinite(number) or number < 0:
        raise ArgumentTypeError(f"{field} must be a finite non-negative number, got `{value}`")
    return number


def parse_station(value: str) -> str:
    """--station NAME"""
    (name,) = _split(value, 1, "[NAME]")
    return name


def parse_route(value: str) -> RouteRecord:
    """--route NAME,STATION1,STATION2,TRAVEL_TIME"""
    name, first, second, travel_time = _split(
        value, 4, "[NAME],[STATION1],[STATION2],[TRAVEL_TIME]"
    )
    return name, first, second, _number(travel_time, 'travel_time')


def parse_package(value: str) -> PackageRecord:
    """--package NAME,WEIGHT,START,DESTINATION"""
    name, weight, start, destination = _split(
        value, 4, "[NAME],[WEIGHT],[START],[DESTINATION]"
    )
    return name, _number(weight, 'weight'), start, destination


def parse_train(value: str) -> TrainRecord:
    """--train NAME,CAPACITY,INITIAL_STATION"""
    name, capacity, station = _split(
        value, 3, "[NAME],[CAPACITY],[INITIAL_STATION_NAME]"
    )
    return name, _number(capacity, 'capacity'), station


def print_parameter_help():
    """Display detailed help information about parameters"""
    help_text = f"""
{Colors.BOLD}Train Delivery Planner Parameters{Colors.RESET}
{Colors.CYAN}═════════════════════════════════{Colors.RESET}

{Colors.YELLOW}Network Definition:{Colors.RESET}
  --station NAME           Declare a station (repeatable)
                           Example: --station silom

  --route NAME,S1,S2,TIME  Bidirectional route between two stations
                           Parallel routes collapse to the fastest one
                           Example: --route r1,silom,thonburi,30

  --package NAME,WEIGHT,START,DESTINATION
                           Package to deliver (repeatable)
                           Example: --package food,5,phraram9,samyan

  --train NAME,CAPACITY,INITIAL_STATION
                           Train available for deliveries (repeatable)
                           Example: --train alpha,10,silom

  --network PATH           YAML file with stations, routes, packages, trains
                           Used instead of the flags above
                           Example: --network network.yaml

{Colors.YELLOW}Search Budget:{Colors.RESET}
  --max-expanded-states INT
                           Stop after expanding this many states (0 = unlimited)
                           Default: Defined in config file
                           Example: --max-expanded-states 500000

  --time-limit FLOAT       Stop after this many seconds (0 = unlimited)
                           Default: Defined in config file
                           Example: --time-limit 60

{Colors.YELLOW}Input/Output:{Colors.RESET}
  --config PATH            Path to custom config file
                           Default: src/railplan/config/default_config.yaml
                           Example: --config my_config.yaml

  --output PATH            Save the plan to this file
                           Default: print only

  --format {{excel,json}}    Output file format
                           Default: Defined in config file

{Colors.YELLOW}Other Options:{Colors.RESET}
  --verbose                Enable debug output
                           Default: False

{Colors.CYAN}Examples:{Colors.RESET}
  # Parallel routes between two stations
  railplan --station silom --station thonburi \\
      --route r1,silom,thonburi,30 --route r2,silom,thonburi,10 \\
      --package clothes,5,thonburi,silom --train alpha,5,silom

  # Network from a file, saved as JSON
  railplan --network network.yaml --output plan.json --format json
"""
    print(help_text)
    sys.exit(0)


def parse_args() -> ArgumentParser:
    """Build the command line parser"""
    parser = ArgumentParser(
        prog='railplan',
        description='Minimum-makespan train delivery planner',
        formatter_class=RawTextHelpFormatter
    )

    parser.add_argument(
        '--help-params',
        action='store_true',
        help='Show detailed parameter information and exit'
    )

    parser.add_argument(
        '--station', dest='stations', action='append', default=[], type=parse_station,
        metavar='NAME', help='Station name (repeatable)'
    )
    parser.add_argument(
        '--route', dest='routes', action='append', default=[], type=parse_route,
        metavar='NAME,STATION1,STATION2,TRAVEL_TIME', help='Route between two stations (repeatable)'
    )
    parser.add_argument(
        '--package', dest='packages', action='append', default=[], type=parse_package,
        metavar='NAME,WEIGHT,START,DESTINATION', help='Package to deliver (repeatable)'
    )
    parser.add_argument(
        '--train', dest='trains', action='append', default=[], type=parse_train,
        metavar='NAME,CAPACITY,INITIAL_STATION', help='Available train (repeatable)'
    )
    parser.add_argument('--network', type=str, help='YAML file describing the whole problem')

    parser.add_argument('--config', type=str, help='Path to custom config file')
    parser.add_argument('--max-expanded-states', type=int, help='Search state budget (0 = unlimited)')
    parser.add_argument('--time-limit', type=float, help='Search time budget in seconds (0 = unlimited)')
    parser.add_argument('--output', type=str, help='Save the plan to this file')
    parser.add_argument('--format', choices=[f.value for f in OutputFormat], help='Output file format')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose output')

    return parser


def get_parameter_overrides(args) -> Dict[str, Any]:
    """Extract parameter overrides from command line arguments"""
    overrides = {k: v for k, v in vars(args).items() if v is not None}

    # Remove non-parameter arguments
    for key in ['config', 'verbose', 'help_params', 'output', 'network',
                'stations', 'routes', 'packages', 'trains']:
        overrides.pop(key, None)

    return {k.replace('-', '_'): v for k, v in overrides.items()}


def load_parameters(args) -> Parameters:
    """Load parameters with optional command line overrides"""
    if args.config:
        params = Parameters.from_yaml(args.config)
    else:
        params = Parameters.from_yaml()

    overrides = get_parameter_overrides(args)

    # Nested sections are merged key by key
    data = {
        'search': dict(params.search),
        'limits': dict(params.limits),
        'validate_plan': params.validate_plan,
        'format': params.format,
        'results_dir': params.results_dir,
    }
    for flag, (section, key) in NESTED_OVERRIDES.items():
        if flag in overrides:
            data[section][key] = overrides.pop(flag)
    data.update(overrides)

    return Parameters(**data)


def build_problem(args) -> DeliveryProblem:
    """Assemble the problem from --network or from the repeatable record flags"""
    if args.network:
        if args.stations or args.routes or args.packages or args.trains:
            raise ValueError("--network cannot be combined with --station/--route/--package/--train")
        return DeliveryProblem.from_yaml(args.network)
    return DeliveryProblem.from_records(
        args.stations,
        routes=args.routes,
        packages=args.packages,
        trains=args.trains,
    )
