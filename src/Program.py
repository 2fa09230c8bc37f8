import sys
import os
import json
import logging
import argparse
from calc.retirement_planner import RetirementPlanner
from model.Assumptions import COMPOUNDING_MODES, MONTHLY
from model.errors import InvalidRangeError, InvalidProfileError
from render.renderers import RENDERER_REGISTRY


def load_profile(profile_name: str, base_path: str = None) -> dict:
    """Load a named profile from input-parameters/<name>/profile.json.

    Args:
        profile_name: Name of the folder in input-parameters
        base_path: Repository root. Defaults to the parent of src/.

    Returns:
        The raw profile dictionary.

    Raises:
        FileNotFoundError: if the profile file does not exist
    """
    base_path = base_path or os.path.join(os.path.dirname(__file__), '..')
    profile_path = os.path.join(base_path, 'input-parameters', profile_name, 'profile.json')
    if not os.path.exists(profile_path):
        raise FileNotFoundError(f"Profile file not found: {profile_path}")
    with open(profile_path, 'r') as f:
        return json.load(f)


def build_result(planner: RetirementPlanner, profile: dict, mode: str, compounding: str):
    """Run the calculation a mode needs and return its result object."""
    if mode == 'Projection':
        return planner.project(profile, compounding=compounding)
    if mode in ('HealthScore', 'Suggestions'):
        return planner.score(profile)
    if mode == 'Diagnostics':
        return planner.resolver.diagnose(profile)
    if mode == 'Plan':
        return planner.plan(profile, compounding=compounding)
    raise ValueError(f"Unknown mode '{mode}'")


def to_json(result) -> str:
    data = result.to_dict() if hasattr(result, 'to_dict') else result
    return json.dumps(data, indent=2, default=str)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Retirement projection and financial health calculator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  Plan         Print a one-page summary of projection, income and score (default)
  Projection   Print age-by-age projected balances
  HealthScore  Print the weighted financial health score by factor
  Suggestions  Print improvement suggestions, most impactful first
  Diagnostics  Print which input key supplied each field

Examples:
  python src/Program.py individual
  python src/Program.py couple --mode Projection
  python src/Program.py couple --mode Projection --compounding legacy
  python src/Program.py individual --mode HealthScore --json
        """
    )
    parser.add_argument('profile_name', help='Name of the profile (folder in input-parameters)')
    parser.add_argument('--mode', '-m',
                        choices=list(RENDERER_REGISTRY.keys()),
                        default='Plan',
                        help='Output mode (default: Plan)')
    parser.add_argument('--compounding', '-c',
                        choices=list(COMPOUNDING_MODES),
                        default=MONTHLY,
                        help='monthly: 12 steps per year (default); legacy: one monthly step per year')
    parser.add_argument('--json', action='store_true', help='Print the result as JSON instead of a report')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    try:
        profile = load_profile(args.profile_name)
    except FileNotFoundError as e:
        print(e)
        sys.exit(1)

    planner = RetirementPlanner()
    try:
        result = build_result(planner, profile, args.mode, args.compounding)
    except (InvalidRangeError, InvalidProfileError) as e:
        print(f"Invalid profile '{args.profile_name}': {e}")
        sys.exit(2)

    if args.json:
        print(to_json(result))
    else:
        RENDERER_REGISTRY[args.mode]().render(result)


if __name__ == "__main__":
    main()
