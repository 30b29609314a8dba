"""
Command-line interface for tiny-qlab.

Usage:
    tiny-qlab simulate circuit.json --shots 100
    tiny-qlab simulate - --json < circuit.json
    tiny-qlab grade submission.json expected.json
    tiny-qlab gates
"""
import argparse
import json
import logging
import sys

from ..config import SimulatorSettings
from ..errors import ValidationError

logger = logging.getLogger(__name__)

EXIT_FAILED = 1
EXIT_INVALID = 2


def _positive_int(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def _read(path):
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8') as fh:
        return fh.read()


def cmd_simulate(args, settings):
    """Simulate a circuit file and print the result."""
    from ..circuit import parse_circuit
    from ..simulator import simulate, trace
    from ..visualization import draw_circuit, show_histogram, show_probabilities, show_state

    circuit = parse_circuit(_read(args.file), settings)
    logger.debug("parsed %r", circuit)

    if args.steps:
        steps = trace(circuit, settings)
        if args.json:
            print(json.dumps([s.to_dict() for s in steps], indent=2))
            return 0
        for step in steps:
            print(f"\nAfter {step.gate}:")
            print(show_state(step.statevector, circuit.qubit_count))
        return 0

    result = simulate(circuit, settings)
    if args.json:
        print(json.dumps(result.to_dict(args.shots), indent=2))
        return 0

    print(draw_circuit(circuit))
    print()
    print(show_state(result.statevector, circuit.qubit_count))
    print()
    if args.shots is None:
        print(show_probabilities(result.probabilities))
    else:
        print(show_histogram(result.histogram(args.shots)))
    return 0


def cmd_grade(args, settings):
    """Grade a submitted circuit against an expected result or circuit."""
    from ..grading import grade_lab

    grade = grade_lab(_read(args.submission), _read(args.expected), settings)
    if args.json:
        print(json.dumps({
            "passed": grade.passed,
            "result": grade.result.to_dict(),
        }, indent=2))
    else:
        print("PASSED" if grade.passed else "FAILED")
    return 0 if grade.passed else EXIT_FAILED


def cmd_gates(args, settings):
    """List the gate vocabulary."""
    from ..gates import catalog

    for entry in catalog():
        aliases = f" (aliases: {', '.join(entry['aliases'])})" if entry['aliases'] else ""
        params = " theta" if entry['n_params'] else ""
        print(f"  {entry['kind']:5s} {entry['n_qubits']}q{params:6s} "
              f"{entry['description']}{aliases}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog='tiny-qlab',
        description='Quantum lab circuit simulator and grader'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    sim_parser = subparsers.add_parser('simulate', help='Simulate a circuit')
    sim_parser.add_argument('file', help='Circuit JSON file, or - for stdin')
    sim_parser.add_argument('--shots', type=_positive_int, default=None,
                            help='Histogram size (deterministic); default shows probabilities')
    sim_parser.add_argument('--json', action='store_true', help='Print JSON result')
    sim_parser.add_argument('--steps', action='store_true', help='Show state after each gate')
    sim_parser.set_defaults(func=cmd_simulate)

    grade_parser = subparsers.add_parser('grade', help='Grade a submission')
    grade_parser.add_argument('submission', help='Submitted circuit JSON file')
    grade_parser.add_argument('expected', help='Expected result or reference circuit JSON file')
    grade_parser.add_argument('--json', action='store_true', help='Print JSON outcome')
    grade_parser.set_defaults(func=cmd_grade)

    gates_parser = subparsers.add_parser('gates', help='List supported gates')
    gates_parser.set_defaults(func=cmd_gates)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = SimulatorSettings.from_env()
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID

    try:
        return args.func(args, settings)
    except ValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID
    except (OSError, UnicodeDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID


if __name__ == '__main__':
    sys.exit(main())
