"""Interactive console front end.

Asks for a payment type, an origin and a destination, then prints the
cheapest fare and route. Invalid choices re-prompt; ``q`` or end of
input quits.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .config import AppConfig, get_config
from .container import Container
from .domain.errors import ConfigurationError, FareCalculatorError
from .domain.models import FarePolicy, Station
from .logging_config import configure_logging, resolve_level
from .ports.graph import FareGraphPort
from .services import FareCalculatorService

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


class QuitRequested(Exception):
    """User asked to leave the prompt loop."""


class InvalidChoice(ValueError):
    """Menu answer out of range or not a number."""


def _ask(input_fn: InputFn, prompt: str) -> str:
    try:
        answer = input_fn(prompt).strip()
    except EOFError:
        raise QuitRequested() from None
    if answer.lower() in {"q", "quit", "exit"}:
        raise QuitRequested()
    return answer


def choose(input_fn: InputFn, prompt: str, options: Sequence[str]) -> int:
    """Print a numbered menu and return the 0-based choice."""
    for number, option in enumerate(options, start=1):
        print(f"{number}) {option}")
    answer = _ask(input_fn, prompt)
    if not answer.isdigit() or not 1 <= int(answer) <= len(options):
        raise InvalidChoice(f"Invalid selection: {answer!r}")
    return int(answer) - 1


def choose_station(service: FareCalculatorService, input_fn: InputFn, role: str) -> Station:
    lines = service.lines()
    print("Available Transit Lines:")
    line = lines[choose(input_fn, f"Select {role} transit line (number): ", lines)]

    stations = service.stations(line)
    print(f"Stations on {line}:")
    index = choose(
        input_fn,
        f"Select {role} station (number): ",
        [station.name for station in stations],
    )
    return stations[index]


def run_once(
    service: FareCalculatorService,
    input_fn: InputFn,
    discounted: bool = False,
    policy: Optional[FarePolicy] = None,
) -> None:
    """One full prompt cycle."""
    if policy is None:
        policies = list(FarePolicy)
        policy = policies[
            choose(input_fn, "Select payment type (number): ", [p.label for p in policies])
        ]
    origin = choose_station(service, input_fn, "starting")
    destination = choose_station(service, input_fn, "destination")

    result = service.quote(origin, destination, policy, discounted=discounted)
    print(f"Cheapest {policy.label} fare from {origin} to {destination}:")
    print(service.format_quote(result))


def interactive_loop(
    service: FareCalculatorService,
    input_fn: InputFn = input,
    discounted: bool = False,
    policy: Optional[FarePolicy] = None,
) -> None:
    while True:
        try:
            run_once(service, input_fn, discounted, policy)
        except QuitRequested:
            return
        except (InvalidChoice, FareCalculatorError) as e:
            print(f"Error: {e}")
            print("Try again, or enter q to quit.")
        print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fare-calculator",
        description="Cheapest train fare and route between two stations.",
    )
    parser.add_argument("--data-dir", type=Path, help="Directory holding the fare files")
    parser.add_argument(
        "--format", choices=["json", "text"], help="Fare file format"
    )
    parser.add_argument(
        "--policy",
        choices=[p.value for p in FarePolicy],
        help="Skip the payment type prompt",
    )
    parser.add_argument(
        "--discount", action="store_true", help="Apply the configured flat discount"
    )
    parser.add_argument("--log-level", help="Logging level (e.g. DEBUG)")
    return parser


def make_config(args: argparse.Namespace) -> AppConfig:
    """Apply command-line overrides on top of the environment config.

    Raises:
        ConfigurationError: If ``--log-level`` is not a logging level.
    """
    config = get_config()
    directory_updates = {}
    if args.data_dir is not None:
        directory_updates["dir"] = args.data_dir
    if args.format is not None:
        directory_updates["format"] = args.format
    updates = {}
    if directory_updates:
        updates["directory"] = config.directory.model_copy(update=directory_updates)
    if args.log_level:
        resolve_level(args.log_level)
        updates["observability"] = config.observability.model_copy(
            update={"level": args.log_level}
        )
    return config.model_copy(update=updates) if updates else config


def main(argv: Optional[List[str]] = None, input_fn: InputFn = input) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = make_config(args)
        configure_logging(config.observability)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 2

    container = Container.create_default(config)
    service: FareCalculatorService = container.resolve(FareCalculatorService)

    try:
        graph: FareGraphPort = service.graph
    except FareCalculatorError as e:
        logger.error("Failed to build fare graph", extra={"error": str(e)})
        print(f"Error: {e}")
        return 1

    print(f"Loaded {len(graph.stations())} stations on {len(service.lines())} lines.")
    policy = FarePolicy.parse(args.policy) if args.policy else None
    interactive_loop(service, input_fn, discounted=args.discount, policy=policy)
    return 0
