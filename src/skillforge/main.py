"""Command line entry point for skillforge."""

import argparse
import json
import random
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog

from skillforge.collaborators import ConsolePresenter
from skillforge.config import get_settings
from skillforge.dice import DiceRoller
from skillforge.entities.kinds import EntityKind
from skillforge.entities.loader import load_owner_file
from skillforge.errors import SkillforgeError, TestUnavailableError
from skillforge.log_setup import configure_logging
from skillforge.pipeline.context import DerivationContext
from skillforge.pipeline.orchestrator import DerivationPipeline
from skillforge.pipeline.state import DerivedState
from skillforge.systems.combat import load_combat_file
from skillforge.systems.mastery import MASTERY
from skillforge.systems.success_test import CritRules, SuccessTestResolver

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skillforge", description="Derive character values")
    subparsers = parser.add_subparsers(dest="command", required=True)

    derive = subparsers.add_parser("derive", help="Derive every stack of an owner snapshot")
    derive.add_argument("snapshot", type=Path, help="Owner snapshot YAML file")
    derive.add_argument("--combat", type=Path, help="Combat snapshot YAML file")
    derive.add_argument("--audit", action="store_true", help="Include contributions")

    test = subparsers.add_parser("test", help="Roll a success test against a derived stack")
    test.add_argument("snapshot", type=Path, help="Owner snapshot YAML file")
    test.add_argument("--entity", required=True, help="Skill or trait name")
    test.add_argument("--stack", default=MASTERY, help="Stack to test (default: mastery)")
    test.add_argument("--bonus", type=int, default=0, help="Contextual bonus added to the roll")
    test.add_argument("--seed", type=int, help="Seed for repeatable rolls")
    test.add_argument("--combat", type=Path, help="Combat snapshot YAML file")

    return parser


def derive_state(snapshot: Path, combat: Path | None = None) -> DerivedState:
    settings = get_settings()
    combat_state = load_combat_file(combat) if combat is not None else None
    pipeline = DerivationPipeline(DerivationContext.from_settings(settings, combat=combat_state))
    return pipeline.run(load_owner_file(snapshot))


def cmd_derive(args: argparse.Namespace) -> int:
    state = derive_state(args.snapshot, args.combat)
    data = state.to_dict() if args.audit else state.snapshot()
    print(json.dumps(data, indent=2, default=str))
    return 0


def cmd_test(args: argparse.Namespace) -> int:
    state = derive_state(args.snapshot, args.combat)

    entity = state.find(EntityKind.SKILL, args.entity) or state.find(EntityKind.TRAIT, args.entity)
    if entity is None:
        print(f"No skill or trait named {args.entity!r}", file=sys.stderr)
        return 2
    if args.stack not in entity.stacks:
        print(f"{entity.name} has no {args.stack!r} stack", file=sys.stderr)
        return 2

    resolver = SuccessTestResolver(DiceRoller(random.Random(args.seed)), ConsolePresenter())
    try:
        resolver.test(
            entity.stack(args.stack),
            contextual_bonus=args.bonus,
            title=f"{entity.name} {args.stack}",
            crit=CritRules.from_record(entity.record),  # type: ignore[arg-type]
        )
    except TestUnavailableError as e:
        print(f"{entity.name} {args.stack} unavailable: {e.reason}", file=sys.stderr)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings())

    handlers = {"derive": cmd_derive, "test": cmd_test}
    try:
        return handlers[args.command](args)
    except SkillforgeError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    """Synchronous entry point for the ``skillforge`` console script."""
    sys.exit(main())


if __name__ == "__main__":
    run()
