"""CLI entrypoints for srcverify commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError
from .errors import SrcVerifyError
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator, PlanOutcome


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "sources",
        nargs="+",
        metavar="SOURCE",
        help="Declared source as [NUMBER=]PATH; unnumbered entries continue from the previous number, starting at 0.",
    )
    parser.add_argument(
        "-a",
        "--pairs",
        default="",
        help="Whitespace-separated SOURCE,SIGNATURE[,KEYRING] pairings (defaults to automatic pairing).",
    )
    parser.add_argument(
        "-k",
        "--default-keyring",
        default=None,
        help="Keyring used by SOURCE,SIGNATURE pairings and automatic pairing.",
    )
    parser.add_argument(
        "--sourcedir",
        default=None,
        help="Directory relative SOURCE paths are resolved against.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .srcverify.yml (defaults to the source directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="srcverify",
        description="Verify detached OpenPGP signatures of declared package sources.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log output to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify every signature among the declared sources.",
    )
    _add_verbose_option(verify_parser, suppress_default=True)
    _add_source_options(verify_parser)

    plan_parser = subparsers.add_parser(
        "plan",
        help="Show which source, signature and keyring would be checked together.",
    )
    _add_verbose_option(plan_parser, suppress_default=True)
    _add_source_options(plan_parser)
    plan_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the plan as JSON.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for srcverify commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    orchestrator = Orchestrator()
    config_path = _config_path(args)

    try:
        sources = orchestrator.load_sources(args.sources, args.sourcedir)
        if args.command == "verify":
            outcome = orchestrator.run_verify(
                sources,
                args.pairs,
                args.default_keyring,
                config_path=config_path,
            )
            print(f"{len(outcome.verified)} signature(s) verified")
        elif args.command == "plan":
            plan = orchestrator.build_plan(
                sources,
                args.pairs,
                args.default_keyring,
                config_path=config_path,
            )
            print(_format_plan(plan, as_json=bool(getattr(args, "json", False))))
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except (SrcVerifyError, ConfigError) as exc:
        parser.exit(exc.exit_code, f"srcverify {args.command} failed: {exc}\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        get_logger("cli").debug("Unexpected failure", exc_info=True)
        parser.exit(1, f"srcverify {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _config_path(args: argparse.Namespace) -> Path | None:
    if args.config:
        return Path(args.config)
    if args.sourcedir:
        return Path(args.sourcedir)
    return None


def _format_plan(plan: PlanOutcome, *, as_json: bool) -> str:
    if as_json:
        payload = {
            "mode": "automatic" if plan.automatic else "explicit",
            "default_keyring": str(plan.default_keyring.path) if plan.default_keyring else None,
            "files": [
                {"path": str(entry.source.path), "number": entry.source.number, "role": entry.role.value}
                for entry in plan.classified
            ],
            "triples": [triple.as_dict() for triple in plan.triples],
        }
        return json.dumps(payload, indent=2)
    if not plan.triples:
        return "No signatures to verify"
    return "\n".join(
        f"{triple.source} <- {triple.signature} [{triple.keyring}]" for triple in plan.triples
    )


if __name__ == "__main__":
    main(sys.argv[1:])
