"""CLI commands for the GitHub search watcher."""

import argparse
import json
import logging
import sys
from pathlib import Path

EXIT_FAILED = 1
EXIT_TIMED_OUT = 3


def _log(msg: str):
    sys.stderr.write(f"[watch] {msg}\n")
    sys.stderr.flush()


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger("gh_api_watch")
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[watch] %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _write_events(path: Path, events, run_id: str | None) -> None:
    payload = {"run_id": run_id, "events": [e.to_dict() for e in events.events(run_id)]}
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Watch GitHub code and repository search for recent activity",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run subcommand
    run_parser = subparsers.add_parser(
        "run",
        help="Run all enabled searches and print a report",
    )
    run_parser.add_argument(
        "--queries",
        type=Path,
        default=None,
        help="Queries YAML file (default: QUERIES_FILE or queries.yaml)",
    )
    run_parser.add_argument("--days-back", type=int, default=None, help="Window size in days (1-365)")
    run_parser.add_argument("--max-pages", type=int, default=None, help="Page cap per search (1-10)")
    run_parser.add_argument("--per-page", type=int, default=None, help="Items per page (10-100)")
    run_parser.add_argument(
        "--no-commit-check",
        action="store_true",
        help="Skip verifying file recency via the commits API",
    )
    run_parser.add_argument(
        "--no-repo-search",
        action="store_true",
        help="Skip repository (README/description) searches",
    )
    run_parser.add_argument(
        "--json",
        action="store_true",
        help="Print findings as JSON instead of Markdown",
    )
    run_parser.add_argument(
        "--events",
        type=Path,
        default=None,
        help="Write the run's diagnostic events to this JSON file",
    )
    run_parser.add_argument("-v", "--verbose", action="store_true", help="Log every request")

    # default-queries subcommand
    subparsers.add_parser(
        "default-queries",
        help="Print a starter queries.yaml",
    )

    args = parser.parse_args(argv)

    if args.command == "run":
        from .context import RunCancelled, RunTimedOut
        from .events import RunEventLog
        from .orchestrator import Watcher
        from .queries import QuerySpecError, load_queries
        from .report import build_markdown
        from .settings import clamp_setting, get_settings

        configure_logging(args.verbose)
        settings = get_settings()
        options = settings.run_options()
        if args.days_back is not None:
            options.days_back = clamp_setting("days_back", args.days_back)
        if args.max_pages is not None:
            options.max_pages = clamp_setting("max_pages", args.max_pages)
        if args.per_page is not None:
            options.per_page = clamp_setting("per_page", args.per_page)
        if args.no_commit_check:
            options.use_commit_check = False
        if args.no_repo_search:
            options.include_repo_search = False

        queries_path = args.queries or Path(settings.queries_file)
        try:
            spec = load_queries(queries_path)
        except QuerySpecError as e:
            parser.error(f"{queries_path}: {e}")

        if not settings.github_token:
            _log("GITHUB_TOKEN is not set; searching unauthenticated")

        events = RunEventLog(settings.event_log_limit)
        watcher = Watcher(settings, events=events)
        exit_code = 0
        try:
            findings = watcher.run(spec, options=options)
        except RunTimedOut as e:
            _log(f"timed out: {e}")
            exit_code = EXIT_TIMED_OUT
        except RunCancelled as e:
            _log(f"cancelled: {e}")
            exit_code = EXIT_TIMED_OUT
        except Exception as e:
            _log(f"search error: {type(e).__name__}: {e}")
            exit_code = EXIT_FAILED
        else:
            if args.json:
                json.dump(findings.to_dict(), sys.stdout, indent=2)
                sys.stdout.write("\n")
            else:
                sys.stdout.write(build_markdown(findings))
        finally:
            if args.events:
                _write_events(args.events, events, events.last_run_id)
                _log(f"events written to {args.events}")

        if exit_code:
            sys.exit(exit_code)
    elif args.command == "default-queries":
        from .queries import DEFAULT_QUERIES_YAML

        sys.stdout.write(DEFAULT_QUERIES_YAML)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
