import argparse
import json
from pathlib import Path

from . import __version__
from .audit import ACTIONS, AuditLogger
from .bulk import CSV_TEMPLATE, bulk_upload, parse_users_csv
from .companies import load_candidates, resolve_organization, search_organizations
from .contacts import create_contact_for_organization
from .env import Settings, load_env, load_settings, require_token
from .errors import ContactLinkError, ValidationError
from .hubspot import HubSpotClient
from .logger import get_logger
from .matching import find_best_match, rank_candidates
from .schema import validate_contact


def _read_json(path: Path):
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise SystemExit(f"Invalid JSON in {path}: {e}")


def _read_candidates(path: Path):
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")
    try:
        return load_candidates(path)
    except json.JSONDecodeError as e:
        raise SystemExit(f"Invalid JSON in {path}: {e}")


def _client(settings: Settings) -> HubSpotClient:
    return HubSpotClient(require_token(settings), base_url=settings.hubspot_base_url)


def _audit(settings: Settings) -> AuditLogger:
    return AuditLogger(settings.db_path)


def cmd_match(args: argparse.Namespace, settings: Settings) -> None:
    candidates = _read_candidates(Path(args.candidates))
    result = find_best_match(
        args.organization, candidates,
        threshold=settings.match_threshold, prefix_boost=settings.prefix_boost,
    )
    if not result.matched:
        print(f'No match for "{args.organization}" among {len(candidates)} candidates')
        return
    c = result.candidate
    print(f"Match: {c.name} (id={c.id}, score={result.score:.3f})")


def cmd_rank(args: argparse.Namespace, settings: Settings) -> None:
    candidates = _read_candidates(Path(args.candidates))
    ranked = rank_candidates(
        args.organization, candidates,
        threshold=settings.match_threshold, prefix_boost=settings.prefix_boost, limit=args.limit,
    )
    if not ranked:
        print("No matches.")
        return
    for s in ranked:
        print(f"{s.score * 100:5.1f}%  {s.candidate.name} (id={s.candidate.id})")


def cmd_search(args: argparse.Namespace, settings: Settings) -> None:
    result = search_organizations(
        _client(settings), args.organization, audit=_audit(settings), limit=args.limit,
        threshold=settings.match_threshold, prefix_boost=settings.prefix_boost,
    )
    print(f'Found {len(result.matches)} matching organizations for "{result.search_term}" '
          f"({result.total_candidates} candidates)")
    for s in result.matches:
        domain = f" [{s.candidate.domain}]" if s.candidate.domain else ""
        print(f" - {s.score * 100:5.1f}%  {s.candidate.name}{domain} (id={s.candidate.id})")
    if result.matches:
        print(f"Average confidence: {result.average_confidence * 100:.1f}%")


def cmd_create(args: argparse.Namespace, settings: Settings) -> None:
    data = {
        "first_name": args.first_name,
        "last_name": args.last_name,
        "email": args.email,
        "organization_name": args.organization,
        "company_id": args.company_id,
        "company_name": args.company_name,
    }
    outcome = create_contact_for_organization(
        _client(settings), data, audit=_audit(settings),
        threshold=settings.match_threshold, prefix_boost=settings.prefix_boost,
    )
    print(outcome["message"])
    print(f"Contact: {outcome['contact_id']}")


def cmd_bulk_upload(args: argparse.Namespace, settings: Settings) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    users = parse_users_csv(input_path.read_text(encoding="utf-8"))
    client = _client(settings)

    organization_id = args.organization_id
    organization_name = args.organization_name or args.organization
    if not organization_id:
        if not args.organization:
            raise SystemExit("Pass --organization, or --organization-id with --organization-name.")
        result = resolve_organization(
            client, args.organization,
            threshold=settings.match_threshold, prefix_boost=settings.prefix_boost,
        )
        if not result.matched:
            raise SystemExit(f'No HubSpot company matches "{args.organization}".')
        organization_id = result.candidate.id
        organization_name = result.candidate.name
        print(f"Using company {organization_name} (id={organization_id}, score={result.score:.3f})")

    summary = bulk_upload(
        client, users, organization_id, organization_name,
        audit=_audit(settings), pause=args.pause,
    )
    print(summary["message"])
    for err in summary["errors"]:
        print(f" - row {err['row']}: {err['error']}")
    if summary["common_errors"]:
        print("Error summary:")
        for bucket, count in summary["common_errors"].items():
            print(f"  {bucket}: {count}")
    if not summary["success"]:
        raise SystemExit(2)


def cmd_template(args: argparse.Namespace, settings: Settings) -> None:
    if args.output:
        Path(args.output).write_text(CSV_TEMPLATE, encoding="utf-8")
        print(f"Template written to {args.output}")
        return
    print(CSV_TEMPLATE, end="")


def cmd_validate(args: argparse.Namespace, settings: Settings) -> None:
    data = _read_json(Path(args.input))
    errors = validate_contact(data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_check_contact(args: argparse.Namespace, settings: Settings) -> None:
    client = _client(settings)
    contact = client.get_contact(args.contact_id)
    props = contact.get("properties", {})
    company_ids = client.get_contact_company_ids(args.contact_id)
    print(f"Contact {args.contact_id}: {props.get('firstname')} {props.get('lastname')} <{props.get('email')}>")
    if not company_ids:
        print("No associated companies.")
        return
    print("Associated companies:")
    for company_id in company_ids:
        print(f" - {company_id}")
    if len(company_ids) > 1:
        print("More than one company is associated; remove any created automatically from the email domain.")


def cmd_audit_logs(args: argparse.Namespace, settings: Settings) -> None:
    success = None
    if args.failed_only:
        success = False
    logs, total = _audit(settings).get_logs(
        limit=args.limit, offset=args.offset, action=args.action, success=success,
    )
    print(f"Showing {len(logs)} of {total} audit entries")
    for entry in logs:
        status = "ok" if entry["success"] else "FAILED"
        print(f"{entry['timestamp']}  {entry['action']:<20} {status:<6} {entry['client_id']}  "
              f"{json.dumps(entry['details'])}")


def cmd_audit_stats(args: argparse.Namespace, settings: Settings) -> None:
    stats = _audit(settings).get_stats(days=args.days)
    print(f"Audit statistics (last {args.days} days):")
    for key in ("total_actions", "successful_actions", "failed_actions",
                "user_creations", "bulk_uploads", "validation_errors"):
        print(f"  {key.replace('_', ' ').capitalize()}: {stats[key]}")
    if stats["top_clients"]:
        print("  Top clients:")
        for c in stats["top_clients"]:
            print(f"    {c['client_id']}: {c['count']}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contactlink", description="Create HubSpot contacts matched to companies")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    mat = subparsers.add_parser("match", help="Pick the best company for a name from a candidates JSON file")
    mat.add_argument("--organization", required=True, help="Organization name to match")
    mat.add_argument("--candidates", required=True, help="JSON file: list of {id, name, domain} or HubSpot results")
    mat.set_defaults(func=cmd_match)

    rnk = subparsers.add_parser("rank", help="Rank companies from a candidates JSON file")
    rnk.add_argument("--organization", required=True, help="Organization name to match")
    rnk.add_argument("--candidates", required=True, help="JSON file of candidate companies")
    rnk.add_argument("--limit", type=int, default=5, help="Maximum matches to show (default 5)")
    rnk.set_defaults(func=cmd_rank)

    src = subparsers.add_parser("search", help="Search HubSpot companies for an organization name")
    src.add_argument("--organization", required=True, help="Organization name to search for")
    src.add_argument("--limit", type=int, default=5, help="Maximum matches to show (default 5)")
    src.set_defaults(func=cmd_search)

    crt = subparsers.add_parser("create", help="Create one contact and associate it with the best company")
    crt.add_argument("--first-name", required=True)
    crt.add_argument("--last-name", required=True)
    crt.add_argument("--email", required=True)
    crt.add_argument("--organization", required=True, help="Organization name as given by the user")
    crt.add_argument("--company-id", help="Skip matching and associate with this HubSpot company id")
    crt.add_argument("--company-name", help="Company name stored on the contact with --company-id")
    crt.set_defaults(func=cmd_create)

    blk = subparsers.add_parser("bulk-upload", help="Create contacts from a CSV file (firstName,lastName,email)")
    blk.add_argument("--input", required=True, help="CSV file with a header row")
    blk.add_argument("--organization", help="Organization name, matched against HubSpot companies")
    blk.add_argument("--organization-id", help="HubSpot company id (skips matching)")
    blk.add_argument("--organization-name", help="Company name stored on each contact")
    blk.add_argument("--pause", type=float, default=0.1, help="Seconds between rows (default 0.1)")
    blk.set_defaults(func=cmd_bulk_upload)

    tpl = subparsers.add_parser("template", help="Print or write a bulk upload CSV template")
    tpl.add_argument("--output", help="Write the template to this path")
    tpl.set_defaults(func=cmd_template)

    val = subparsers.add_parser("validate", help="Validate a contact request JSON")
    val.add_argument("--input", required=True, help="Path to contact JSON input")
    val.set_defaults(func=cmd_validate)

    chk = subparsers.add_parser("check-contact", help="Show a contact and its company associations")
    chk.add_argument("--contact-id", required=True)
    chk.set_defaults(func=cmd_check_contact)

    alg = subparsers.add_parser("audit-logs", help="List audit entries, newest first")
    alg.add_argument("--limit", type=int, default=50)
    alg.add_argument("--offset", type=int, default=0)
    alg.add_argument("--action", choices=ACTIONS)
    alg.add_argument("--failed-only", action="store_true", help="Only show failed actions")
    alg.set_defaults(func=cmd_audit_logs)

    ast = subparsers.add_parser("audit-stats", help="Summarize recent audit entries")
    ast.add_argument("--days", type=int, default=7)
    ast.set_defaults(func=cmd_audit_stats)

    return parser


def main(argv=None):
    # Load .env if present (HUBSPOT_ACCESS_TOKEN, CONTACTLINK_*, etc.)
    load_env()
    args = build_parser().parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        build_parser().print_help()
        return

    try:
        settings = load_settings()
        logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
        args.func(args, settings)
        if logger.metrics["api_calls"]:
            logger.log_metrics_summary()
    except ValidationError as e:
        raise SystemExit(f"Invalid input: {e.message}")
    except ContactLinkError as e:
        raise SystemExit(f"[{e.code}] {e.message}")


if __name__ == "__main__":
    main()
