"""Operator CLI for the configuration engine.

Runs against the storage backend selected by the environment
(``STORAGE_BACKEND=redis`` for a shared deployment).

Examples::

    python scripts/config_admin.py migrate
    python scripts/config_admin.py validate --report
    python scripts/config_admin.py backup --description "before release"
    python scripts/config_admin.py cleanup --keep 5
"""
import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from console_config.config import get_settings
from console_config.core.validator import render_report
from console_config.dependencies import ConfigContainer
from console_config.utils.logging import get_logger, setup_logging


def cmd_migrate(container: ConfigContainer, args: argparse.Namespace) -> int:
    report = container.migration.run(force=args.force)
    print(f"Migrated:   {', '.join(report.migrated) or '-'}")
    print(f"Skipped:    {', '.join(report.skipped) or '-'}")
    print(f"Backfilled: {', '.join(report.backfilled) or '-'}")
    if report.failed:
        print(f"Failed:     {', '.join(report.failed)}")
    for finding in container.migration.integrity_issues():
        print(f"  {finding.project}: {'; '.join(finding.issues)}")
    return 0 if report.success else 1


def cmd_validate(container: ConfigContainer, args: argparse.Namespace) -> int:
    summary = container.validator.validate_all(
        container.store.get_global(), container.store.list_projects()
    )
    if args.report:
        print(render_report(summary), end="")
    else:
        print(f"Overall health: {summary.overall_health}%  ({summary.total_issues} issues)")
        for result in [summary.global_result, *summary.project_results]:
            label = result.project or "global"
            status = "ok" if result.is_valid else "INVALID"
            print(
                f"  {label:<20} {status:<8} "
                f"errors={len(result.errors)} warnings={len(result.warnings)}"
            )
    return 1 if summary.has_blocking_errors else 0


def cmd_backup(container: ConfigContainer, args: argparse.Namespace) -> int:
    key = container.backups.create_backup(args.description)
    if key is None:
        print("Backup failed", file=sys.stderr)
        return 1
    print(key)
    return 0


def cmd_list_backups(container: ConfigContainer, args: argparse.Namespace) -> int:
    backups = container.backups.list_backups()
    if not backups:
        print("No backups found")
    for backup in backups:
        health = "healthy" if backup.is_valid else "degraded"
        print(
            f"{backup.key}  {backup.timestamp}  projects={backup.project_count}  "
            f"{health}  {backup.description or ''}".rstrip()
        )
    return 0


def cmd_restore(container: ConfigContainer, args: argparse.Namespace) -> int:
    result = container.backups.restore_from_backup(args.key)
    print(result.message)
    return 0 if result.success else 1


def cmd_cleanup(container: ConfigContainer, args: argparse.Namespace) -> int:
    keep = args.keep if args.keep is not None else container.settings.backup_keep_count
    deleted = container.backups.cleanup_old_backups(keep)
    print(f"Deleted {deleted} old backups")
    return 0


def cmd_export(container: ConfigContainer, args: argparse.Namespace) -> int:
    if not container.backups.export_to_file(args.description):
        print("Export failed", file=sys.stderr)
        return 1
    print(f"Export written to {container.settings.export_dir}")
    return 0


def cmd_import(container: ConfigContainer, args: argparse.Namespace) -> int:
    path = Path(args.file)
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        return 1
    result = container.backups.import_from_file(path.read_bytes())
    print(result.message)
    if result.validation_summary is not None and not result.success:
        print(render_report(result.validation_summary), end="")
    return 0 if result.success else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage layered console configuration")
    sub = parser.add_subparsers(dest="command", required=True)

    migrate = sub.add_parser("migrate", help="Convert the legacy registry and backfill defaults")
    migrate.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing projects with converted legacy entries",
    )
    migrate.set_defaults(func=cmd_migrate)

    validate = sub.add_parser("validate", help="Validate all records and print health")
    validate.add_argument("--report", action="store_true", help="Print the Markdown report")
    validate.set_defaults(func=cmd_validate)

    backup = sub.add_parser("backup", help="Store a snapshot of the current configuration")
    backup.add_argument("--description", "-d", default=None)
    backup.set_defaults(func=cmd_backup)

    sub.add_parser("list-backups", help="List stored backups, newest first").set_defaults(
        func=cmd_list_backups
    )

    restore = sub.add_parser("restore", help="Apply a stored backup")
    restore.add_argument("key")
    restore.set_defaults(func=cmd_restore)

    cleanup = sub.add_parser("cleanup", help="Delete all but the newest backups")
    cleanup.add_argument(
        "--keep",
        "-k",
        type=int,
        default=None,
        help="Number of backups to keep (default: BACKUP_KEEP_COUNT)",
    )
    cleanup.set_defaults(func=cmd_cleanup)

    export = sub.add_parser("export", help="Write an export file to EXPORT_DIR")
    export.add_argument("--description", "-d", default=None)
    export.set_defaults(func=cmd_export)

    import_ = sub.add_parser("import", help="Validate and apply an export file")
    import_.add_argument("file")
    import_.set_defaults(func=cmd_import)

    return parser


def main(argv: Sequence[str] | None = None, container: ConfigContainer | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level, "console", stream=sys.stderr)

    if container is None:
        container = ConfigContainer.from_settings(settings)
        # migrate runs the engine itself; everything else needs loaded state
        if args.command == "migrate":
            container.store.reload()
        else:
            container.start()

    get_logger("config_admin").info("config_admin_command", command=args.command)
    try:
        return args.func(container, args)
    finally:
        container.close()


if __name__ == "__main__":
    sys.exit(main())
