"""
Reconcile onboarding management command.

Resumes or abandons organizations that stalled between provisioning and
activation, and optionally retries failed admin invitations. Designed to run
as a scheduled job (e.g., hourly cron).
"""

from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError

from apps.core.logging import get_logger, log_context
from apps.onboarding.reconciliation import reconcile_onboarding
from config.settings.base import settings

logger = get_logger(__name__)


class Command(BaseCommand):
    help = "Resume, activate or abandon organizations stuck in onboarding"

    def add_arguments(self, parser):
        parser.add_argument(
            "--grace-hours",
            type=int,
            default=settings.ONBOARDING_GRACE_HOURS,
            help=f"Only touch organizations older than N hours (default: {settings.ONBOARDING_GRACE_HOURS})",
        )
        parser.add_argument(
            "--abandon-after-hours",
            type=int,
            default=settings.ONBOARDING_ABANDON_AFTER_HOURS,
            help=(
                "Abandon unpaid organizations older than N hours "
                f"(default: {settings.ONBOARDING_ABANDON_AFTER_HOURS})"
            ),
        )
        parser.add_argument(
            "--retry-invites",
            action="store_true",
            help="Re-send admin invitations for active organizations that were never invited",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be done without creating sessions or writing",
        )

    def handle(self, *args, **options):
        grace_hours = options["grace_hours"]
        abandon_after_hours = options["abandon_after_hours"]
        dry_run = options["dry_run"]

        if grace_hours < 0 or abandon_after_hours < 0:
            raise CommandError("Hour values must not be negative.")
        if abandon_after_hours < grace_hours:
            raise CommandError("--abandon-after-hours must be at least --grace-hours.")

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN - no changes will be made"))

        with log_context(command="reconcile_onboarding"):
            logger.info(
                "onboarding_reconcile_started",
                grace_hours=grace_hours,
                abandon_after_hours=abandon_after_hours,
                retry_invites=options["retry_invites"],
                dry_run=dry_run,
            )

            stats = reconcile_onboarding(
                grace=timedelta(hours=grace_hours),
                abandon_after=timedelta(hours=abandon_after_hours),
                retry_invites=options["retry_invites"],
                dry_run=dry_run,
            )

            logger.info(
                "onboarding_reconcile_completed",
                examined=stats.examined,
                sessions_created=stats.sessions_created,
                activated=stats.activated,
                abandoned=stats.abandoned,
                left_open=stats.left_open,
                invites_sent=stats.invites_sent,
                errors=stats.errors,
                dry_run=dry_run,
            )

        summary = (
            f"Examined {stats.examined}: {stats.sessions_created} new sessions, "
            f"{stats.activated} activated, {stats.abandoned} abandoned, "
            f"{stats.left_open} still open, {stats.invites_sent} invites sent, "
            f"{stats.errors} errors"
        )
        if dry_run:
            self.stdout.write(f"DRY RUN: {summary}")
        elif stats.errors:
            self.stdout.write(self.style.WARNING(summary))
        else:
            self.stdout.write(self.style.SUCCESS(summary))
