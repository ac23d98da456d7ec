"""
Management command to issue birthday vouchers.

Meant to be scheduled once a day (cron, Render cron job). Running it
more than once on the same day is safe: members who already received a
birthday voucher this year are skipped.

Usage:
    python manage.py issue_birthday_vouchers
    python manage.py issue_birthday_vouchers --date 2026-03-14 --no-notify
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.vouchers.services import run_birthday_batch


class Command(BaseCommand):
    help = 'Issue birthday vouchers to members whose birthday is today'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Batch date as YYYY-MM-DD (defaults to today)',
        )
        parser.add_argument(
            '--no-notify',
            action='store_true',
            help='Do not email the new vouchers',
        )

    def handle(self, *args, **options):
        today = None
        if options['date']:
            try:
                today = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid --date {options['date']!r}, expected YYYY-MM-DD")

        result = run_birthday_batch(today=today, notify=not options['no_notify'])

        for voucher in result['issued']:
            self.stdout.write(f'  + {voucher.code} -> {voucher.user.email}')
        for profile in result['skipped']:
            self.stdout.write(f'  = {profile.full_name} already has a birthday voucher')

        self.stdout.write(
            self.style.SUCCESS(
                f"Birthday batch for {result['date']}: "
                f"{len(result['issued'])} issued, {len(result['skipped'])} skipped"
            )
        )
