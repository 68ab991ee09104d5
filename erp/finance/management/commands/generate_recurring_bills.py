"""
Management command to create this month's payables for active recurring expenses
Usage: python manage.py generate_recurring_bills [--year 2025 --month 3] [--mark-overdue]
"""
from django.core.management.base import BaseCommand, CommandError
from erp.finance.services import generate_monthly_bills, mark_overdue


class Command(BaseCommand):
    help = 'Generate pending payables for every active recurring expense billing in the given month'

    def add_arguments(self, parser):
        parser.add_argument('--year', type=int, help='Billing year (defaults to the current year)')
        parser.add_argument('--month', type=int, help='Billing month 1-12 (defaults to the current month)')
        parser.add_argument(
            '--mark-overdue',
            action='store_true',
            help='Also flag pending payables/receivables past their due date as overdue',
        )

    def handle(self, *args, **options):
        month = options.get('month')
        if month is not None and not 1 <= month <= 12:
            raise CommandError('--month must be between 1 and 12')

        created, skipped = generate_monthly_bills(year=options.get('year'), month=month)
        for bill in created:
            self.stdout.write(f'  + {bill.description}: {bill.amount} due {bill.due_date.isoformat()}')
        self.stdout.write(self.style.SUCCESS(
            f'{len(created)} bill(s) created, {len(skipped)} already generated'
        ))

        if options['mark_overdue']:
            payables, receivables = mark_overdue()
            self.stdout.write(self.style.SUCCESS(
                f'{payables} payable(s) and {receivables} receivable(s) marked overdue'
            ))
