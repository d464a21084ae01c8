"""
Management command to resend undelivered order confirmations.
"""
import time

from django.core.management.base import BaseCommand

from ordering.services import build_confirmation_resender


class Command(BaseCommand):
    help = 'Retry delivery of order confirmations waiting in the outbox'

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=100,
            help='Maximum number of confirmations to attempt in one run',
        )
        parser.add_argument(
            '--loop',
            action='store_true',
            help='Run in loop (for production)',
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=30,
            help='Interval between loops in seconds',
        )

    def handle(self, *args, **options):
        limit = options['limit']
        interval = options['interval']

        resender = build_confirmation_resender()

        if options['loop']:
            self.stdout.write(f'Starting resender in loop mode (interval: {interval}s)')
            while True:
                try:
                    delivered = resender.process_pending(limit=limit)
                    if delivered > 0:
                        self.stdout.write(
                            self.style.SUCCESS(f'Resent {delivered} confirmations')
                        )
                    time.sleep(interval)
                except KeyboardInterrupt:
                    self.stdout.write(self.style.WARNING('Stopped by user'))
                    break
        else:
            delivered = resender.process_pending(limit=limit)
            self.stdout.write(
                self.style.SUCCESS(f'Resent {delivered} confirmations')
            )
