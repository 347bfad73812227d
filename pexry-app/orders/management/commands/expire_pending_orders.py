"""
Commande de réconciliation : expire les commandes restées en attente de paiement
Usage: python manage.py expire_pending_orders [--hours 24] [--dry-run]
"""
from django.conf import settings
from django.core.management.base import BaseCommand

from orders.services import OrderService


class Command(BaseCommand):
    help = 'Passe en "expired" les commandes en attente plus anciennes que le délai configuré'

    def add_arguments(self, parser):
        parser.add_argument(
            '--hours',
            type=int,
            default=None,
            help='Ancienneté minimale en heures (défaut: PEXRY_PENDING_ORDER_TTL_HOURS)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Compte les commandes concernées sans les modifier',
        )

    def handle(self, *args, **options):
        hours = options['hours']
        if hours is None:
            hours = getattr(settings, 'PEXRY_PENDING_ORDER_TTL_HOURS', 24)
        if hours < 0:
            self.stdout.write(self.style.ERROR('--hours doit être positif'))
            return

        count = OrderService.expire_pending_orders(older_than_hours=hours, dry_run=options['dry_run'])

        if options['dry_run']:
            self.stdout.write(self.style.WARNING(f'{count} commande(s) en attente depuis plus de {hours}h (dry run)'))
        else:
            self.stdout.write(self.style.SUCCESS(f'{count} commande(s) expirée(s)'))
