# Generated manually for Pexry payments
from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('orders', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PaymentWebhookLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('payload', models.JSONField(default=dict, verbose_name='Payload reçu')),
                ('content_type', models.CharField(blank=True, max_length=100, verbose_name='Content-Type')),
                ('payment_status', models.CharField(blank=True, max_length=50, null=True, verbose_name='Statut du paiement')),
                ('order_reference', models.CharField(blank=True, max_length=100, null=True, verbose_name='order_id reçu')),
                ('payment_id', models.CharField(blank=True, max_length=100, null=True, verbose_name='payment_id reçu')),
                ('signature', models.CharField(blank=True, max_length=200, null=True, verbose_name='Signature')),
                ('is_valid', models.BooleanField(default=False, verbose_name='Signature valide')),
                ('processed', models.BooleanField(default=False, verbose_name='Traité')),
                ('error_message', models.TextField(blank=True, null=True, verbose_name="Message d'erreur")),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Date de réception')),
                ('order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='webhook_logs', to='orders.order', verbose_name='Commande')),
            ],
            options={
                'verbose_name': 'Log Webhook NOWPayments',
                'verbose_name_plural': 'Logs Webhooks NOWPayments',
                'ordering': ('-created_at',),
            },
        ),
        migrations.CreateModel(
            name='WithdrawalRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Montant')),
                ('status', models.CharField(choices=[('pending', 'En attente'), ('approved', 'Approuvée'), ('paid', 'Payée'), ('rejected', 'Rejetée')], default='pending', max_length=20, verbose_name='Statut')),
                ('admin_note', models.TextField(blank=True, null=True, verbose_name='Note administrateur')),
                ('wallet_address', models.CharField(blank=True, max_length=120, null=True, verbose_name='Adresse USDT')),
                ('wallet_network', models.CharField(blank=True, max_length=10, null=True, verbose_name='Réseau')),
                ('paid_at', models.DateTimeField(blank=True, null=True, verbose_name='Payée le')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Date de création')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Date de mise à jour')),
                ('paid_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='processed_withdrawals', to=settings.AUTH_USER_MODEL, verbose_name='Payée par (admin)')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='withdrawal_requests', to=settings.AUTH_USER_MODEL, verbose_name='Vendeur')),
            ],
            options={
                'verbose_name': 'Demande de retrait',
                'verbose_name_plural': 'Demandes de retrait',
                'ordering': ('-created_at',),
            },
        ),
        migrations.AddIndex(
            model_name='withdrawalrequest',
            index=models.Index(fields=['user', 'status'], name='withdrawal_user_status_idx'),
        ),
    ]
