# Generated manually for Pexry orders
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import orders.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('products', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'En attente'), ('paid', 'Payée'), ('delivered', 'Livrée'), ('expired', 'Expirée')], db_index=True, default='pending', max_length=20, verbose_name='Statut')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Montant (USD)')),
                ('wallet_address', models.CharField(blank=True, max_length=120, null=True, verbose_name='Adresse de paiement')),
                ('transaction_id', models.CharField(default=orders.models.generate_transaction_id, help_text='Clé de corrélation utilisée par le webhook de paiement', max_length=100, unique=True, verbose_name='ID de transaction')),
                ('delivery_status', models.CharField(choices=[('auto', 'Automatique'), ('waiting', 'En attente'), ('sent', 'Envoyée')], default='auto', max_length=10, verbose_name='Statut de livraison')),
                ('nowpayments_invoice_id', models.CharField(blank=True, max_length=100, null=True, verbose_name='ID facture NOWPayments')),
                ('nowpayments_payment_id', models.CharField(blank=True, max_length=100, null=True, verbose_name='ID paiement NOWPayments')),
                ('paid_at', models.DateTimeField(blank=True, null=True, verbose_name='Date de paiement')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Date de création')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Date de mise à jour')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='products.product', verbose_name='Produit')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='orders', to=settings.AUTH_USER_MODEL, verbose_name='Acheteur')),
            ],
            options={
                'verbose_name': 'Commande',
                'verbose_name_plural': 'Commandes',
                'ordering': ('-created_at',),
            },
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['user', 'status'], name='orders_user_status_idx'),
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['status', 'created_at'], name='orders_status_created_idx'),
        ),
    ]
