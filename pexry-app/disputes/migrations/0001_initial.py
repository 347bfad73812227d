# Generated manually for Pexry disputes
from decimal import Decimal

from django.conf import settings
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
            name='Dispute',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('subject', models.CharField(max_length=200, verbose_name='Sujet')),
                ('description', models.TextField(verbose_name='Description')),
                ('status', models.CharField(choices=[('open', 'Ouvert'), ('in-progress', 'En cours'), ('resolved', 'Résolu'), ('closed', 'Fermé')], db_index=True, default='open', max_length=20, verbose_name='Statut')),
                ('priority', models.CharField(choices=[('low', 'Basse'), ('medium', 'Moyenne'), ('high', 'Haute'), ('urgent', 'Urgente')], default='medium', max_length=10, verbose_name='Priorité')),
                ('category', models.CharField(choices=[('product-not-received', 'Produit non reçu'), ('product-not-as-described', 'Produit non conforme'), ('refund-request', 'Demande de remboursement'), ('delivery-issue', 'Problème de livraison'), ('payment-issue', 'Problème de paiement'), ('other', 'Autre')], max_length=40, verbose_name='Catégorie')),
                ('resolution', models.TextField(blank=True, null=True, verbose_name='Résolution')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='Résolu le')),
                ('order_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, verbose_name='Montant de la commande')),
                ('hold_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Part vendeur du montant de la commande', max_digits=12, verbose_name='Montant bloqué')),
                ('funds_held', models.BooleanField(default=False, help_text="Le solde du vendeur couvrait le montant au moment de l'ouverture", verbose_name='Fonds bloqués')),
                ('funds_released', models.BooleanField(default=False, verbose_name='Fonds libérés')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Date de création')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Date de mise à jour')),
                ('buyer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='disputes_as_buyer', to=settings.AUTH_USER_MODEL, verbose_name='Acheteur')),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='dispute', to='orders.order', verbose_name='Commande')),
                ('resolved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='resolved_disputes', to=settings.AUTH_USER_MODEL, verbose_name='Résolu par')),
                ('seller', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='disputes_as_seller', to=settings.AUTH_USER_MODEL, verbose_name='Vendeur')),
            ],
            options={
                'verbose_name': 'Litige',
                'verbose_name_plural': 'Litiges',
                'ordering': ('-created_at',),
            },
        ),
        migrations.CreateModel(
            name='DisputeMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('message', models.TextField(verbose_name='Message')),
                ('is_internal', models.BooleanField(default=False, help_text='Visible uniquement par les administrateurs', verbose_name='Note interne')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Date')),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='dispute_messages', to=settings.AUTH_USER_MODEL, verbose_name='Auteur')),
                ('dispute', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='messages', to='disputes.dispute', verbose_name='Litige')),
            ],
            options={
                'verbose_name': 'Message de litige',
                'verbose_name_plural': 'Messages de litige',
                'ordering': ('created_at', 'id'),
            },
        ),
        migrations.CreateModel(
            name='DisputeEvidence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file', models.FileField(upload_to='disputes/evidence/%Y/%m/', verbose_name='Fichier')),
                ('description', models.CharField(blank=True, max_length=255, verbose_name='Description')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Date')),
                ('dispute', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='evidence', to='disputes.dispute', verbose_name='Litige')),
                ('uploaded_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='dispute_evidence', to=settings.AUTH_USER_MODEL, verbose_name='Envoyé par')),
            ],
            options={
                'verbose_name': 'Preuve',
                'verbose_name_plural': 'Preuves',
                'ordering': ('created_at', 'id'),
            },
        ),
        migrations.AddIndex(
            model_name='dispute',
            index=models.Index(fields=['buyer', 'status'], name='dispute_buyer_status_idx'),
        ),
        migrations.AddIndex(
            model_name='dispute',
            index=models.Index(fields=['seller', 'status'], name='dispute_seller_status_idx'),
        ),
    ]
