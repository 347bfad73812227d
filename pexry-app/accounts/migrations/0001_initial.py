# Generated manually for Pexry accounts
from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('display_name', models.CharField(blank=True, max_length=100, null=True, verbose_name='Nom affiché')),
                ('image', models.ImageField(blank=True, null=True, upload_to='profile_pic/', verbose_name='Photo')),
                ('is_agent', models.BooleanField(default=False, verbose_name='Agent support')),
                ('usdt_wallet_address', models.CharField(blank=True, max_length=120, null=True, verbose_name='Adresse USDT')),
                ('usdt_network', models.CharField(blank=True, choices=[('TRC20', 'TRC20 (Tron)'), ('BEP20', 'BEP20 (BNB Smart Chain)'), ('ERC20', 'ERC20 (Ethereum)')], max_length=10, null=True, verbose_name='Réseau USDT')),
                ('available_for_withdrawal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Disponible au retrait')),
                ('balance_on_hold', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Montant gelé par des litiges en cours', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Solde bloqué')),
                ('date', models.DateTimeField(auto_now_add=True, verbose_name='Date de création')),
                ('date_update', models.DateTimeField(auto_now=True, verbose_name='Date de mise à jour')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL, verbose_name='Utilisateur')),
            ],
            options={
                'verbose_name': 'Profil',
                'verbose_name_plural': 'Profils',
            },
        ),
        migrations.CreateModel(
            name='UserAgent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=150, verbose_name='Nom')),
                ('email', models.EmailField(max_length=254, unique=True, verbose_name='Email')),
                ('status', models.CharField(choices=[('active', 'Actif'), ('inactive', 'Inactif'), ('suspended', 'Suspendu')], default='inactive', max_length=20, verbose_name='Statut')),
                ('availability', models.CharField(choices=[('available', 'Disponible'), ('unavailable', 'Indisponible'), ('busy', 'Occupé')], default='unavailable', max_length=20, verbose_name='Disponibilité')),
                ('handle_payouts', models.BooleanField(default=False, verbose_name='Gère les retraits')),
                ('handle_support_tickets', models.BooleanField(default=False, verbose_name='Gère les tickets support')),
                ('handle_live_chat', models.BooleanField(default=False, verbose_name='Gère le chat en direct')),
                ('view_user_data', models.BooleanField(default=False, verbose_name='Voit les données utilisateurs')),
                ('manage_disputes', models.BooleanField(default=False, verbose_name='Gère les litiges')),
                ('last_login_at', models.DateTimeField(blank=True, null=True, verbose_name='Dernière connexion')),
                ('assigned_chats', models.PositiveIntegerField(default=0, verbose_name='Conversations assignées')),
                ('total_chats_handled', models.PositiveIntegerField(default=0, verbose_name='Conversations traitées')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Date de création')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Date de mise à jour')),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='agent', to=settings.AUTH_USER_MODEL, verbose_name='Utilisateur')),
            ],
            options={
                'verbose_name': 'Agent support',
                'verbose_name_plural': 'Agents support',
                'ordering': ('-created_at',),
            },
        ),
        migrations.AddIndex(
            model_name='useragent',
            index=models.Index(fields=['status', 'availability'], name='accounts_agent_status_idx'),
        ),
    ]
