from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('barbershops', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Barber',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('barber_name', models.CharField(max_length=120)),
                ('specialization', models.CharField(blank=True, max_length=120, null=True)),
                ('experience_years', models.PositiveIntegerField(blank=True, null=True)),
                ('avatar_url', models.URLField(blank=True, null=True)),
                ('average_rating', models.DecimalField(decimal_places=1, default=Decimal('0.0'), max_digits=2)),
                ('total_appointments', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('shop', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='barbers', to='barbershops.shop')),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='barber_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'barbers',
                'ordering': ['barber_name'],
            },
        ),
    ]
