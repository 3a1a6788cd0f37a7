import currencies.models
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Currency',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('abbreviation', models.CharField(db_index=True, help_text='Currency code, e.g. USD', max_length=10)),
                ('symbol', models.CharField(help_text='Display symbol, e.g. $', max_length=10)),
            ],
            options={
                'verbose_name_plural': 'Currencies',
                'ordering': ['abbreviation', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Rate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('value', models.DecimalField(decimal_places=6, max_digits=18, validators=[currencies.models.validate_positive])),
                ('effective_date', models.DateField(db_index=True)),
                ('currency', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rates', to='currencies.currency')),
            ],
            options={
                'ordering': ['-effective_date', '-id'],
                'indexes': [models.Index(fields=['currency', '-effective_date'], name='rate_currency_date_idx')],
            },
        ),
    ]
