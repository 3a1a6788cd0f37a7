from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


def validate_positive(value):
    """Rates must be strictly greater than zero"""
    if value is not None and value <= Decimal('0'):
        raise ValidationError('Rate value must be a positive decimal.', code='not_positive')


class Currency(models.Model):
    """Currency reference data"""
    name = models.CharField(max_length=100)
    abbreviation = models.CharField(max_length=10, db_index=True, help_text="Currency code, e.g. USD")
    symbol = models.CharField(max_length=10, help_text="Display symbol, e.g. $")

    class Meta:
        verbose_name_plural = 'Currencies'
        ordering = ['abbreviation', 'id']

    def __str__(self):
        return f"{self.abbreviation} ({self.name})"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'abbreviation': self.abbreviation,
            'symbol': self.symbol,
        }


class Rate(models.Model):
    """Dated rate of a currency relative to the common base currency"""
    currency = models.ForeignKey(Currency, on_delete=models.CASCADE, related_name='rates')
    value = models.DecimalField(max_digits=18, decimal_places=6, validators=[validate_positive])
    effective_date = models.DateField(db_index=True)

    class Meta:
        ordering = ['-effective_date', '-id']
        indexes = [
            models.Index(fields=['currency', '-effective_date'], name='rate_currency_date_idx'),
        ]

    def __str__(self):
        return f"{self.currency.abbreviation}: {self.value} ({self.effective_date.isoformat()})"

    def to_dict(self):
        return {
            'id': self.id,
            'currency_id': self.currency_id,
            'abbreviation': self.currency.abbreviation,
            'value': str(self.value),
            'effective_date': self.effective_date.isoformat(),
        }
