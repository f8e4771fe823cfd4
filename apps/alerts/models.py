"""
Models for durable alert subscriptions.
"""
from django.db import models
from apps.core.models import TimeStampedModel


class AlertSubscription(TimeStampedModel):
    """
    Location-based alert subscription.
    Unsubscribing clears is_active rather than deleting the row.
    """
    subscription_id = models.CharField(max_length=40, unique=True, db_index=True)

    # Location
    lat = models.DecimalField(max_digits=9, decimal_places=6, db_index=True)
    lng = models.DecimalField(max_digits=9, decimal_places=6, db_index=True)

    # Channels (at least one is set)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)

    # Category slugs that trigger an alert
    alert_levels = models.JSONField(default=list)

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name = 'Alert Subscription'
        verbose_name_plural = 'Alert Subscriptions'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['lat', 'lng'], name='alert_sub_location_idx'),
            models.Index(fields=['is_active', 'created_at'], name='alert_sub_active_idx'),
        ]

    def __str__(self):
        return f"{self.subscription_id} at ({self.lat}, {self.lng})"
