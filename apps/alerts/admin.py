"""
Admin configuration for alert subscriptions.
"""
from django.contrib import admin
from .models import AlertSubscription


@admin.register(AlertSubscription)
class AlertSubscriptionAdmin(admin.ModelAdmin):
    list_display = ['subscription_id', 'lat', 'lng', 'email', 'phone', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['subscription_id', 'email', 'phone']
    readonly_fields = ['subscription_id', 'created_at', 'updated_at']
    ordering = ['-created_at']
