"""
Alert and welcome message rendering.
"""
from typing import Optional

from django.template.loader import render_to_string
from django.utils import timezone

from apps.aqi.types import IndexResult
from .types import AlertMessage, Subscription

EMAIL_TEMPLATE = 'alerts/alert_email.html'

WELCOME_RECOMMENDATIONS = (
    'This is a test notification to confirm your subscription is working',
    'You will receive real alerts when air quality changes in your area',
    'Check your email settings to ensure notifications are not going to spam',
)


def format_alert_text(result: IndexResult) -> str:
    """Plain-text body for an index alert."""
    lines = [
        f"Air Quality Alert: {result.category.label}",
        f"AQI: {result.overall_index}",
        "",
        result.health_message,
        "",
        "Recommendations:",
    ]
    lines.extend(f"• {rec}" for rec in result.recommendations)
    lines.extend(["", "Stay safe and check air quality regularly!"])
    return "\n".join(lines)


def _render_html(message_fields: dict, intro: str = '') -> str:
    category = message_fields.get('category')
    return render_to_string(EMAIL_TEMPLATE, {
        'title': message_fields['title'],
        'aqi': message_fields.get('aqi'),
        'category_label': category.label if category else '',
        'color_hex': category.color_hex if category else '#1e3a8a',
        'health_message': message_fields.get('health_message', ''),
        'recommendations': message_fields.get('recommendations', ()),
        'lat': message_fields['location'][0],
        'lng': message_fields['location'][1],
        'intro': intro,
        'timestamp': message_fields['timestamp'],
    })


def build_alert_message(result: IndexResult) -> AlertMessage:
    """Message sent when a fresh result matches a subscription."""
    fields = {
        'title': f"Air Quality Alert: {result.category.label}",
        'aqi': result.overall_index,
        'category': result.category,
        'health_message': result.health_message,
        'recommendations': tuple(result.recommendations),
        'location': result.location_key,
        'timestamp': timezone.now(),
    }
    return AlertMessage(
        body=format_alert_text(result),
        html=_render_html(fields),
        **fields,
    )


def build_welcome_message(subscription: Subscription, current: Optional[IndexResult] = None) -> AlertMessage:
    """
    Confirmation sent right after subscribing.

    Includes the current index for the location when one is available.
    """
    levels = ', '.join(sorted(level.label for level in subscription.alert_levels))
    intro = (
        f"Thank you for subscribing to air quality alerts for location "
        f"{subscription.lat:.4f}, {subscription.lng:.4f}. You will receive "
        f"notifications when air quality reaches the following levels: {levels}."
    )
    fields = {
        'title': 'Welcome to Air Quality Alerts!',
        'aqi': current.overall_index if current else None,
        'category': current.category if current else None,
        'health_message': current.health_message if current else '',
        'recommendations': WELCOME_RECOMMENDATIONS,
        'location': subscription.location,
        'timestamp': timezone.now(),
    }
    return AlertMessage(
        body=intro,
        html=_render_html(fields, intro=intro),
        **fields,
    )
