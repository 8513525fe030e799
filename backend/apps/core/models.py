"""
Core models - webhook bookkeeping.
"""

from django.db import models


class ProcessedWebhook(models.Model):
    """
    Record of a webhook event that has been handled.

    Stripe delivers events at least once; the unique (source, event_id)
    pair lets a redelivery be acknowledged without running handlers again.
    """

    source = models.CharField(max_length=50, help_text="Webhook provider, e.g. 'stripe'")
    event_id = models.CharField(max_length=255, help_text="Provider event ID, e.g. 'evt_xxx'")
    processed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["source", "event_id"],
                name="unique_processed_webhook",
            )
        ]
        ordering = ["-processed_at"]

    def __str__(self) -> str:
        return f"{self.source}:{self.event_id}"
