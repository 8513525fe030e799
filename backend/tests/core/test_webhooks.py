"""Tests for webhook idempotency utilities."""

import pytest
from django.db import IntegrityError, transaction

from apps.core.models import ProcessedWebhook
from apps.core.webhooks import mark_webhook_processed


@pytest.mark.django_db
class TestProcessedWebhookModel:
    """Tests for ProcessedWebhook model."""

    def test_str_representation(self) -> None:
        webhook = ProcessedWebhook.objects.create(source="stripe", event_id="evt_456")

        assert str(webhook) == "stripe:evt_456"
        assert webhook.processed_at is not None

    def test_unique_constraint(self) -> None:
        ProcessedWebhook.objects.create(source="stripe", event_id="evt_123")

        with pytest.raises(IntegrityError):
            ProcessedWebhook.objects.create(source="stripe", event_id="evt_123")

    def test_same_event_id_different_sources(self) -> None:
        ProcessedWebhook.objects.create(source="stripe", event_id="evt_123")
        ProcessedWebhook.objects.create(source="stripe-test", event_id="evt_123")

        assert ProcessedWebhook.objects.filter(event_id="evt_123").count() == 2


def processed(event_id: str) -> bool:
    return ProcessedWebhook.objects.filter(source="stripe", event_id=event_id).exists()


@pytest.mark.django_db
class TestWebhookIdempotency:
    """Tests for mark_webhook_processed."""

    def test_new_event(self) -> None:
        assert processed("evt_new") is False
        assert mark_webhook_processed("stripe", "evt_new") is True
        assert processed("evt_new") is True

    def test_duplicate_returns_false(self) -> None:
        mark_webhook_processed("stripe", "evt_dup")

        assert mark_webhook_processed("stripe", "evt_dup") is False
        assert ProcessedWebhook.objects.filter(event_id="evt_dup").count() == 1

    def test_duplicate_does_not_break_enclosing_transaction(self) -> None:
        """The insert runs in a savepoint, so the outer atomic block stays usable."""
        mark_webhook_processed("stripe", "evt_outer")

        with transaction.atomic():
            assert mark_webhook_processed("stripe", "evt_outer") is False
            assert mark_webhook_processed("stripe", "evt_next") is True

        assert processed("evt_next") is True

    def test_rolled_back_marker_allows_reprocessing(self) -> None:
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                mark_webhook_processed("stripe", "evt_rollback")
                raise RuntimeError("handler failed")

        assert processed("evt_rollback") is False
