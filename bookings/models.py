import logging

from django.db import models
from django.db.models import Count
from django.utils import timezone

from core.errors import ValidationError

logger = logging.getLogger(__name__)

ALL = 'all'


class BookingRequestQuerySet(models.QuerySet):
    def with_status(self, status=None):
        if not status or status == ALL:
            return self
        if status not in BookingRequest.TRANSITIONS:
            raise ValidationError('Invalid input', errors={'status': f'Unknown status: {status}'})
        return self.filter(status=status)

    def status_counts(self):
        counts = {status: 0 for status, _ in BookingRequest.STATUS_CHOICES}
        for row in self.order_by().values('status').annotate(n=Count('id')):
            counts[row['status']] = row['n']
        return counts


class BookingRequest(models.Model):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (CONFIRMED, 'Confirmed'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    ]
    TRANSITIONS = {
        PENDING: (CONFIRMED, CANCELLED),
        CONFIRMED: (COMPLETED, CANCELLED),
        COMPLETED: (),
        CANCELLED: (),
    }
    ITEM_TYPE_CHOICES = [
        ('card', 'Card'),
        ('service', 'Service'),
    ]

    # Catalog item, copied by value at submission.
    item_type = models.CharField(max_length=10, choices=ITEM_TYPE_CHOICES, default='card')
    item_id = models.PositiveBigIntegerField(null=True, blank=True)
    item_name = models.CharField(max_length=255)
    unit_price = models.PositiveIntegerField()

    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=50)
    email = models.CharField(max_length=254)
    quantity = models.PositiveIntegerField(default=1)
    message = models.TextField(blank=True)

    # Promo terms, copied by value at submission.
    promo_code = models.CharField(max_length=50, null=True, blank=True)
    discount_percent = models.PositiveSmallIntegerField(null=True, blank=True)
    final_price = models.PositiveIntegerField()

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingRequestQuerySet.as_manager()

    class Meta:
        db_table = 'booking_requests'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.full_name} - {self.item_name} - {self.status}"

    def is_terminal(self):
        return not self.TRANSITIONS[self.status]

    def allowed_transitions(self):
        return self.TRANSITIONS[self.status]

    def can_transition_to(self, status):
        return status in self.TRANSITIONS[self.status]

    def transition_to(self, status):
        """Move to ``status``, touching nothing but the status itself.

        The update only applies if the row still holds the status this
        instance was loaded with, so two operators cannot both move a booking
        out of the same state.
        """
        if status not in self.TRANSITIONS:
            raise ValidationError('Invalid input', errors={'status': f'Unknown status: {status}'})
        if not self.can_transition_to(status):
            logger.warning('Refused booking %s transition %s -> %s', self.pk, self.status, status)
            raise ValidationError(
                f'Cannot change status from {self.status} to {status}',
                errors={'status': f'Allowed: {", ".join(self.allowed_transitions()) or "none"}'},
            )

        now = timezone.now()
        updated = type(self).objects.filter(pk=self.pk, status=self.status).update(status=status, updated_at=now)
        if not updated:
            self.refresh_from_db(fields=['status', 'updated_at'])
            raise ValidationError(f'Booking status changed to {self.status} in the meantime')

        logger.info('Booking %s %s -> %s', self.pk, self.status, status)
        self.status = status
        self.updated_at = now
        return self
