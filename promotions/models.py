import logging

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

logger = logging.getLogger(__name__)


def normalize_code(raw):
    if raw is None:
        return ''
    return str(raw).strip().upper()


def usable_at(at):
    return (
        Q(active=True)
        & (Q(expires_at__isnull=True) | Q(expires_at__gt=at))
        & (Q(usage_limit__isnull=True) | Q(usage_count__lt=F('usage_limit')))
    )


class PromoCodeQuerySet(models.QuerySet):
    def usable(self, at=None):
        return self.filter(usable_at(at or timezone.now()))

    def expired(self, at=None):
        return self.filter(expires_at__isnull=False, expires_at__lte=at or timezone.now())

    def search(self, query):
        if not query or not query.strip():
            return self
        return self.filter(code__icontains=query.strip())


class PromoCodeManager(models.Manager.from_queryset(PromoCodeQuerySet)):
    def validate(self, code, now=None):
        """Return the usable promo code matching ``code``, or ``None``.

        Unknown, inactive, expired and used-up codes all look the same to the
        caller. Read-only: ``usage_count`` is never touched here.
        """
        normalized = normalize_code(code)
        if not normalized:
            return None
        promo = self.filter(code=normalized).first()
        if promo is None or not promo.is_usable(now or timezone.now()):
            return None
        return promo

    def redeem(self, code, now=None):
        """Consume one use of ``code`` if it is usable; return the refreshed row or ``None``.

        The usability check and the increment are a single conditional UPDATE,
        so concurrent redemptions can never push ``usage_count`` past
        ``usage_limit``.
        """
        normalized = normalize_code(code)
        if not normalized:
            return None
        now = now or timezone.now()
        updated = self.filter(code=normalized).usable(now).update(
            usage_count=F('usage_count') + 1,
            updated_at=now,
        )
        if not updated:
            logger.warning('Promo code %s could not be redeemed', normalized)
            return None
        promo = self.get(code=normalized)
        logger.info('Redeemed promo code %s (%d used)', promo.code, promo.usage_count)
        return promo


class PromoCode(models.Model):
    STATUS_INACTIVE = 'Inactive'
    STATUS_EXPIRED = 'Expired'
    STATUS_LIMIT_REACHED = 'Limit Reached'
    STATUS_ACTIVE = 'Active'

    code = models.CharField(max_length=50, unique=True)
    discount_percent = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(100)])
    active = models.BooleanField(default=True, db_index=True)
    usage_limit = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)], help_text='Leave empty for unlimited')
    usage_count = models.PositiveIntegerField(default=0)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PromoCodeManager()

    class Meta:
        db_table = 'promo_codes'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code} ({self.discount_percent}%)"

    def save(self, *args, **kwargs):
        self.code = normalize_code(self.code)
        super().save(*args, **kwargs)

    def is_expired(self, at):
        return self.expires_at is not None and self.expires_at <= at

    def limit_reached(self):
        return self.usage_limit is not None and self.usage_count >= self.usage_limit

    def is_usable(self, at=None):
        at = at or timezone.now()
        return self.active and not self.is_expired(at) and not self.limit_reached()

    def display_status(self, at=None):
        at = at or timezone.now()
        if not self.active:
            return self.STATUS_INACTIVE
        if self.is_expired(at):
            return self.STATUS_EXPIRED
        if self.limit_reached():
            return self.STATUS_LIMIT_REACHED
        return self.STATUS_ACTIVE
