from django.db import models
from django.db.models import Q

ALL = 'All'


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'categories'
        ordering = ['name']
        verbose_name_plural = 'categories'

    def __str__(self):
        return self.name


class CardQuerySet(models.QuerySet):
    def available(self):
        return self.filter(available=True)

    def featured(self):
        return self.available().filter(featured=True)

    def browse(self, category=None, rarity=None, q=None):
        """Collection filter: ``All`` or an empty value leaves a criterion out."""
        cards = self.available()
        if category and category != ALL:
            cards = cards.filter(category__name=category)
        if rarity and rarity != ALL:
            cards = cards.filter(rarity=rarity)
        if q and q.strip():
            term = q.strip()
            cards = cards.filter(Q(name__icontains=term) | Q(set_name__icontains=term))
        return cards


class Card(models.Model):
    RARITY_CHOICES = [
        ('Common', 'Common'),
        ('Uncommon', 'Uncommon'),
        ('Rare', 'Rare'),
        ('Ultra Rare', 'Ultra Rare'),
        ('Secret Rare', 'Secret Rare'),
        ('Grail', 'Grail'),
    ]
    CONDITION_CHOICES = [
        ('Mint', 'Mint'),
        ('Near Mint', 'Near Mint'),
        ('Excellent', 'Excellent'),
        ('Good', 'Good'),
        ('Played', 'Played'),
    ]

    name = models.CharField(max_length=255)
    set_name = models.CharField(max_length=255)
    rarity = models.CharField(max_length=20, choices=RARITY_CHOICES)
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES)
    price = models.PositiveIntegerField(help_text='Unit price in the smallest currency unit')
    image = models.URLField(max_length=1000)
    images = models.JSONField(default=list, blank=True)
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='cards')
    collector_notes = models.TextField(null=True, blank=True)
    featured = models.BooleanField(default=False)
    available = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CardQuerySet.as_manager()

    class Meta:
        db_table = 'cards'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.set_name})"


class Service(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    price = models.PositiveIntegerField(null=True, blank=True, help_text='Leave empty for price on request')
    image = models.URLField(max_length=1000, null=True, blank=True)
    available = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'services'
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def is_priced(self):
        return self.price is not None


class ContactSetting(models.Model):
    KEYS = [
        ('instagram_handle', 'Instagram Handle'),
        ('instagram_url', 'Instagram URL'),
        ('email', 'Email Address'),
        ('location', 'Location Info'),
        ('response_time', 'Response Time Info'),
    ]

    key = models.CharField(max_length=50, unique=True, choices=KEYS)
    value = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contact_settings'
        ordering = ['key']

    def __str__(self):
        return f"{self.key}={self.value}"
