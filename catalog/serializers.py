from rest_framework import serializers

from .models import Card, Category, Service


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'created_at', 'updated_at']


class CategoryRefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name']


class CardSerializer(serializers.ModelSerializer):
    category_id = serializers.IntegerField(read_only=True, allow_null=True)
    category = CategoryRefSerializer(read_only=True)

    class Meta:
        model = Card
        fields = [
            'id', 'name', 'set_name', 'rarity', 'condition', 'price', 'image', 'images',
            'category_id', 'category', 'collector_notes', 'featured', 'available',
            'created_at', 'updated_at',
        ]


class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = ['id', 'name', 'description', 'price', 'image', 'available', 'created_at', 'updated_at']
