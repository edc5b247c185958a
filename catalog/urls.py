from django.urls import path
from . import views

urlpatterns = [
    path('cards/', views.list_cards, name='list_cards'),
    path('cards/featured/', views.featured_cards, name='featured_cards'),
    path('cards/<int:card_id>/', views.get_card, name='get_card'),
    path('categories/', views.list_categories, name='list_categories'),
    path('services/', views.list_services, name='list_services'),
    path('contact/', views.contact, name='contact'),
    path('config/', views.storefront_config, name='storefront_config'),
    path('manage/cards/', views.manage_cards, name='manage_cards'),
    path('manage/cards/<int:card_id>/', views.manage_card, name='manage_card'),
    path('manage/cards/<int:card_id>/toggle-availability/', views.toggle_card, name='toggle_card'),
    path('manage/categories/', views.manage_categories, name='manage_categories'),
    path('manage/categories/<int:category_id>/', views.manage_category, name='manage_category'),
    path('manage/services/', views.manage_services, name='manage_services'),
    path('manage/services/<int:service_id>/', views.manage_service, name='manage_service'),
    path('manage/services/<int:service_id>/toggle-availability/', views.toggle_service, name='toggle_service'),
    path('manage/contact/', views.manage_contact, name='manage_contact'),
    path('manage/dashboard/', views.dashboard, name='catalog_dashboard'),
]
