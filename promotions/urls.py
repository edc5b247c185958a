from django.urls import path
from . import views

urlpatterns = [
    path('validate/', views.validate_code, name='validate_promo_code'),
    path('quote/', views.quote, name='quote'),
    path('manage/', views.manage_promo_codes, name='manage_promo_codes'),
    path('manage/stats/', views.promo_code_stats, name='promo_code_stats'),
    path('manage/<int:promo_id>/', views.manage_promo_code, name='manage_promo_code'),
    path('manage/<int:promo_id>/toggle/', views.toggle_promo_code, name='toggle_promo_code'),
]
