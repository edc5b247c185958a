from django.urls import path
from . import views

urlpatterns = [
    path('', views.create_booking, name='create_booking'),
    path('manage/', views.list_bookings, name='list_bookings'),
    path('manage/stats/', views.booking_stats, name='booking_stats'),
    path('manage/<int:booking_id>/', views.manage_booking, name='manage_booking'),
    path('manage/<int:booking_id>/status/', views.update_booking_status, name='update_booking_status'),
]
