from django.contrib import admin
from django.urls import include, path

from core.views import csrf_token

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/csrf/', csrf_token, name='csrf_token'),
    path('api/catalog/', include('catalog.urls')),
    path('api/promotions/', include('promotions.urls')),
    path('api/bookings/', include('bookings.urls')),
]
