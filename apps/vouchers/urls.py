from django.urls import path, re_path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'vouchers'

router = DefaultRouter()
router.register(r'', views.VoucherViewSet, basename='voucher')

urlpatterns = [
    # POST   /api/vouchers/redeem                 - Redeem a voucher code (admin)
    # POST   /api/vouchers/gift/                  - Gift a voucher (admin)
    # POST   /api/vouchers/birthdays/run/         - Run birthday batch (admin)
    # GET    /api/vouchers/birthdays/upcoming/    - Birthday tracker (admin)
    re_path(r'^redeem/?$', views.redeem, name='redeem'),
    path('gift/', views.gift, name='gift'),
    path('birthdays/run/', views.run_birthdays, name='birthdays-run'),
    path('birthdays/upcoming/', views.birthdays_upcoming, name='birthdays-upcoming'),

    # Voucher ViewSet routes
    # GET    /api/vouchers/              - List own vouchers
    # GET    /api/vouchers/{code}/       - Get voucher
    # GET    /api/vouchers/{code}/qr/    - Get QR code (PNG)
    path('', include(router.urls)),
]
