"""
Land Administration Back Office - URL Configuration
"""

from django.urls import path
from . import views

urlpatterns = [
    # Land Registration
    path('land-registration/', views.land_collection, name='land_collection'),
    path('land-registration/<uuid:pk>/', views.land_detail, name='land_detail'),
    path('land-registration/<uuid:pk>/approve/', views.land_approve, name='land_approve'),
    path('land-registration/<uuid:pk>/reject/', views.land_reject, name='land_reject'),

    # Land Transfers
    path('land-transfer/', views.transfer_collection, name='transfer_collection'),
    path('land-transfer/statistics/', views.transfer_statistics, name='transfer_statistics'),
    path('land-transfer/export/', views.transfer_export_excel, name='transfer_export_excel'),
    path('land-transfer/by-land/<uuid:land_id>/', views.transfers_by_land, name='transfers_by_land'),
    path('land-transfer/by-user/<int:user_id>/', views.transfers_by_user, name='transfers_by_user'),
    path('land-transfer/district/<str:district>/', views.transfers_by_district, name='transfers_by_district'),
    path('land-transfer/history/<uuid:land_id>/', views.transfer_history, name='transfer_history'),
    path('land-transfer/<uuid:pk>/', views.transfer_detail, name='transfer_detail'),
    path('land-transfer/<uuid:pk>/approve/', views.transfer_approve, name='transfer_approve'),
    path('land-transfer/<uuid:pk>/reject/', views.transfer_reject, name='transfer_reject'),
    path('land-transfer/<uuid:pk>/cancel/', views.transfer_cancel, name='transfer_cancel'),

    # Cache Administration
    path('land-transfer/cache/health/', views.transfer_cache_health, name='transfer_cache_health'),
    path('land-transfer/cache/preload/', views.transfer_cache_preload, name='transfer_cache_preload'),
]
