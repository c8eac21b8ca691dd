from django.urls import path
from . import views

urlpatterns = [
    # Templates
    path('templates/', views.template_list, name='sms_template_list'),
    path('templates/<int:template_id>/', views.template_update, name='sms_template_update'),

    # Promo campaigns
    path('campaigns/preview/', views.campaign_preview, name='promo_campaign_preview'),
    path('campaigns/send/', views.campaign_send, name='promo_campaign_send'),

    # SMS white/blacklist
    path('phone-lists/', views.phone_list_store, name='sms_phone_list_store'),
    path('phone-lists/<int:entry_id>/delete/', views.phone_list_delete, name='sms_phone_list_delete'),

    # Customer contacts
    path('contacts/import/', views.contacts_import, name='customer_contacts_import'),
]
