from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # Audit history
    path('histories/', views.history_list, name='history-list'),

    # Application settings
    path('settings/', views.setting_list, name='setting-list'),
    path('settings/<slug:key>/', views.setting_detail, name='setting-detail'),
]
