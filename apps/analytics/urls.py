from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Trip totals
    path('summary/', views.summary, name='summary'),
    path('drivers/', views.drivers, name='drivers'),
    path('timeseries/', views.timeseries, name='timeseries'),

    # Expenses
    path('expenses/', views.expenses, name='expenses'),

    # Dashboard
    path('dashboard/', views.dashboard, name='dashboard'),
]
