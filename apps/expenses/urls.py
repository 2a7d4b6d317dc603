from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'expenses'

router = DefaultRouter()
router.register(r'', views.AdditionalExpenseViewSet, basename='expense')

urlpatterns = [
    # GET    /api/expenses/                    - List expenses
    # POST   /api/expenses/                    - Record expense
    # GET    /api/expenses/{id}/               - Get expense
    # PATCH  /api/expenses/{id}/               - Edit pending expense
    # DELETE /api/expenses/{id}/               - Delete expense
    # POST   /api/expenses/{id}/approve/       - Approve (super admin)
    # POST   /api/expenses/{id}/reject/        - Reject (super admin)
    path('', include(router.urls)),
]
