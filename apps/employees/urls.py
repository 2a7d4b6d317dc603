from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'employees'

router = DefaultRouter()
router.register(r'', views.EmployeeViewSet, basename='employee')

urlpatterns = [
    # GET    /api/employees/                          - List employees
    # POST   /api/employees/                          - Create employee
    # GET    /api/employees/drivers/                  - Active drivers
    # GET    /api/employees/{id}/                     - Get employee
    # PATCH  /api/employees/{id}/                     - Update employee
    # DELETE /api/employees/{id}/                     - Delete employee
    # GET    /api/employees/{id}/balance-history/     - Balance history
    path('', include(router.urls)),
]
