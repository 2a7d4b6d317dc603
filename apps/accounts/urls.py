from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'users'

router = DefaultRouter()
router.register(r'users', views.UserViewSet, basename='user')

urlpatterns = [
    # Authentication
    path('login/', views.login, name='login'),
    path('logout/', views.logout, name='logout'),

    # Current user
    path('me/', views.current_user, name='current-user'),
    path('me/password/', views.change_password, name='change-password'),

    # User administration (super admin)
    # GET    /api/auth/users/        - List users
    # POST   /api/auth/users/        - Create user
    # GET    /api/auth/users/{id}/   - Get user
    # PATCH  /api/auth/users/{id}/   - Update user
    # DELETE /api/auth/users/{id}/   - Delete user
    path('', include(router.urls)),
]
