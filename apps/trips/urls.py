from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'trips'

router = DefaultRouter()
router.register(r'', views.DailyTripViewSet, basename='trip')

urlpatterns = [
    # GET    /api/trips/                        - List trips
    # POST   /api/trips/                        - Create and settle a trip
    # POST   /api/trips/preview/                - Settlement preview (nothing saved)
    # GET    /api/trips/chain/{driver_id}/      - Driver balance chain audit
    # GET    /api/trips/{id}/                   - Get trip with lines
    # PATCH  /api/trips/{id}/                   - Edit and recompute a trip
    # DELETE /api/trips/{id}/                   - Delete trip
    # POST   /api/trips/{id}/recalculate/       - Re-price from price history
    path('', include(router.urls)),
]
