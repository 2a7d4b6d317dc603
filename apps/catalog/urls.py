from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'catalog'

router = DefaultRouter()
router.register(r'', views.ProductViewSet, basename='product')

urlpatterns = [
    # GET    /api/products/                         - List products
    # POST   /api/products/                         - Create product
    # GET    /api/products/{id}/                    - Get product with price history
    # PATCH  /api/products/{id}/                    - Update product
    # DELETE /api/products/{id}/                    - Delete product
    # GET    /api/products/{id}/price-history/      - Price history
    # POST   /api/products/{id}/price-history/      - Append (backdated) price change
    # GET    /api/products/{id}/price-on/?date=     - Price in effect on a date
    path('', include(router.urls)),
]
