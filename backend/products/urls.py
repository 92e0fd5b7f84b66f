from django.urls import path, include
from rest_framework import routers
from .views import CategoryViewSet, ProductViewSet

app_name = "products"

router = routers.SimpleRouter()
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"products", ProductViewSet, basename="product")

urlpatterns = [
    path("", include(router.urls)),
]
