from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import SettingViewSet

app_name = "settings"

# Mounted at /api/settings/ by the root URLconf, so the viewset takes the empty prefix.
router = SimpleRouter()
router.register(r"", SettingViewSet, basename="setting")

urlpatterns = [
    path("", include(router.urls)),
]
