from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import PaymentViewSet

app_name = "payments"

router = SimpleRouter()
router.register(r"payments", PaymentViewSet, basename="payment")

urlpatterns = [
    path("", include(router.urls)),
]
