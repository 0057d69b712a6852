"""
Operations endpoints.

These endpoints are for infrastructure monitoring and should be:
- Excluded from the session gate middleware
- Protected at network level (internal only) in production
"""
from django.urls import path

from ops.health import FullHealthView, LivenessView, ReadinessView

urlpatterns = [
    # Kubernetes probes
    path("live", LivenessView.as_view(), name="health-live"),
    path("ready", ReadinessView.as_view(), name="health-ready"),
    path("full", FullHealthView.as_view(), name="health-full"),
]
