"""
Store settings endpoint: public read, admin update.

The settings row is a singleton cached by ``StoreSettings.load``; saving it
through this view invalidates the cache so new orders price with the
updated values.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.audit import log_action
from authentication.permissions import IsAdminOrReadOnly

from .models import StoreSettings
from .serializers import StoreSettingsSerializer


class StoreSettingsView(APIView):
    """
    Security Features:
    - Anyone may read shipping and tax settings
    - Only admins may change them, and every change is audited
    """

    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        return Response(StoreSettingsSerializer(StoreSettings.load()).data)

    def put(self, request):
        return self._update(request)

    def patch(self, request):
        return self._update(request)

    def _update(self, request):
        instance = StoreSettings.objects.filter(pk=StoreSettings.SINGLETON_PK).first() or StoreSettings()
        serializer = StoreSettingsSerializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        log_action(request, "UPDATE", "SETTINGS", StoreSettings.SINGLETON_PK, "SUCCESS", {"fields": sorted(request.data)})
        return Response(serializer.data, status=status.HTTP_200_OK)
