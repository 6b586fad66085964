from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .serializers import UserSettingsSerializer


class UserViewSet(viewsets.ViewSet):
    """
    ViewSet for user-related operations.
    """

    @action(detail=False, methods=["get", "patch"])
    def me(self, request):
        """
        Returns the logged-in user's settings; PATCH updates the daily goal.
        """
        if not request.user.is_authenticated:
            return Response(
                {"error": "User not authenticated"}, status=status.HTTP_401_UNAUTHORIZED
            )

        if request.method == "PATCH":
            s = UserSettingsSerializer(request.user, data=request.data, partial=True)
            s.is_valid(raise_exception=True)
            s.save()
            return Response(s.data, status=status.HTTP_200_OK)

        return Response(
            UserSettingsSerializer(request.user).data, status=status.HTTP_200_OK
        )
