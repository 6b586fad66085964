from django.contrib.auth import get_user_model, login
from django.http import HttpResponse
import structlog

import logging

logger = logging.getLogger(__name__)

USER_HEADER = "X-User-NAME"
PROTECTED_PREFIX = "/api"


class MockLoginUserMiddleware:
    """
    Logs a learner in from the ``X-User-NAME`` header on /api routes.

    Real authentication is out of scope. The resolved user id is bound into
    the structlog context so every scheduler event of the request carries it.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        structlog.contextvars.clear_contextvars()
        if request.path.startswith(PROTECTED_PREFIX):
            username = request.headers.get(USER_HEADER)
            if username:
                user = self._resolve(username)
                if user is None:
                    logger.info("Mock login rejected for unknown user: %s", username)
                    return HttpResponse("User not found or invalid credentials.", status=401)
                login(request, user)
                structlog.contextvars.bind_contextvars(learner_id=str(user.pk))
        return self.get_response(request)

    @staticmethod
    def _resolve(username):
        User = get_user_model()
        try:
            return User.objects.get(username=username)
        except User.DoesNotExist:
            return None
