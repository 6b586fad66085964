import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

User = get_user_model()


@pytest.mark.django_db
class TestUserMeEndpoint:
    def setup_method(self):
        self.client = APIClient()
        self.url = reverse("user-me")
        self.test_username = "testuser"
        self.user = User.objects.create_user(username=self.test_username)

    def test_me_endpoint_with_mock_middleware_authentication(self):
        """Test that user can authenticate via X-User-NAME header"""
        response = self.client.get(self.url, HTTP_X_USER_NAME=self.test_username)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            "id": str(self.user.pk),
            "username": self.test_username,
            "daily_goal": 20,
        }

    def test_me_endpoint_with_non_existent_user_header(self):
        """Test that non-existent user in header returns 401"""
        response = self.client.get(self.url, HTTP_X_USER_NAME="nonexistentuser")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_me_endpoint_without_authentication(self):
        """Test that unauthenticated request returns 401"""
        response = self.client.get(self.url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {"error": "User not authenticated"}

    def test_patch_daily_goal(self):
        """Test that the daily goal can be changed"""
        response = self.client.patch(
            self.url, {"daily_goal": 5}, format="json", HTTP_X_USER_NAME=self.test_username
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["daily_goal"] == 5
        self.user.refresh_from_db()
        assert self.user.daily_goal == 5

    @pytest.mark.parametrize("goal", [0, -3, "many"])
    def test_patch_rejects_invalid_goal(self, goal):
        """Test that a goal below one is rejected"""
        response = self.client.patch(
            self.url, {"daily_goal": goal}, format="json", HTTP_X_USER_NAME=self.test_username
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        self.user.refresh_from_db()
        assert self.user.daily_goal is None

    def test_patch_ignores_username(self):
        """Test that read-only fields are left alone"""
        response = self.client.patch(
            self.url, {"username": "renamed"}, format="json", HTTP_X_USER_NAME=self.test_username
        )

        assert response.status_code == status.HTTP_200_OK
        self.user.refresh_from_db()
        assert self.user.username == self.test_username
