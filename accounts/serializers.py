from rest_framework import serializers
from django.contrib.auth import get_user_model


class UserSettingsSerializer(serializers.ModelSerializer):
    daily_goal = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = get_user_model()
        fields = ["id", "username", "daily_goal"]
        read_only_fields = ["id", "username"]

    def to_representation(self, instance):
        from scheduler.config import load_policy

        data = super().to_representation(instance)
        data["daily_goal"] = instance.effective_daily_goal(load_policy().default_daily_goal)
        return data
