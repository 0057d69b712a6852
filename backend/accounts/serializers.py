from django.conf import settings
from django.contrib.auth import authenticate
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken


class CompanyCreateSerializer(serializers.Serializer):
    name = serializers.CharField(
        max_length=200,
        error_messages={
            "required": "Company name is required.",
            "blank": "Company name is required.",
        },
    )
    base_currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    fy_start_month = serializers.IntegerField(min_value=1, max_value=12, required=False)

    def validate_base_currency(self, value: str):
        value = (value or "").strip().upper() or settings.DEFAULT_BASE_CURRENCY
        if len(value) != 3 or not value.isalpha():
            raise serializers.ValidationError("Use a 3-letter currency code.")
        return value

    def validate(self, attrs):
        attrs.setdefault("base_currency", settings.DEFAULT_BASE_CURRENCY)
        attrs.setdefault("fy_start_month", settings.DEFAULT_FY_START_MONTH)
        return attrs


class CompanySummarySerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    base_currency = serializers.CharField()


class CompanyRoleSerializer(serializers.Serializer):
    company_id = serializers.CharField()
    role = serializers.CharField()


class ActiveCompanySerializer(serializers.Serializer):
    companyId = serializers.CharField()


class LoginSerializer(serializers.Serializer):
    """Validate credentials and issue an access/refresh token pair."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get("request"),
            email=attrs["email"].lower().strip(),
            password=attrs["password"],
        )
        if user is None or not user.is_active:
            raise serializers.ValidationError("Invalid email or password.")

        refresh = RefreshToken.for_user(user)
        return {
            "user": user,
            "refresh": str(refresh),
            "access": str(refresh.access_token),
        }
