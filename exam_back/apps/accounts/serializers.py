import re

from rest_framework import serializers

from .models import Role, RolePermissionHistory


class RoleSerializer(serializers.ModelSerializer):
    user_count = serializers.SerializerMethodField()

    class Meta:
        model = Role
        fields = [
            "id",
            "code",
            "name",
            "description",
            "sort_order",
            "is_system",
            "is_active",
            "user_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["is_system", "created_at", "updated_at"]

    def validate_code(self, value):
        if not re.match(r'^[A-Z0-9_]+$', value):
            raise serializers.ValidationError(
                "역할 코드는 영문 대문자, 숫자, _ 만 사용할 수 있습니다."
            )
        # 시스템 역할 코드는 변경 불가
        if self.instance and self.instance.is_system and self.instance.code != value:
            raise serializers.ValidationError("시스템 역할 코드는 변경할 수 없습니다.")
        return value

    def get_user_count(self, obj):
        return obj.users.count()


# 사용자 역할 변경 요청 (id, 숫자 문자열, 코드, {"id"} / {"code"} 혼용 가능)
class UserRoleAssignSerializer(serializers.Serializer):
    roles = serializers.ListField(child=serializers.JSONField(), allow_empty=True)


# 역할 메뉴 권한 변경 요청
class RoleMenuAssignSerializer(serializers.Serializer):
    menu_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=True)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


# 역할별 메뉴 접근 변경 이력
class RolePermissionHistorySerializer(serializers.ModelSerializer):
    role_name = serializers.CharField(source="role.name", read_only=True)
    menu_code = serializers.CharField(source="menu.code", read_only=True)
    changed_by_name = serializers.CharField(
        source="changed_by.login_id",
        read_only=True,
        default=None,
    )

    class Meta:
        model = RolePermissionHistory
        fields = [
            "id",
            "role_name",
            "menu_code",
            "action",
            "changed_by_name",
            "changed_at",
            "reason",
        ]
