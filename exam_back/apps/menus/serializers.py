from rest_framework import serializers

from .models import UserMenuOverride
from .services import PermissionSource


# 사용자 메뉴 예외 권한 설정 요청
class MenuOverrideSerializer(serializers.Serializer):
    permission_type = serializers.ChoiceField(choices=UserMenuOverride.PermissionType.choices)


# 메뉴 정렬 항목 (id 필수, parent_id / order 는 전달된 경우만 변경)
class MenuOrderItemSerializer(serializers.Serializer):
    id = serializers.IntegerField(min_value=1)
    parent_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    order = serializers.IntegerField(required=False)


class MenuBatchSortSerializer(serializers.Serializer):
    menuUpdates = MenuOrderItemSerializer(many=True, allow_empty=False)


# 사용자 메뉴 권한 계산 결과 (메뉴 정보 + 판정)
class EffectivePermissionSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    code = serializers.CharField()
    title = serializers.CharField()
    path = serializers.CharField(allow_null=True)
    component = serializers.CharField(allow_null=True)
    icon = serializers.CharField(allow_null=True)
    parent_id = serializers.IntegerField(allow_null=True)
    order = serializers.IntegerField(allow_null=True)
    level = serializers.IntegerField()
    menu_type = serializers.CharField()
    is_hidden = serializers.BooleanField()
    permission_code = serializers.CharField(allow_null=True)
    redirect = serializers.CharField(allow_null=True)
    meta = serializers.JSONField(allow_null=True)
    has_permission = serializers.BooleanField()
    source = serializers.ChoiceField(choices=PermissionSource.choices)
