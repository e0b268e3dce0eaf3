from rest_framework.permissions import BasePermission

from .utils import parse_id_param


class IsPlatformAdmin(BasePermission):
    """플랫폼 관리자(is_superuser)만 접근 가능"""
    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return request.user.is_platform_admin


class IsPlatformAdminOrSelf(BasePermission):
    """플랫폼 관리자 또는 URL 의 user_id 가 본인인 경우 접근 가능"""
    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        if request.user.is_platform_admin:
            return True
        # 잘못된 user_id 는 관리자 요청과 같이 400
        return parse_id_param(view.kwargs.get("user_id", ""), field="user_id") == request.user.id
