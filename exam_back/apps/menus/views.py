import logging

from drf_spectacular.utils import extend_schema, OpenApiResponse
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.common.permission import IsPlatformAdmin, IsPlatformAdminOrSelf
from apps.common.utils import parse_id_param, success_response
from .serializers import (
    EffectivePermissionSerializer,
    MenuBatchSortSerializer,
    MenuOverrideSerializer,
)
from .services import (
    batch_update_menu_order,
    check_menu_permission,
    get_full_menu_tree,
    get_route_tree,
    get_user_menu_tree,
    remove_user_menu_override,
    resolve_permissions,
    set_user_menu_override,
)

logger = logging.getLogger(__name__)


# ========== 메뉴 관리 ==========

@extend_schema(tags=["Menus"], summary="전체 메뉴 트리 (비활성 포함, 관리자)")
class MenuTreeView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        return success_response(get_full_menu_tree())


@extend_schema(tags=["Menus"], summary="라우팅용 활성 메뉴 트리")
class MenuRouteTreeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return success_response(get_route_tree())


@extend_schema(
    tags=["Menus"],
    summary="메뉴 정렬/이동 일괄 변경 (관리자)",
    request=MenuBatchSortSerializer,
    responses={
        200: OpenApiResponse(description="변경 완료"),
        400: OpenApiResponse(description="잘못된 요청 (순환 이동 등)"),
        404: OpenApiResponse(description="메뉴 없음"),
    }
)
class MenuBatchSortView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request):
        serializer = MenuBatchSortSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        updates = [dict(item) for item in serializer.validated_data["menuUpdates"]]
        updated = batch_update_menu_order(updates)
        return success_response({"updated": updated})


# 로그인 사용자 본인의 메뉴 트리
@extend_schema(tags=["Menus"], summary="현재 사용자 메뉴 트리")
class CurrentUserMenuView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return success_response(get_user_menu_tree(request.user.id))


# ========== 사용자별 메뉴 권한 ==========

@extend_schema(
    tags=["User Menu Permissions"],
    summary="사용자 메뉴 권한 계산 결과",
    responses=EffectivePermissionSerializer(many=True),
)
class UserPermissionListView(APIView):
    permission_classes = [IsPlatformAdminOrSelf]

    def get(self, request, user_id):
        user_id = parse_id_param(user_id, field="user_id")
        permissions = resolve_permissions(user_id)
        serializer = EffectivePermissionSerializer(
            [permission.as_dict() for permission in permissions],
            many=True,
        )
        return success_response(serializer.data)


@extend_schema(tags=["User Menu Permissions"], summary="사용자 접근 가능 메뉴 트리")
class UserMenuTreeView(APIView):
    permission_classes = [IsPlatformAdminOrSelf]

    def get(self, request, user_id):
        user_id = parse_id_param(user_id, field="user_id")
        return success_response(get_user_menu_tree(user_id))


class UserMenuPermissionView(APIView):
    """
    단일 메뉴 권한

    GET: 권한 확인 (관리자 또는 본인)
    POST: grant / deny 예외 권한 설정 (관리자)
    DELETE: 예외 권한 제거 (관리자)
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [IsPlatformAdminOrSelf()]
        return [IsPlatformAdmin()]

    @extend_schema(tags=["User Menu Permissions"], summary="단일 메뉴 권한 확인")
    def get(self, request, user_id, menu_id):
        user_id = parse_id_param(user_id, field="user_id")
        menu_id = parse_id_param(menu_id, field="menu_id")
        has_permission = check_menu_permission(user_id, menu_id)
        return success_response({
            "user_id": user_id,
            "menu_id": menu_id,
            "has_permission": has_permission,
        })

    @extend_schema(
        tags=["User Menu Permissions"],
        summary="사용자 메뉴 예외 권한 설정",
        request=MenuOverrideSerializer,
    )
    def post(self, request, user_id, menu_id):
        user_id = parse_id_param(user_id, field="user_id")
        menu_id = parse_id_param(menu_id, field="menu_id")

        serializer = MenuOverrideSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        override, created = set_user_menu_override(
            user_id, menu_id, serializer.validated_data["permission_type"]
        )
        return success_response(
            {
                "user_id": override.user_id,
                "menu_id": override.menu_id,
                "permission_type": override.permission_type,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(tags=["User Menu Permissions"], summary="사용자 메뉴 예외 권한 제거")
    def delete(self, request, user_id, menu_id):
        user_id = parse_id_param(user_id, field="user_id")
        menu_id = parse_id_param(menu_id, field="menu_id")
        remove_user_menu_override(user_id, menu_id)
        return success_response({"user_id": user_id, "menu_id": menu_id})
