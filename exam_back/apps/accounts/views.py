# 역할 관리 / 사용자 역할 / 역할별 메뉴 권한 API
# apps/accounts/views.py → 요청을 받아서 서비스 함수를 호출
import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.views import APIView

from apps.common.permission import IsPlatformAdmin
from apps.common.utils import parse_id_param, success_response
from .filters import RoleFilter
from .models import Role, RolePermissionHistory
from .serializers import (
    RoleMenuAssignSerializer,
    RolePermissionHistorySerializer,
    RoleSerializer,
    UserRoleAssignSerializer,
)
from .services.role_service import (
    assign_role_menus,
    assign_user_roles,
    ensure_role_deletable,
    get_role_menus,
    get_user_roles,
    notify_role_members,
)

logger = logging.getLogger(__name__)


# 1. 역할 목록 / 상세 / 생성 / 수정 / 삭제 (관리자)
@extend_schema(tags=["Roles"])
class RoleViewSet(viewsets.ModelViewSet):
    permission_classes = [IsPlatformAdmin]
    queryset = Role.objects.all()
    serializer_class = RoleSerializer

    filter_backends = [
        filters.SearchFilter,
        DjangoFilterBackend,
    ]
    search_fields = ["code", "name"]
    filterset_class = RoleFilter
    # /api/roles/?search=TEACHER → 코드/이름 검색
    # /api/roles/?is_active=true → 활성 역할만 조회

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        return success_response(response.data)

    def retrieve(self, request, *args, **kwargs):
        response = super().retrieve(request, *args, **kwargs)
        return success_response(response.data)

    def create(self, request, *args, **kwargs):
        response = super().create(request, *args, **kwargs)
        return success_response(response.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        response = super().update(request, *args, **kwargs)
        return success_response(response.data)

    def perform_create(self, serializer):
        role = serializer.save()
        logger.info(f"역할 생성: {role.code} (by {self.request.user})")

    def perform_update(self, serializer):
        was_active = serializer.instance.is_active
        role = serializer.save()
        logger.info(f"역할 수정: {role.code} (by {self.request.user})")

        # 활성 여부가 바뀌면 해당 역할 사용자들의 권한이 달라짐
        if was_active != role.is_active:
            notify_role_members(role)

    def destroy(self, request, *args, **kwargs):
        role = self.get_object()
        ensure_role_deletable(role)

        role_id, role_code = role.id, role.code
        role.delete()
        logger.info(f"역할 삭제: {role_code} (by {request.user})")
        return success_response({"id": role_id})

    # 역할 메뉴 권한 변경 이력
    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        role = self.get_object()
        histories = (
            RolePermissionHistory.objects
            .filter(role=role)
            .select_related("role", "menu", "changed_by")
        )
        return success_response(RolePermissionHistorySerializer(histories, many=True).data)


# 2. 역할별 메뉴 권한 조회(GET) & 교체(POST)
class RoleMenuView(APIView):
    permission_classes = [IsPlatformAdmin]

    @extend_schema(tags=["Roles"], summary="역할 메뉴 권한 조회")
    def get(self, request, role_id):
        role_id = parse_id_param(role_id, field="role_id")
        return success_response({
            "role_id": role_id,
            "menu_ids": get_role_menus(role_id),
        })

    @extend_schema(tags=["Roles"], summary="역할 메뉴 권한 교체", request=RoleMenuAssignSerializer)
    def post(self, request, role_id):
        role_id = parse_id_param(role_id, field="role_id")

        serializer = RoleMenuAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = assign_role_menus(
            role_id,
            serializer.validated_data["menu_ids"],
            changed_by=request.user,
            reason=serializer.validated_data["reason"],
        )
        return success_response({
            "role_id": role_id,
            "menu_ids": get_role_menus(role_id),
            **result,
        })


# 3. 사용자 역할 조회(GET) & 교체(POST)
class UserRoleView(APIView):
    permission_classes = [IsPlatformAdmin]

    @extend_schema(tags=["User Roles"], summary="사용자 역할 조회")
    def get(self, request, user_id):
        user_id = parse_id_param(user_id, field="user_id")
        roles = get_user_roles(user_id)
        return success_response(RoleSerializer(roles, many=True).data)

    @extend_schema(tags=["User Roles"], summary="사용자 역할 교체", request=UserRoleAssignSerializer)
    def post(self, request, user_id):
        user_id = parse_id_param(user_id, field="user_id")

        serializer = UserRoleAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        roles = assign_user_roles(user_id, serializer.validated_data["roles"])
        return success_response(RoleSerializer(roles, many=True).data)
