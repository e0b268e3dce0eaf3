from django.urls import path

from apps.menus.views import (
    UserMenuPermissionView,
    UserMenuTreeView,
    UserPermissionListView,
)
from .views import UserRoleView

# 사용자별 권한 API 엔드포인트 정의
# user_id 는 문자열로 받아 뷰에서 검증 (잘못된 값 → 400)
urlpatterns = [
    # 메뉴 권한 계산 결과
    path("<str:user_id>/permissions/", UserPermissionListView.as_view(), name="user-permissions"),

    # 접근 가능 메뉴 트리
    path("<str:user_id>/menus/", UserMenuTreeView.as_view(), name="user-menus"),

    # 단일 메뉴 권한 확인 / 예외 권한 설정, 제거
    path(
        "<str:user_id>/menus/<str:menu_id>/permission/",
        UserMenuPermissionView.as_view(),
        name="user-menu-permission",
    ),

    # 사용자 역할 조회 / 변경 (관리자)
    path("<str:user_id>/roles/", UserRoleView.as_view(), name="user-roles"),
]
