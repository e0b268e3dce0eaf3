from django.urls import path

from .views import (
    CurrentUserMenuView,
    MenuBatchSortView,
    MenuRouteTreeView,
    MenuTreeView,
)

# 메뉴 API 엔드포인트 정의
urlpatterns = [
    # 전체 메뉴 트리 (관리자, 비활성 포함)
    path("tree/", MenuTreeView.as_view(), name="menu-tree"),

    # 프론트 라우팅용 활성 메뉴 트리
    path("route-tree/", MenuRouteTreeView.as_view(), name="menu-route-tree"),

    # 정렬 / 부모 변경 일괄 처리
    path("batch-sort/", MenuBatchSortView.as_view(), name="menu-batch-sort"),

    # 로그인 사용자 메뉴
    path("current-user/", CurrentUserMenuView.as_view(), name="menu-current-user"),
]
