from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import RoleMenuView, RoleViewSet

router = SimpleRouter()
router.register(r"", RoleViewSet, basename="role")

# 역할 관리 API 엔드포인트 정의
urlpatterns = [
    # 역할별 메뉴 권한 조회 / 변경
    path("<str:role_id>/menus/", RoleMenuView.as_view(), name="role-menus"),
    path("", include(router.urls)),
]
