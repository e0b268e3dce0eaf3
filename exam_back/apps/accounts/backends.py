from django.contrib.auth.backends import ModelBackend
from apps.accounts.models import User

# login_id 기반 로그인 (관리자 페이지는 username 으로 전달)
class LoginBackend(ModelBackend):
    def authenticate(self, request, login_id=None, password=None, **kwargs):
        login_id = login_id or kwargs.get("username")
        if not login_id or password is None:
            return None

        try:
            user = User.objects.get(login_id=login_id)
        except User.DoesNotExist:
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
