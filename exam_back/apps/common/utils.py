# apps/common/utils.py
from rest_framework.response import Response
from utils.exceptions import ValidationException


def get_client_ip(request):
    """
    클라이언트 실제 IP 주소 추출
    (프록시 / 로드밸런서 고려)
    """
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        # 첫 번째 IP가 실제 클라이언트 IP
        return x_forwarded_for.split(",")[0].strip()

    return request.META.get("REMOTE_ADDR")


def parse_positive_int(value, field="id"):
    """양의 정수 식별자 검증 (bool, 문자열, 0 이하 거부)"""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationException(
            f"{field}는 양의 정수여야 합니다.",
            field=field,
        )
    return value


def parse_id_param(value, field="id"):
    """URL/쿼리 문자열 식별자 → 양의 정수"""
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise ValidationException(
                f"{field}는 양의 정수여야 합니다.",
                field=field,
            )
        value = int(value)
    return parse_positive_int(value, field=field)


def success_response(data=None, status=200):
    """성공 응답 공통 형태 {"success": true, "data": ...}"""
    return Response({"success": True, "data": data}, status=status)
