from rest_framework.exceptions import APIException
from rest_framework import status
from datetime import datetime, timezone


class ExamBackException(APIException):
    """프로젝트 기본 예외 클래스"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'ERR_500'
    default_detail = '서버 내부 오류가 발생했습니다.'

    def __init__(self, message=None, code=None, detail=None, field=None, status_code=None):
        super().__init__(detail=message or self.default_detail)
        self.code = code or self.default_code
        self.message = message or self.default_detail
        self.detail_info = detail
        self.field = field
        if status_code:
            self.status_code = status_code

    def get_full_details(self):
        error_detail = {
            'code': self.code,
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }
        if self.detail_info:
            error_detail['detail'] = self.detail_info
        if self.field:
            error_detail['field'] = self.field
        return {
            'success': False,
            'message': self.message,
            'error': error_detail,
        }


class PermissionDeniedException(ExamBackException):
    """권한 거부 예외"""
    status_code = status.HTTP_403_FORBIDDEN
    default_code = 'ERR_002'
    default_detail = '해당 작업을 수행할 권한이 없습니다.'


class ValidationException(ExamBackException):
    """유효성 검증 실패 예외 (잘못된 식별자, 형식 오류)"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'ERR_101'
    default_detail = '입력값이 올바르지 않습니다.'


class ResourceNotFoundException(ExamBackException):
    """리소스 없음 예외"""
    status_code = status.HTTP_404_NOT_FOUND
    default_code = 'ERR_201'
    default_detail = '요청한 리소스를 찾을 수 없습니다.'


class ConflictException(ExamBackException):
    """충돌 예외 (사용 중인 데이터, 중복)"""
    status_code = status.HTTP_409_CONFLICT
    default_code = 'ERR_301'
    default_detail = '데이터 충돌이 발생했습니다.'


class BusinessLogicException(ExamBackException):
    """비즈니스 로직 위반 예외"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = 'ERR_401'
    default_detail = '비즈니스 규칙을 위반했습니다.'


class DataIntegrityException(ExamBackException):
    """저장된 데이터 손상 (메뉴 계층 순환 등)"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = 'ERR_601'
    default_detail = '메뉴 계층 데이터가 손상되었습니다.'


class UpstreamUnavailableException(ExamBackException):
    """데이터 소스 조회 실패 예외"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = 'ERR_501'
    default_detail = '데이터 소스에 접근할 수 없습니다.'
