from rest_framework.views import exception_handler
from rest_framework.response import Response
from .exceptions import ExamBackException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


# DRF 기본 예외의 HTTP 상태 → 에러 코드
STATUS_ERROR_CODES = {
    400: 'ERR_101',
    401: 'ERR_001',
    403: 'ERR_002',
    404: 'ERR_201',
    405: 'ERR_102',
}


def _timestamp():
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def custom_exception_handler(exc, context):
    """DRF 기본 핸들러 + 프로젝트 커스텀 핸들러

    모든 실패 응답은 {"success": false, "message": ..., "error": {...}} 형태로 통일
    """

    # 커스텀 예외 처리
    if isinstance(exc, ExamBackException):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"ExamBack Exception: {exc.code} - {exc.message}", extra={
            'code': exc.code,
            'detail': exc.detail_info,
            'field': exc.field,
            'view': context.get('view'),
        })
        return Response(exc.get_full_details(), status=exc.status_code)

    # DRF 기본 예외 처리 (ValidationError, NotAuthenticated 등)
    response = exception_handler(exc, context)

    if response is not None:
        data = response.data
        message = '요청 처리 중 오류가 발생했습니다.'
        if isinstance(data, dict) and 'detail' in data:
            message = str(data['detail'])

        body = {
            'success': False,
            'message': message,
            'error': {
                'code': STATUS_ERROR_CODES.get(response.status_code, 'ERR_500'),
                'timestamp': _timestamp(),
            },
        }

        # ValidationError의 경우 field 정보 포함
        if isinstance(data, dict):
            for field, errors in data.items():
                if field != 'detail':
                    detail = str(errors[0]) if isinstance(errors, list) and errors else str(errors)
                    body['message'] = detail
                    body['error']['field'] = field
                    body['error']['detail'] = detail
                    body['error']['code'] = 'ERR_101'
                    break
        elif isinstance(data, list) and data:
            body['message'] = str(data[0])
            body['error']['code'] = 'ERR_101'

        response.data = body
        logger.warning(f"DRF Exception: {body['error']['code']} - {body['message']}")
        return response

    # 예상치 못한 예외 (500 에러)
    logger.error(f"Unexpected Exception: {str(exc)}", exc_info=True, extra={
        'view': context.get('view'),
    })

    return Response({
        'success': False,
        'message': '서버 내부 오류가 발생했습니다. 관리자에게 문의해주세요.',
        'error': {
            'code': 'ERR_500',
            'timestamp': _timestamp(),
        },
    }, status=500)
