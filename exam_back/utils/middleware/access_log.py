import time
import logging
from django.utils.deprecation import MiddlewareMixin

from apps.common.utils import get_client_ip

logger = logging.getLogger('access')


class AccessLogMiddleware(MiddlewareMixin):
    """모든 요청과 응답을 로깅하는 미들웨어"""

    def process_request(self, request):
        request.start_time = time.time()

    def process_response(self, request, response):
        # 실행 시간 계산
        duration = time.time() - getattr(request, 'start_time', time.time())

        user = getattr(request, 'user', None)
        log_data = {
            'ip': get_client_ip(request),
            'method': request.method,
            'path': request.get_full_path(),
            'status': response.status_code,
            'duration': f"{duration:.3f}s",
            'user': str(user) if user is not None and user.is_authenticated else 'Anonymous',
        }

        message = f"{log_data['ip']} {log_data['user']} {log_data['method']} {log_data['path']} {log_data['status']} ({log_data['duration']})"

        if response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)

        return response
