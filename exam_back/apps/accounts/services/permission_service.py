# 권한 변경 시 이벤트 발행 => 권한 변경 로직 마지막에 이 함수 호출
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

logger = logging.getLogger(__name__)


# 이벤트 발행 로직 (Channels를 통한 WebSocket 알림)
def notify_permission_changed(user_id):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        async_to_sync(channel_layer.group_send)(
            f"user_{user_id}",
            {
                "type": "permission_changed",
            }
        )
    except Exception as e:
        # 알림 실패는 이미 커밋된 권한 변경을 되돌리지 않음
        logger.warning(f"권한 변경 알림 실패: user_id={user_id} - {e}")


# 트랜잭션 커밋 이후 알림 발행
def notify_permission_changed_on_commit(user_ids):
    user_ids = sorted(set(user_ids))
    if not user_ids:
        return

    def _send():
        for user_id in user_ids:
            notify_permission_changed(user_id)

    transaction.on_commit(_send)
