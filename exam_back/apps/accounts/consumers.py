from channels.generic.websocket import AsyncJsonWebsocketConsumer


# 사용자 권한 변경 알림 Consumer
# 그룹 "user_<id>" 로 permission_changed 이벤트가 오면 클라이언트에 전달
class UserPermissionConsumer(AsyncJsonWebsocketConsumer):
    async def connect(self):
        user = self.scope["user"]

        if user.is_anonymous:
            await self.close()
            return

        self.group_name = f"user_{user.id}"

        await self.channel_layer.group_add(
            self.group_name,
            self.channel_name,
        )
        await self.accept()

    async def disconnect(self, close_code):
        group_name = getattr(self, "group_name", None)
        if group_name is None:
            return
        await self.channel_layer.group_discard(
            group_name,
            self.channel_name,
        )

    async def permission_changed(self, event):
        await self.send_json({
            "type": "PERMISSION_CHANGED"
        })
