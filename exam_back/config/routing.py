from django.urls import path

from apps.accounts.consumers import UserPermissionConsumer

websocket_urlpatterns = [
    path("ws/user-permissions/", UserPermissionConsumer.as_asgi()),
]
