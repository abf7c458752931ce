# users/urls.py

from django.urls import path

from .views import UserViewSet

user_list = UserViewSet.as_view({"get": "list", "post": "create"})
user_detail = UserViewSet.as_view({"delete": "destroy"})
user_me = UserViewSet.as_view({"get": "me"})

urlpatterns = [
    path("users", user_list, name="user-list"),
    path("users/me", user_me, name="user-me"),
    path("users/<int:pk>", user_detail, name="user-detail"),
]
