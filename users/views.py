# users/views.py - user directory API
import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import NotFoundError, ValidationError
from notifications.dispatch import dispatch
from .emails import user_removed_email
from .models import User
from .permissions import IsUserAdmin
from .serializers import UserCreateSerializer, UserSerializer

logger = logging.getLogger("taskflow.users")


class UserViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    GET    /api/users?role=<role>
    POST   /api/users            (manager / admin)
    DELETE /api/users/<id>       (manager / admin)
    GET    /api/users/me
    """
    queryset = User.objects.all().order_by("id")
    serializer_class = UserSerializer

    def get_permissions(self):
        if self.action in ("create", "destroy"):
            return [IsAuthenticated(), IsUserAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        queryset = super().get_queryset()
        role = self.request.query_params.get("role")
        if role:
            queryset = queryset.filter(role=role)
        return queryset

    def create(self, request):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if not data.get("name") or not data.get("email") or not data.get("password"):
            raise ValidationError("Please add all fields")

        if User.objects.filter(email__iexact=data["email"]).exists():
            raise ValidationError("User already exists")

        user = serializer.save()
        logger.info(f"User created: user={user.id} role={user.role} by={request.user.id}")
        return Response(
            {"id": user.id, "name": user.name, "email": user.email, "role": user.role},
            status=status.HTTP_201_CREATED,
        )

    def destroy(self, request, pk=None):
        user = User.objects.filter(pk=pk).first()
        if user is None:
            raise NotFoundError("User not found")

        # Best-effort; removal goes ahead either way
        dispatch(user_removed_email(user))

        user_id = user.id
        user.delete()
        logger.info(f"User removed: user={user_id} by={request.user.id}")
        return Response({"message": "User removed"})

    @action(detail=False, methods=["get"])
    def me(self, request):
        """
        GET /api/users/me
        Return current user info
        """
        return Response(self.get_serializer(request.user).data)
