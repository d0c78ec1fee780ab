"""
Authentication serializers for CivicPulse Backend.

Contains:
- RegisterSerializer: citizen self-registration
- LoginSerializer: email/password login, returns the issued token
- ChangePasswordSerializer
- UserSerializer: account representation and admin user management
"""

import logging

from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from audit.models import AuditLog, AuditEventType
from core.exceptions import BadRequestError, UnauthorizedError
from core.serializers import NamedPrimaryKeyRelatedField, SelectableFieldsMixin
from organization.models import Department, Region
from .backends import issue_token
from .models import User, UserRole, UserStatus

auth_logger = logging.getLogger('civicpulse.auth')


def _email_in_use(email, exclude=None):
    queryset = User.objects.all_with_deleted().filter(email__iexact=email)
    if exclude is not None:
        queryset = queryset.exclude(pk=exclude.pk)
    return queryset.exists()


class UserSerializer(SelectableFieldsMixin, serializers.ModelSerializer):
    """
    Account representation; also used by admins to create and edit users.

    ``department``/``region`` are written as ids and read back as
    ``{"id": .., "name": ..}``.
    """

    password = serializers.CharField(write_only=True, required=False, style={'input_type': 'password'})
    department = NamedPrimaryKeyRelatedField(
        queryset=Department.objects.all(), required=False, allow_null=True
    )
    region = NamedPrimaryKeyRelatedField(
        queryset=Region.objects.all(), required=False, allow_null=True
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'name', 'email', 'password', 'role', 'status', 'phone',
            'department', 'region', 'createdAt',
        ]
        read_only_fields = ['id']
        extra_kwargs = {
            # Uniqueness is checked in validate_email with the API's wording
            'email': {'validators': []},
        }

    def validate_email(self, value):
        value = value.lower()
        if _email_in_use(value, exclude=self.instance):
            raise serializers.ValidationError('Email already in use')
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': ['Please provide a password']})
        if attrs.get('password'):
            validate_password(attrs['password'])
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        email = validated_data.pop('email')
        return User.objects.create_user(email, password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class RegisterSerializer(serializers.Serializer):
    """
    Citizen self-registration.

    Always creates a citizen; staff accounts are created by admins
    through /api/users/.
    """

    name = serializers.CharField(max_length=100)
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)

    def validate_email(self, value):
        value = value.lower()
        if _email_in_use(value):
            raise serializers.ValidationError('Email already in use')
        return value

    def validate(self, attrs):
        candidate = User(name=attrs['name'], email=attrs['email'])
        validate_password(attrs['password'], user=candidate)
        return attrs

    def create(self, validated_data):
        request = self.context.get('request')
        user = User.objects.create_user(
            validated_data['email'],
            validated_data['password'],
            name=validated_data['name'],
            phone=validated_data.get('phone', ''),
            role=UserRole.CITIZEN,
        )
        AuditLog.log(
            event_type=AuditEventType.AUTH_REGISTERED,
            actor=user,
            target=user,
            request=request,
            description="Citizen registered",
        )
        return user


class LoginSerializer(serializers.Serializer):
    """
    Email/password login.

    Failures raise directly: 400 for missing fields, 401 for bad
    credentials or an inactive account.
    """

    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True)

    def validate(self, attrs):
        request = self.context.get('request')
        email = (attrs.get('email') or '').strip().lower()
        password = attrs.get('password') or ''

        if not email or not password:
            raise BadRequestError('Please provide an email and password')

        user = User.objects.filter(email__iexact=email).first()
        if user is None or not user.check_password(password):
            AuditLog.log(
                event_type=AuditEventType.AUTH_LOGIN_FAILED,
                actor=user,
                request=request,
                success=False,
                description="Invalid credentials",
                metadata={'email': email},
            )
            auth_logger.warning(f"Failed login for {email}")
            raise UnauthorizedError('Invalid credentials')

        if user.status != UserStatus.ACTIVE:
            AuditLog.log(
                event_type=AuditEventType.AUTH_LOGIN_FAILED,
                actor=user,
                request=request,
                success=False,
                description="Inactive account",
            )
            raise UnauthorizedError('Your account is inactive. Please contact an administrator.')

        attrs['user'] = user
        return attrs

    def create(self, validated_data):
        user = validated_data['user']
        request = self.context.get('request')

        AuditLog.log(
            event_type=AuditEventType.AUTH_LOGIN_SUCCESS,
            actor=user,
            request=request,
            description="Login successful",
            metadata={'role': user.role},
        )
        auth_logger.info(f"Login success: {user.id} ({user.role})")

        return {'user': user, 'token': issue_token(user)}


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(required=False, allow_blank=True, write_only=True)
    newPassword = serializers.CharField(required=False, allow_blank=True, write_only=True)

    def validate(self, attrs):
        user = self.context['request'].user
        current = attrs.get('currentPassword') or ''
        new = attrs.get('newPassword') or ''

        if not current or not new:
            raise BadRequestError('Please provide both current and new password')
        if not user.check_password(current):
            raise UnauthorizedError('Current password is incorrect')

        validate_password(new, user=user)
        return attrs

    def save(self, **kwargs):
        request = self.context['request']
        user = request.user
        user.set_password(self.validated_data['newPassword'])
        user.save(update_fields=['password', 'updated_at'])
        AuditLog.log(
            event_type=AuditEventType.AUTH_PASSWORD_CHANGED,
            actor=user,
            target=user,
            request=request,
            description="Password changed",
        )
        return user
