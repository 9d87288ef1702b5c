"""Admin user management schemas."""
from marshmallow import Schema, fields, validate

from backoffice.models.enums import RoleName
from backoffice.schemas.auth_schemas import PASSWORD_LENGTH, USERNAME_FORMAT

ROLE_VALUES = [role.value for role in RoleName]

USERNAME = [validate.Length(min=3, max=50), USERNAME_FORMAT]


def role_list(**kwargs):
    return fields.List(
        fields.Str(validate=validate.OneOf(ROLE_VALUES)),
        validate=validate.Length(min=1, error="At least one role is required"),
        **kwargs,
    )


class UserCreateSchema(Schema):
    """Account created by an administrator; active and verified unless stated."""

    username = fields.Str(required=True, validate=USERNAME)
    email = fields.Email(required=True, validate=validate.Length(max=255))
    password = fields.Str(required=True, validate=PASSWORD_LENGTH, load_only=True)
    first_name = fields.Str(load_default=None, validate=validate.Length(max=100))
    last_name = fields.Str(load_default=None, validate=validate.Length(max=100))
    phone = fields.Str(load_default=None, validate=validate.Length(max=30))
    department = fields.Str(load_default=None, validate=validate.Length(max=100))
    position = fields.Str(load_default=None, validate=validate.Length(max=100))
    is_active = fields.Bool(load_default=True)
    email_verified = fields.Bool(load_default=True)
    roles = role_list(required=True)


class UserUpdateSchema(Schema):
    """Partial update; omitted fields are unchanged. Passwords are not set here."""

    username = fields.Str(validate=USERNAME)
    email = fields.Email(validate=validate.Length(max=255))
    first_name = fields.Str(allow_none=True, validate=validate.Length(max=100))
    last_name = fields.Str(allow_none=True, validate=validate.Length(max=100))
    phone = fields.Str(allow_none=True, validate=validate.Length(max=30))
    department = fields.Str(allow_none=True, validate=validate.Length(max=100))
    position = fields.Str(allow_none=True, validate=validate.Length(max=100))
    is_active = fields.Bool()
    email_verified = fields.Bool()
    roles = role_list()


class UserListQuerySchema(Schema):
    search = fields.Str(load_default=None)
    is_active = fields.Bool(load_default=None)
    email_verified = fields.Bool(load_default=None)
    role = fields.Str(load_default=None, validate=validate.OneOf(ROLE_VALUES))
    limit = fields.Int(load_default=20, validate=validate.Range(min=1, max=100))
    offset = fields.Int(load_default=0, validate=validate.Range(min=0))
