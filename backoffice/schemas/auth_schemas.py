"""Authentication request schemas."""
from marshmallow import Schema, fields, validate, validates_schema, ValidationError, pre_load

PASSWORD_LENGTH = validate.Length(min=8, max=128)
USERNAME_FORMAT = validate.Regexp(
    r"^[a-zA-Z0-9._-]+$",
    error="Username may only contain letters, digits, dots, dashes and underscores",
)


class LoginRequestSchema(Schema):
    """Credentials for login; accepts either a username or an email."""

    username_or_email = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    password = fields.Str(required=True, validate=validate.Length(min=1, max=128))

    @pre_load
    def accept_aliases(self, data, **kwargs):
        if isinstance(data, dict) and "username_or_email" not in data:
            alias = data.get("username") or data.get("email")
            if alias is not None:
                data = {**data, "username_or_email": alias}
                data.pop("username", None)
                data.pop("email", None)
        return data


class RefreshTokenRequestSchema(Schema):
    refresh_token = fields.Str(required=True, validate=validate.Length(min=1))


class RegisterRequestSchema(Schema):
    """New account request."""

    username = fields.Str(
        required=True, validate=[validate.Length(min=3, max=50), USERNAME_FORMAT]
    )
    email = fields.Email(required=True, validate=validate.Length(max=255))
    password = fields.Str(required=True, validate=PASSWORD_LENGTH, load_only=True)
    confirm_password = fields.Str(required=True, load_only=True)
    first_name = fields.Str(load_default=None, validate=validate.Length(max=100))
    last_name = fields.Str(load_default=None, validate=validate.Length(max=100))
    phone = fields.Str(load_default=None, validate=validate.Length(max=30))
    department = fields.Str(load_default=None, validate=validate.Length(max=100))
    position = fields.Str(load_default=None, validate=validate.Length(max=100))

    @validates_schema
    def passwords_match(self, data, **kwargs):
        if data.get("password") != data.get("confirm_password"):
            raise ValidationError("Passwords do not match", "confirm_password")


class EmailRequestSchema(Schema):
    email = fields.Email(required=True)


class ResetPasswordRequestSchema(Schema):
    token = fields.Str(required=True, validate=validate.Length(min=1))
    new_password = fields.Str(required=True, validate=PASSWORD_LENGTH)
    confirm_password = fields.Str(required=True)

    @validates_schema
    def passwords_match(self, data, **kwargs):
        if data.get("new_password") != data.get("confirm_password"):
            raise ValidationError("Passwords do not match", "confirm_password")


class ChangePasswordRequestSchema(Schema):
    current_password = fields.Str(required=True)
    new_password = fields.Str(required=True, validate=PASSWORD_LENGTH)
    confirm_password = fields.Str(required=True)

    @validates_schema
    def passwords_match(self, data, **kwargs):
        if data.get("new_password") != data.get("confirm_password"):
            raise ValidationError("Passwords do not match", "confirm_password")
