from marshmallow import EXCLUDE, Schema, fields, pre_load, validates, ValidationError

MIN_PASSWORD_LENGTH = 8


def _norm_lower(v):
    return v.strip().lower() if isinstance(v, str) else v


def _check_password(value):
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")


class AccountCreateSchema(Schema):
    username = fields.String(required=True)
    email = fields.Email(required=True)
    full_name = fields.String(required=True)
    password = fields.String(required=True, load_only=True)
    avatar = fields.String(allow_none=True)
    cover_image = fields.String(allow_none=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            for key in ("username", "email"):
                if key in data:
                    data[key] = _norm_lower(data[key])
            if isinstance(data.get("full_name"), str):
                data["full_name"] = data["full_name"].strip()
        return data

    @validates("username")
    def validate_username(self, value, **kwargs):
        if not value:
            raise ValidationError("Username is required.")

    @validates("full_name")
    def validate_full_name(self, value, **kwargs):
        if not value:
            raise ValidationError("Full name is required.")

    @validates("password")
    def validate_password(self, value, **kwargs):
        _check_password(value)


class LoginSchema(Schema):
    """Presence of credentials is checked by the auth protocol, not here."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(allow_none=True)
    password = fields.String(allow_none=True, load_only=True)


class ChangePasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(required=True, data_key="oldPassword", load_only=True)
    new_password = fields.String(required=True, data_key="newPassword", load_only=True)

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        _check_password(value)


class AccountUpdateSchema(Schema):
    full_name = fields.String(required=True)
    email = fields.Email(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_lower(data["email"])
        return data

    @validates("full_name")
    def validate_full_name(self, value, **kwargs):
        if not value or not value.strip():
            raise ValidationError("Full name is required.")


class AccountOutSchema(Schema):
    """Public view of an account: never includes the password hash or refresh token."""

    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    full_name = fields.String()
    avatar = fields.String(allow_none=True)
    cover_image = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
