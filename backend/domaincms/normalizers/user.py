from .common import iso


def normalize_user(user):
    # password hash never leaves the model
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "isAdmin": user.is_admin,
        "isActive": user.is_active,
        "lastLoginAt": iso(user.last_login_at),
        "createdBy": user.created_by,
        "createdAt": iso(user.created_at),
        "updatedAt": iso(user.updated_at),
    }
