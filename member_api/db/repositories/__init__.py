"""Database repositories for data access."""

from member_api.db.repositories.member import (
    LockCounters,
    clear_expired_lock,
    create_member,
    email_exists,
    get_member_by_email,
    get_member_by_id,
    list_members,
    record_failed_attempt,
    reset_failed_attempts,
    soft_delete_member,
    unlock_member,
    update_last_login,
    update_member,
)
from member_api.db.repositories.product import (
    create_product,
    get_product_by_id,
    list_products,
    soft_delete_product,
    update_product,
)

__all__ = [
    # Member
    "get_member_by_id",
    "get_member_by_email",
    "email_exists",
    "list_members",
    "create_member",
    "update_member",
    "soft_delete_member",
    "update_last_login",
    # Lock state
    "LockCounters",
    "clear_expired_lock",
    "reset_failed_attempts",
    "record_failed_attempt",
    "unlock_member",
    # Product
    "get_product_by_id",
    "list_products",
    "create_product",
    "update_product",
    "soft_delete_product",
]
