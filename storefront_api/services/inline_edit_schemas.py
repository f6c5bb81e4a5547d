"""
Built-in validation schemas for storefront resources.

Field rules used by inline-edit forms and bulk action bars of the admin and
seller dashboards. The rule constants mirror the limits enforced by the
client-side forms so both sides reject the same input.
"""

from typing import Dict, Tuple

from .schema_registry import FieldRule, SchemaRegistry

# Shared limits
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000
SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 100
SLUG_PATTERN = r'^[a-z0-9]+(?:-[a-z0-9]+)*$'
EMAIL_MAX_LENGTH = 255
PHONE_PATTERN = r'^[6-9]\d{9}$'
MAX_PRICE = 10_000_000
MAX_STOCK = 1_000_000

SLUG_MESSAGE = "Slug can only contain lowercase letters, numbers and hyphens"
PHONE_MESSAGE = "Phone must be a valid 10-digit mobile number"

STATUS_ACTIONS = ('activate', 'deactivate')
FEATURE_ACTIONS = ('feature', 'unfeature')

PRODUCT_STATUSES = ('draft', 'published', 'archived', 'out-of-stock')
ORDER_STATUSES = ('pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled', 'refunded')
USER_ROLES = ('admin', 'seller', 'user')
AUCTION_STATUSES = ('draft', 'scheduled', 'live', 'ended', 'cancelled')


def _slug(required: bool = True) -> FieldRule:
    return FieldRule(
        'slug',
        required=required,
        min_length=SLUG_MIN_LENGTH,
        max_length=SLUG_MAX_LENGTH,
        pattern=SLUG_PATTERN,
        pattern_message=SLUG_MESSAGE,
    )


RESOURCE_SCHEMAS: Dict[str, Tuple[FieldRule, ...]] = {
    'product': (
        FieldRule('name', required=True, min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH),
        _slug(required=False),
        FieldRule('price', type='number', required=True, min_value=0, max_value=MAX_PRICE),
        FieldRule('compare_at_price', type='number', min_value=0, max_value=MAX_PRICE, allow_none=True),
        FieldRule('stock_count', type='integer', min_value=0, max_value=MAX_STOCK, label='Stock'),
        FieldRule('status', type='select', choices=PRODUCT_STATUSES),
        FieldRule('description', type='text', max_length=DESCRIPTION_MAX_LENGTH),
        FieldRule('featured', type='boolean'),
        FieldRule('tags', type='list', max_length=20),
    ),
    'category': (
        FieldRule('name', required=True, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH),
        _slug(),
        FieldRule('description', type='text', max_length=DESCRIPTION_MAX_LENGTH),
        FieldRule('sort_order', type='integer', min_value=0, label='Sort order'),
        FieldRule('is_active', type='boolean'),
        FieldRule('featured', type='boolean'),
    ),
    'shop': (
        FieldRule('name', required=True, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH),
        _slug(),
        FieldRule('email', type='email', max_length=EMAIL_MAX_LENGTH),
        FieldRule('phone', pattern=PHONE_PATTERN, pattern_message=PHONE_MESSAGE),
        FieldRule('website', type='url'),
        FieldRule('description', type='text', max_length=DESCRIPTION_MAX_LENGTH),
        FieldRule('is_verified', type='boolean'),
    ),
    'user': (
        FieldRule('name', required=True, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH),
        FieldRule('email', type='email', required=True, max_length=EMAIL_MAX_LENGTH),
        FieldRule('phone', pattern=PHONE_PATTERN, pattern_message=PHONE_MESSAGE),
        FieldRule('role', type='select', choices=USER_ROLES),
        FieldRule('is_banned', type='boolean'),
    ),
    'coupon': (
        FieldRule('code', required=True, min_length=3, max_length=30,
                  pattern=r'^[A-Z0-9_-]+$',
                  pattern_message="Code can only contain uppercase letters, numbers, _ and -"),
        FieldRule('discount_type', type='select', required=True, choices=('percentage', 'flat')),
        FieldRule('discount_value', type='number', required=True, min_value=0),
        FieldRule('min_order_amount', type='number', min_value=0, label='Minimum order amount'),
        FieldRule('usage_limit', type='integer', min_value=1, allow_none=True),
        FieldRule('expires_at', type='date', allow_none=True, label='Expiry date'),
        FieldRule('is_active', type='boolean'),
    ),
    'review': (
        FieldRule('rating', type='integer', required=True, min_value=1, max_value=5),
        FieldRule('title', max_length=TITLE_MAX_LENGTH),
        FieldRule('comment', type='text', required=True, min_length=10, max_length=DESCRIPTION_MAX_LENGTH),
        FieldRule('is_approved', type='boolean'),
    ),
    'order': (
        FieldRule('status', type='select', required=True, choices=ORDER_STATUSES),
        FieldRule('tracking_number', max_length=100),
        FieldRule('notes', type='text', max_length=1000),
    ),
    'auction': (
        FieldRule('name', required=True, min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH),
        FieldRule('starting_bid', type='number', required=True, min_value=0, max_value=MAX_PRICE),
        FieldRule('reserve_price', type='number', min_value=0, max_value=MAX_PRICE, allow_none=True),
        FieldRule('bid_increment', type='number', min_value=1),
        FieldRule('status', type='select', choices=AUCTION_STATUSES),
        FieldRule('description', type='text', max_length=DESCRIPTION_MAX_LENGTH),
    ),
}

RESOURCE_BULK_ACTIONS: Dict[str, Tuple[str, ...]] = {
    'product': STATUS_ACTIONS + FEATURE_ACTIONS + ('publish', 'draft', 'archive', 'update', 'delete'),
    'category': STATUS_ACTIONS + FEATURE_ACTIONS + ('update', 'delete'),
    'shop': STATUS_ACTIONS + FEATURE_ACTIONS + ('verify', 'unverify', 'ban', 'unban', 'delete'),
    'user': ('ban', 'unban', 'change-role', 'delete'),
    'coupon': STATUS_ACTIONS + ('update', 'delete'),
    'review': ('approve', 'reject', 'flag', 'delete'),
    'order': ('confirm', 'ship', 'deliver', 'cancel', 'update'),
    'auction': FEATURE_ACTIONS + ('schedule', 'cancel', 'end', 'delete'),
}


def build_default_registry() -> SchemaRegistry:
    """Return a registry populated with every built-in storefront resource."""
    registry = SchemaRegistry()
    for resource_type, rules in RESOURCE_SCHEMAS.items():
        registry.register(
            resource_type,
            rules,
            bulk_actions=RESOURCE_BULK_ACTIONS.get(resource_type, ()),
        )
    return registry


default_registry = build_default_registry()


__all__ = [
    'RESOURCE_SCHEMAS',
    'RESOURCE_BULK_ACTIONS',
    'build_default_registry',
    'default_registry',
]
