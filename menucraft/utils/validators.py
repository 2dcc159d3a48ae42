"""Input validation utilities"""
import re
from menucraft.models.menu import LINK_TYPES
from menucraft.utils.security import strip_html, validate_external_url

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
ANCHOR_PATTERN = re.compile(r'^[A-Za-z][\w-]*$')
USERNAME_PATTERN = re.compile(r'\w+', re.ASCII)

BOOLEAN_FIELDS = ('is_visible', 'show_dropdown', 'embed_company_profile')


def validate_slug_format(slug):
    """
    Validate that slug is URL-safe.

    Args:
        slug (str): The slug to validate

    Returns:
        bool: True if valid
    """
    if not slug:
        return False

    # Lowercase letters, numbers and hyphens, no leading or trailing hyphen
    return bool(SLUG_PATTERN.match(slug))


def generate_slug(name):
    """Turn a display name into a slug ("Acme Tools, Inc." -> "acme-tools-inc")"""
    slug = re.sub(r'[^a-z0-9]+', '-', (name or '').lower()).strip('-')
    return slug or 'store'


def parse_optional_id(value):
    """
    Parse an optional id coming from JSON or a form.

    Returns:
        tuple: (id or None, error_message)
    """
    if value is None or value == '' or value == 'null':
        return None, None
    if isinstance(value, bool):
        return None, "Invalid id"
    if isinstance(value, int):
        return value, None
    if isinstance(value, str) and value.isdigit():
        return int(value), None
    return None, "Invalid id"


def _parse_bool(value):
    """Accept true/false, 1/0 and their string forms"""
    if isinstance(value, bool):
        return value, True
    if value in (0, 1, '0', '1'):
        return bool(int(value)), True
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true', True
    return None, False


def normalize_target(link_type, target):
    """
    Validate and normalize a menu target for its link type.

    Args:
        link_type (str): page, section or external
        target (str): Raw target value

    Returns:
        tuple: (normalized_target, error_message)
    """
    if not isinstance(target, str) or not target.strip():
        return None, "Target is required based on menu type"

    target = target.strip()

    if link_type == 'page':
        slug = target.lstrip('/')
        if not validate_slug_format(slug):
            return None, "Page target must be a page slug (lowercase letters, numbers and hyphens)"
        return slug, None

    if link_type == 'section':
        anchor = target.lstrip('#')
        if not ANCHOR_PATTERN.match(anchor):
            return None, "Section target must be an anchor id such as #products"
        return f'#{anchor}', None

    if not validate_external_url(target):
        return None, "External target must be an absolute http or https URL"
    return target, None


def validate_menu_item_data(data, partial=False, current=None, label_min=2, label_max=50):
    """
    Validate menu item creation/update data.

    Args:
        data (dict): Menu item data from request
        partial (bool): Only validate keys that are present (updates)
        current (MenuItem, optional): Existing item, used to check a target
            against an unchanged link type and vice versa
        label_min (int): Minimum label length
        label_max (int): Maximum label length

    Returns:
        tuple: (cleaned_data, error_message)
    """
    if not isinstance(data, dict):
        return None, "Invalid request body"

    cleaned = {}

    # The storefront dashboard sends "type"; accept it as an alias
    if 'link_type' not in data and 'type' in data:
        data = dict(data, link_type=data['type'])

    if 'label' in data or not partial:
        label = strip_html(data.get('label') if isinstance(data.get('label'), str) else '')
        if not label:
            return None, "Menu label is required"
        if len(label) < label_min:
            return None, f"Menu label must be at least {label_min} characters"
        if len(label) > label_max:
            return None, f"Menu label must not exceed {label_max} characters"
        cleaned['label'] = label

    if 'link_type' in data or not partial:
        link_type = data.get('link_type')
        if not link_type:
            return None, "Menu type is required"
        if link_type not in LINK_TYPES:
            return None, "Menu type must be page, section, or external"
        cleaned['link_type'] = link_type

    if 'target' in data or 'link_type' in cleaned or not partial:
        link_type = cleaned.get('link_type') or (current.link_type if current else None)
        target = data.get('target') if 'target' in data else (current.target if current else None)
        target, error = normalize_target(link_type, target)
        if error:
            return None, error
        cleaned['target'] = target

    if 'parent_id' in data:
        parent_id, error = parse_optional_id(data.get('parent_id'))
        if error:
            return None, "Invalid parent menu item"
        cleaned['parent_id'] = parent_id

    if 'sort_order' in data and data['sort_order'] is not None:
        sort_order = data['sort_order']
        if isinstance(sort_order, bool) or not isinstance(sort_order, int):
            return None, "Sort order must be an integer"
        cleaned['sort_order'] = sort_order

    for field in BOOLEAN_FIELDS:
        if field in data:
            value, ok = _parse_bool(data[field])
            if not ok:
                return None, f"{field} must be true or false"
            cleaned[field] = value

    return cleaned, None


def validate_structure_payload(data):
    """
    Validate the body of a "set structure" request.

    Args:
        data (dict): {"items": [{"id": 1, "parent_id": null}, ...],
            "expected_revision": 3}

    Returns:
        tuple: (entries, expected_revision, error_message)
    """
    if not isinstance(data, dict) or not validate_json_structure(data, max_depth=4):
        return None, None, "Invalid request body"

    items = data.get('items')
    if not isinstance(items, list) or not items:
        return None, None, "Items are required"

    entries = []
    for entry in items:
        if not isinstance(entry, dict):
            return None, None, "Each item must be an object"
        item_id, error = parse_optional_id(entry.get('id'))
        if error or item_id is None:
            return None, None, "Each item needs a valid id"
        parent_id, error = parse_optional_id(entry.get('parent_id'))
        if error:
            return None, None, f"Invalid parent for menu item {item_id}"
        entries.append({'id': item_id, 'parent_id': parent_id})

    expected_revision = data.get('expected_revision')
    if expected_revision is not None and (isinstance(expected_revision, bool) or not isinstance(expected_revision, int)):
        return None, None, "expected_revision must be an integer"

    return entries, expected_revision, None


def parse_reorder_payload(data):
    """
    Read the ordered sibling ids of a reorder request.

    Accepts {"ids": [3, 2]} or the dashboard's
    {"items": [{"id": 3, "sort_order": 0}, {"id": 2, "sort_order": 1}]}.

    Returns:
        tuple: (ids, error_message)
    """
    if not isinstance(data, dict):
        return None, "Invalid request body"

    if 'ids' in data:
        raw_ids = data['ids']
    elif isinstance(data.get('items'), list):
        items = data['items']
        if not all(isinstance(item, dict) and 'id' in item for item in items):
            return None, "Each item needs an id"
        for item in items:
            sort_order = item.get('sort_order', 0)
            if isinstance(sort_order, bool) or not isinstance(sort_order, int):
                return None, "Sort order must be an integer"
        # sorted() is stable, equal sort orders keep request order
        raw_ids = [item['id'] for item in sorted(items, key=lambda item: item.get('sort_order', 0))]
    else:
        return None, "Items are required"

    if not isinstance(raw_ids, list) or not raw_ids:
        return None, "Items are required"

    ids = []
    for raw_id in raw_ids:
        item_id, error = parse_optional_id(raw_id)
        if error or item_id is None:
            return None, "Invalid menu item id"
        ids.append(item_id)

    if len(set(ids)) != len(ids):
        return None, "Menu items can only be listed once"

    return ids, None


def validate_json_structure(data, max_depth=10):
    """
    Reject request bodies nested deeper than max_depth containers.

    Args:
        data: Decoded JSON body
        max_depth (int): Deepest allowed value, the body itself being 0

    Returns:
        bool: True if the body is shallow enough
    """
    pending = [(data, 0)]
    while pending:
        value, depth = pending.pop()
        if depth > max_depth:
            return False
        if isinstance(value, dict):
            pending.extend((child, depth + 1) for child in value.values())
        elif isinstance(value, list):
            pending.extend((child, depth + 1) for child in value)
    return True


def validate_username(username):
    """
    Check an account name: 3 to 80 ASCII letters, digits or underscores.

    Returns:
        tuple: (is_valid, error_message)
    """
    if not username:
        return False, "Username is required"

    if not 3 <= len(username) <= 80:
        return False, "Username must be between 3 and 80 characters"

    if not USERNAME_PATTERN.fullmatch(username):
        return False, "Username can only contain letters, numbers, and underscores"

    return True, None


def validate_password(password, min_length=6):
    """Passwords only need a minimum length; returns (is_valid, error_message)"""
    if not password or len(password) < min_length:
        return False, f"Password must be at least {min_length} characters"
    return True, None
