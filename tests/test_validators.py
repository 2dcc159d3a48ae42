"""Tests for request validation and sanitization helpers."""
import pytest
from menucraft.utils.security import strip_html, validate_external_url, validate_redirect_url
from menucraft.utils.validators import (
    generate_slug, normalize_target, parse_optional_id, parse_reorder_payload,
    validate_json_structure, validate_menu_item_data, validate_password, validate_structure_payload,
    validate_username
)


def valid_item(**overrides):
    data = {'label': 'Products', 'type': 'page', 'target': 'products'}
    data.update(overrides)
    return data


class TestMenuItemData:
    """Tests for validate_menu_item_data()."""

    def test_accepts_type_alias(self) -> None:
        cleaned, error = validate_menu_item_data(valid_item())

        assert error is None
        assert cleaned == {'label': 'Products', 'link_type': 'page', 'target': 'products'}

    def test_strips_markup_from_label(self) -> None:
        cleaned, _ = validate_menu_item_data(valid_item(label='  <b>Tools</b> & More '))

        assert cleaned['label'] == 'Tools & More'

    @pytest.mark.parametrize('label, message', [
        ('', 'Menu label is required'),
        ('<b></b>', 'Menu label is required'),
        ('A', 'Menu label must be at least 2 characters'),
        ('x' * 51, 'Menu label must not exceed 50 characters'),
    ])
    def test_label_rules(self, label, message) -> None:
        assert validate_menu_item_data(valid_item(label=label)) == (None, message)

    def test_label_limits_are_configurable(self) -> None:
        _, error = validate_menu_item_data(valid_item(label='Shop'), label_min=5)

        assert error == 'Menu label must be at least 5 characters'

    def test_type_required(self) -> None:
        data = {'label': 'Products', 'target': 'products'}

        assert validate_menu_item_data(data) == (None, 'Menu type is required')

    def test_unknown_type(self) -> None:
        _, error = validate_menu_item_data(valid_item(type='blog'))

        assert error == 'Menu type must be page, section, or external'

    def test_partial_update_only_checks_given_fields(self) -> None:
        cleaned, error = validate_menu_item_data({'is_visible': False}, partial=True)

        assert error is None
        assert cleaned == {'is_visible': False}

    def test_partial_target_checked_against_current_type(self) -> None:
        class Current:
            link_type = 'section'
            target = '#about'

        cleaned, error = validate_menu_item_data({'target': 'contact'}, partial=True, current=Current())

        assert error is None
        assert cleaned['target'] == '#contact'

    def test_changing_type_revalidates_existing_target(self) -> None:
        class Current:
            link_type = 'page'
            target = 'about'

        _, error = validate_menu_item_data({'type': 'external'}, partial=True, current=Current())

        assert error == 'External target must be an absolute http or https URL'

    @pytest.mark.parametrize('value, expected', [
        (None, None), ('', None), ('null', None), (4, 4), ('12', 12),
    ])
    def test_parent_id_parsing(self, value, expected) -> None:
        cleaned, error = validate_menu_item_data(valid_item(parent_id=value))

        assert error is None
        assert cleaned['parent_id'] == expected

    def test_invalid_parent_id(self) -> None:
        _, error = validate_menu_item_data(valid_item(parent_id='abc'))

        assert error == 'Invalid parent menu item'

    def test_sort_order_must_be_integer(self) -> None:
        _, error = validate_menu_item_data(valid_item(sort_order='1'))

        assert error == 'Sort order must be an integer'

    def test_boolean_flags(self) -> None:
        cleaned, error = validate_menu_item_data(valid_item(show_dropdown='true', embed_company_profile=0))

        assert error is None
        assert cleaned['show_dropdown'] is True
        assert cleaned['embed_company_profile'] is False

        _, error = validate_menu_item_data(valid_item(is_visible='maybe'))
        assert error == 'is_visible must be true or false'

    def test_non_dict_body(self) -> None:
        assert validate_menu_item_data(None) == (None, 'Invalid request body')


class TestNormalizeTarget:
    """Tests for normalize_target()."""

    def test_page_slug(self) -> None:
        assert normalize_target('page', '/about-us') == ('about-us', None)

    def test_page_rejects_non_slug(self) -> None:
        target, error = normalize_target('page', 'About Us')

        assert target is None
        assert error.startswith('Page target must be a page slug')

    def test_section_anchor(self) -> None:
        assert normalize_target('section', 'products') == ('#products', None)
        assert normalize_target('section', '#products') == ('#products', None)
        assert normalize_target('section', '#1st')[1] == 'Section target must be an anchor id such as #products'

    def test_external_url(self) -> None:
        assert normalize_target('external', ' https://example.com/x ') == ('https://example.com/x', None)
        assert normalize_target('external', 'javascript:alert(1)')[0] is None

    def test_missing_target(self) -> None:
        assert normalize_target('page', '   ') == (None, 'Target is required based on menu type')


class TestRequestPayloads:
    """Tests for reorder and structure payload parsing."""

    def test_reorder_ids(self) -> None:
        assert parse_reorder_payload({'ids': [3, '1']}) == ([3, 1], None)

    def test_reorder_items_sorted_by_sort_order(self) -> None:
        data = {'items': [{'id': 1, 'sort_order': 2}, {'id': 2, 'sort_order': 0}, {'id': 3, 'sort_order': 2}]}

        assert parse_reorder_payload(data) == ([2, 1, 3], None)

    def test_reorder_rejects_duplicates(self) -> None:
        assert parse_reorder_payload({'ids': [1, 1]}) == (None, 'Menu items can only be listed once')

    def test_reorder_requires_items(self) -> None:
        assert parse_reorder_payload({}) == (None, 'Items are required')
        assert parse_reorder_payload({'ids': []}) == (None, 'Items are required')

    def test_structure_payload(self) -> None:
        data = {'items': [{'id': 2, 'parent_id': None}, {'id': '3', 'parent_id': 2}], 'expected_revision': 0}

        entries, revision, error = validate_structure_payload(data)

        assert error is None
        assert entries == [{'id': 2, 'parent_id': None}, {'id': 3, 'parent_id': 2}]
        assert revision == 0

    def test_structure_payload_errors(self) -> None:
        assert validate_structure_payload({'items': []})[2] == 'Items are required'
        assert validate_structure_payload({'items': [{'parent_id': 1}]})[2] == 'Each item needs a valid id'
        assert validate_structure_payload({'items': [{'id': 1}], 'expected_revision': '2'})[2] == \
            'expected_revision must be an integer'

    def test_parse_optional_id_rejects_booleans(self) -> None:
        assert parse_optional_id(True) == (None, 'Invalid id')


class TestMiscellaneous:
    """Tests for slug, account and URL helpers."""

    def test_generate_slug(self) -> None:
        assert generate_slug('Acme Tools, Inc.') == 'acme-tools-inc'
        assert generate_slug('!!!') == 'store'

    def test_username_and_password(self) -> None:
        assert validate_username('seller_1') == (True, None)
        assert validate_username('a b')[0] is False
        assert validate_password('12345') == (False, 'Password must be at least 6 characters')
        assert validate_username('ab') == (False, 'Username must be between 3 and 80 characters')
        assert validate_username('café_owner')[0] is False
        assert validate_username('seller\n')[0] is False
        assert validate_password('1234567', min_length=8) == (False, 'Password must be at least 8 characters')

    def test_json_depth(self) -> None:
        assert validate_json_structure({'items': [{'id': 1}]}, max_depth=3)
        assert not validate_json_structure({'a': [[[{'b': 1}]]]}, max_depth=3)
        assert validate_json_structure([], max_depth=0)

    def test_strip_html_keeps_plain_text(self) -> None:
        assert strip_html('Fish & Chips <i>now</i>') == 'Fish & Chips now'

    def test_external_url(self) -> None:
        assert validate_external_url('http://shop.example.com')
        assert not validate_external_url('ftp://shop.example.com')
        assert not validate_external_url('https://')

    def test_redirect_url(self) -> None:
        assert validate_redirect_url('/dashboard', ['localhost'])
        assert not validate_redirect_url('//evil.example.com', ['localhost'])
        assert not validate_redirect_url('https://evil.example.com', ['localhost'])
        assert validate_redirect_url('http://localhost:5000/menu', ['localhost'])
        assert validate_redirect_url('https://SHOP.example.com/menu', ['shop.example.com'])
        assert not validate_redirect_url('javascript:alert(1)', ['localhost'])
        assert not validate_redirect_url('http:///menu', ['localhost'])
