"""Menu service for storefront navigation reads and mutations"""
from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from menucraft.extensions import db
from menucraft.models.menu import MenuItem
from menucraft.models.storefront import Storefront
from menucraft.services import menu_tree
from menucraft.services.menu_tree import (
    MenuError, MenuTreeError, RevisionConflictError, SiblingMismatchError,
    UnknownItemError, UnknownParentError
)
from menucraft.utils.validators import validate_menu_item_data


class MenuPersistenceError(MenuError):
    """Storage failed; the change was rolled back and can be retried"""
    reason = 'persistence'
    message = 'Could not save menu changes, please try again'
    status_code = 500


class MenuService:
    """Service for handling storefront menu operations.

    Every mutation locks the storefront row first, validates against the
    full item set read inside that lock and commits once.
    """

    # ===== READS =====

    @staticmethod
    def get_items(storefront_id):
        """All menu items of a storefront in sibling display order"""
        return MenuItem.query.filter_by(storefront_id=storefront_id).order_by(
            MenuItem.sort_order, MenuItem.id
        ).all()

    @staticmethod
    def get_tree(storefront_id, include_hidden=True):
        """
        Build the navigation tree for a storefront.

        Args:
            storefront_id (int): Storefront ID
            include_hidden (bool): Include hidden items and their subtrees

        Returns:
            list: Nested dictionaries ready for JSON
        """
        roots = menu_tree.build_tree(MenuService.get_items(storefront_id))
        return [
            node.to_dict(include_hidden)
            for node in roots
            if include_hidden or node.item.is_visible
        ]

    @staticmethod
    def get_public_tree(slug):
        """
        Get the visible menu tree of an active storefront.

        Returns:
            tuple: (storefront, tree) or (None, None) if not found
        """
        storefront = Storefront.get_active_by_slug(slug)
        if not storefront:
            return None, None
        return storefront, MenuService.get_tree(storefront.id, include_hidden=False)

    @staticmethod
    def get_parent_options(storefront_id, item_id=None):
        """
        Items that may become the parent of item_id, in display order.

        The item itself and its descendants are left out so the dashboard
        never offers a choice that would create a cycle.

        Returns:
            list: Dicts with id, label, link_type and depth
        """
        items = MenuService.get_items(storefront_id)
        parents = menu_tree.parent_map(items)
        options = []
        for node, depth in menu_tree.walk(menu_tree.build_tree(items)):
            if item_id is not None and (
                node.id == item_id or menu_tree.is_descendant(parents, item_id, node.id)
            ):
                continue
            options.append({
                'id': node.id,
                'label': node.item.label,
                'link_type': node.item.link_type,
                'depth': depth
            })
        return options

    # ===== MUTATIONS =====

    @staticmethod
    def create_item(storefront, data):
        """
        Create a menu item, appended to the end of its sibling group.
        A sort_order is read as the index to insert at; the group is then
        renumbered 0..n-1.

        Args:
            storefront (Storefront): Owning storefront
            data (dict): Menu item fields from request

        Returns:
            tuple: (menu_item, error)
        """
        cleaned, error = validate_menu_item_data(data, **_label_limits())
        if error:
            return None, error

        locked = _lock_storefront(storefront.id)
        items = MenuService.get_items(locked.id)

        max_items = current_app.config.get('MENU_MAX_ITEMS', 200)
        if len(items) >= max_items:
            db.session.rollback()
            return None, f"A menu can have at most {max_items} items"

        parent_id = cleaned.pop('parent_id', None)
        if parent_id is not None and parent_id not in menu_tree.parent_map(items):
            return None, _reject(UnknownParentError(), locked, 'create')

        position = cleaned.pop('sort_order', None)
        item = MenuItem(storefront_id=locked.id, parent_id=parent_id, **cleaned)
        if position is None:
            item.sort_order = menu_tree.next_sort_order(items, parent_id)
        else:
            _renumber(menu_tree.insert_at(menu_tree.siblings_of(items, parent_id), item, position))
        db.session.add(item)

        error = _commit(locked, 'create')
        if error:
            return None, error
        current_app.logger.info(f"Created menu item {item.id} in storefront {locked.id}")
        return item, None

    @staticmethod
    def update_item(storefront, item_id, data):
        """
        Update a menu item. parent_id and sort_order keys go through the
        same checks and placement as reparent_item.

        Returns:
            tuple: (menu_item, error)
        """
        locked = _lock_storefront(storefront.id)
        items = MenuService.get_items(locked.id)
        item = _find(items, item_id)
        if not item:
            return None, _reject(UnknownItemError(item_id=item_id), locked, 'update')

        cleaned, error = validate_menu_item_data(data, partial=True, current=item, **_label_limits())
        if error:
            db.session.rollback()
            return None, error

        if 'parent_id' in cleaned or 'sort_order' in cleaned:
            new_parent_id = cleaned.pop('parent_id', item.parent_id)
            try:
                _move(items, item, new_parent_id, cleaned.pop('sort_order', None))
            except MenuTreeError as e:
                return None, _reject(e, locked, 'update')

        for field, value in cleaned.items():
            setattr(item, field, value)

        error = _commit(locked, 'update')
        if error:
            return None, error
        return item, None

    @staticmethod
    def reparent_item(storefront, item_id, new_parent_id, sort_order=None):
        """
        Move an item (with its whole subtree) under a new parent.

        Args:
            storefront (Storefront): Owning storefront
            item_id (int): Item to move
            new_parent_id (int or None): New parent, None for top level
            sort_order (int, optional): Index among the new siblings,
                which are renumbered 0..n-1; appended at the end when omitted

        Returns:
            tuple: (menu_item, error) where error is a MenuError
        """
        locked = _lock_storefront(storefront.id)
        items = MenuService.get_items(locked.id)
        item = _find(items, item_id)

        try:
            menu_tree.validate_reparent(menu_tree.parent_map(items), item_id, new_parent_id)
        except MenuTreeError as e:
            return None, _reject(e, locked, 'reparent')

        if item.parent_id == new_parent_id and sort_order is None:
            db.session.rollback()
            return item, None

        _move(items, item, new_parent_id, sort_order)

        error = _commit(locked, 'reparent')
        if error:
            return None, error
        current_app.logger.info(
            f"Moved menu item {item.id} under {new_parent_id or 'top level'} in storefront {locked.id}"
        )
        return item, None

    @staticmethod
    def promote_item(storefront, item_id):
        """Move an item to the top level (no-op if it already is)"""
        return MenuService.reparent_item(storefront, item_id, None)

    @staticmethod
    def delete_item(storefront, item_id):
        """
        Delete a menu item.

        Children are promoted to the deleted item's former parent and take
        its slot there, keeping their relative order.

        Returns:
            tuple: (promoted_child_ids, error)
        """
        locked = _lock_storefront(storefront.id)
        items = MenuService.get_items(locked.id)
        item = _find(items, item_id)
        if not item:
            return None, _reject(UnknownItemError(item_id=item_id), locked, 'delete')

        new_parent_id = item.parent_id
        if new_parent_id is not None and (
            new_parent_id == item.id
            or menu_tree.is_descendant(menu_tree.parent_map(items), item.id, new_parent_id)
        ):
            # Legacy loop through the deleted item: its children go to the top level
            new_parent_id = None

        children = menu_tree.siblings_of(items, item.id, exclude_id=item.id)
        siblings = menu_tree.siblings_of(items, new_parent_id)
        new_order = menu_tree.splice_children(
            [sibling.id for sibling in siblings], item.id, [child.id for child in children]
        )

        by_id = {entry.id: entry for entry in items}
        for position, entry_id in enumerate(new_order):
            by_id[entry_id].parent_id = new_parent_id
            by_id[entry_id].sort_order = position

        try:
            # Children must point elsewhere before their parent row goes away
            db.session.flush()
            db.session.delete(item)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to delete menu item {item_id}: {e}")
            return None, MenuPersistenceError(item_id=item_id)

        error = _commit(locked, 'delete')
        if error:
            return None, error
        current_app.logger.info(
            f"Deleted menu item {item_id} in storefront {locked.id}, promoted {len(children)} child item(s)"
        )
        return [child.id for child in children], None

    @staticmethod
    def reorder_items(storefront, ordered_ids):
        """
        Reorder a sibling group.

        Listed items get sort_order 0..k-1 in the given order; siblings not
        listed follow in their current order.

        Returns:
            tuple: (sibling_items_in_new_order, error)
        """
        locked = _lock_storefront(storefront.id)
        items = MenuService.get_items(locked.id)
        by_id = {item.id: item for item in items}

        for item_id in ordered_ids:
            if item_id not in by_id:
                return None, _reject(UnknownItemError(item_id=item_id), locked, 'reorder')

        parent_ids = {by_id[item_id].parent_id for item_id in ordered_ids}
        if len(parent_ids) != 1:
            return None, _reject(SiblingMismatchError(), locked, 'reorder')

        group = menu_tree.siblings_of(items, parent_ids.pop())
        new_order = menu_tree.merge_order(ordered_ids, [item.id for item in group])
        for position, item_id in enumerate(new_order):
            by_id[item_id].sort_order = position

        error = _commit(locked, 'reorder')
        if error:
            return None, error
        return [by_id[item_id] for item_id in new_order], None

    @staticmethod
    def apply_structure(storefront, entries, expected_revision=None):
        """
        Apply a whole new menu structure in one validated step.

        Entry order defines sibling order within each parent group; items
        not listed keep their parent and follow the listed ones.

        Args:
            storefront (Storefront): Owning storefront
            entries (list): Dicts with ``id`` and ``parent_id``
            expected_revision (int, optional): Reject if the menu changed
                since the client loaded it

        Returns:
            tuple: (revision, error)
        """
        locked = _lock_storefront(storefront.id)

        if expected_revision is not None and expected_revision != locked.menu_revision:
            return None, _reject(RevisionConflictError(), locked, 'structure')

        items = MenuService.get_items(locked.id)
        try:
            proposed = menu_tree.validate_structure(menu_tree.parent_map(items), entries)
        except MenuTreeError as e:
            return None, _reject(e, locked, 'structure')

        listed = {}
        for entry in entries:
            listed.setdefault(entry['parent_id'], []).append(entry['id'])

        by_id = {item.id: item for item in items}
        current_ids = [item.id for item in sorted(items, key=lambda item: item.sort_order or 0)]
        for parent_id in set(proposed.values()):
            members = [item_id for item_id in current_ids if proposed[item_id] == parent_id]
            for position, item_id in enumerate(menu_tree.merge_order(listed.get(parent_id, []), members)):
                by_id[item_id].parent_id = parent_id
                by_id[item_id].sort_order = position

        error = _commit(locked, 'structure')
        if error:
            return None, error
        current_app.logger.info(f"Applied menu structure ({len(entries)} items) to storefront {locked.id}")
        return locked.menu_revision, None


def _label_limits():
    return {
        'label_min': current_app.config.get('MENU_LABEL_MIN', 2),
        'label_max': current_app.config.get('MENU_LABEL_MAX', 50),
    }


def _lock_storefront(storefront_id):
    """Serialize menu mutations per storefront (row lock until commit/rollback)

    The row is re-read so menu_revision reflects the database, not an
    instance loaded earlier in the request.
    """
    return Storefront.query.filter_by(id=storefront_id).with_for_update().populate_existing().one()


def _find(items, item_id):
    for item in items:
        if item.id == item_id:
            return item
    return None


def _renumber(group):
    for position, entry in enumerate(group):
        entry.sort_order = position


def _move(items, item, new_parent_id, position=None):
    """
    Validate and apply a parent change in memory.

    Without a position the item is appended to its new sibling group (or
    left alone if the parent is unchanged). With a position it is inserted
    at that index and the group is renumbered 0..n-1.
    """
    menu_tree.validate_reparent(menu_tree.parent_map(items), item.id, new_parent_id)
    if position is None:
        if item.parent_id == new_parent_id:
            return
        item.sort_order = menu_tree.next_sort_order(items, new_parent_id, exclude_id=item.id)
        item.parent_id = new_parent_id
        return

    group = menu_tree.siblings_of(items, new_parent_id, exclude_id=item.id)
    item.parent_id = new_parent_id
    _renumber(menu_tree.insert_at(group, item, position))


def _reject(error, storefront, action):
    """Release the lock and log a rejected mutation"""
    db.session.rollback()
    current_app.logger.warning(
        f"Rejected menu {action} in storefront {storefront.id}: {error.reason} (item {error.item_id})"
    )
    return error


def _commit(storefront, action):
    """
    Bump the menu revision and commit; returns an error on failure.

    The bump only matches the revision read under the lock, so a writer
    that validated against an older menu (SQLite ignores FOR UPDATE) is
    turned away with a conflict instead of persisting its change.
    """
    expected = storefront.menu_revision or 0
    try:
        result = db.session.execute(
            update(Storefront)
            .where(Storefront.id == storefront.id, Storefront.menu_revision == expected)
            .values(menu_revision=expected + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return _reject(RevisionConflictError(), storefront, action)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to save menu {action} for storefront {storefront.id}: {e}")
        return MenuPersistenceError()
    return None
