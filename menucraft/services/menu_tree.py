"""Menu tree construction and structural validation.

Works on any objects exposing ``id``, ``parent_id``, ``sort_order`` and
``is_visible`` (MenuItem rows or plain stand-ins), so the rules can be
checked before anything touches the database.
"""


class MenuError(Exception):
    """Base class for menu errors rendered to API clients"""
    reason = 'error'
    message = 'Menu error'
    status_code = 400

    def __init__(self, message=None, item_id=None):
        self.item_id = item_id
        super().__init__(message or self.message)

    def to_dict(self):
        return {'success': False, 'error': str(self), 'reason': self.reason}


class MenuTreeError(MenuError):
    """A rejected menu mutation (expected, user-facing, no retry needed)"""
    reason = 'invalid'
    message = 'Invalid menu change'


class SelfParentError(MenuTreeError):
    reason = 'self-parent'
    message = 'A menu item cannot be its own parent'


class CycleError(MenuTreeError):
    reason = 'cycle'
    message = 'Cannot move a parent into its own child'


class UnknownParentError(MenuTreeError):
    reason = 'unknown-target'
    message = 'Selected parent menu item does not exist'


class UnknownItemError(MenuTreeError):
    reason = 'unknown-item'
    message = 'Menu item not found'
    status_code = 404


class SiblingMismatchError(MenuTreeError):
    reason = 'not-siblings'
    message = 'Menu items to reorder must share the same parent'


class RevisionConflictError(MenuTreeError):
    reason = 'conflict'
    message = 'The menu was changed by someone else, please reload and try again'
    status_code = 409


class TreeNode:
    """Wraps a menu item with its ordered children"""

    def __init__(self, item):
        self.item = item
        self.children = []

    @property
    def id(self):
        return self.item.id

    def __repr__(self):
        return f'<TreeNode {self.item.id} children={len(self.children)}>'

    def to_dict(self, include_hidden=True):
        """
        Convert node and its subtree to a dictionary.

        Args:
            include_hidden (bool): When False, hidden items are dropped
                together with everything below them

        Returns:
            dict: Item fields plus a nested ``children`` list
        """
        if hasattr(self.item, 'to_dict'):
            data = self.item.to_dict()
        else:
            data = {'id': self.item.id, 'parent_id': self.item.parent_id}
        data['children'] = [
            child.to_dict(include_hidden)
            for child in self.children
            if include_hidden or _is_visible(child.item)
        ]
        return data


def _is_visible(item):
    return getattr(item, 'is_visible', True) is not False


def _sort_key(node):
    return node.item.sort_order or 0


def build_tree(items):
    """
    Build an ordered forest from a flat list of menu items.

    Items whose parent is missing (null or dangling) become roots. Siblings
    are ordered by sort_order, ties keep input order. Rows caught in a
    legacy parent cycle are not dropped: the first one in input order is
    detached and shown as a root.

    Args:
        items (list): Menu items for one storefront, any order

    Returns:
        list: Root TreeNode objects
    """
    nodes = {}
    ordered = []
    for item in items:
        node = TreeNode(item)
        nodes[item.id] = node
        ordered.append(node)

    roots = []
    parent_of = {}
    for node in ordered:
        parent = nodes.get(node.item.parent_id) if node.item.parent_id is not None else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
            parent_of[node.id] = parent

    # Unreachable nodes can only belong to a cycle
    reached = _collect_ids(roots)
    if len(reached) < len(ordered):
        for node in ordered:
            if node.id in reached:
                continue
            parent_of[node.id].children.remove(node)
            roots.append(node)
            reached.update(_collect_ids([node]))

    for node in ordered:
        node.children.sort(key=_sort_key)
    roots.sort(key=_sort_key)
    return roots


def _collect_ids(roots):
    seen = set()
    stack = list(roots)
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        stack.extend(node.children)
    return seen


def walk(roots, include_hidden=True):
    """Yield (node, depth) pairs depth-first in display order"""
    stack = [(node, 0) for node in reversed(roots)]
    while stack:
        node, depth = stack.pop()
        if not include_hidden and not _is_visible(node.item):
            continue
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(node.children))


def parent_map(items):
    """Map item id -> parent id for a flat list of items"""
    return {item.id: item.parent_id for item in items}


def is_descendant(parents, ancestor_id, candidate_id):
    """
    Check whether candidate_id sits below ancestor_id.

    Walks parent pointers up from the candidate. The walk is bounded by the
    number of known nodes so cyclic data cannot loop forever.

    Args:
        parents (dict): item id -> parent id
        ancestor_id: Potential ancestor
        candidate_id: Node to test

    Returns:
        bool: True if ancestor_id is a proper ancestor of candidate_id
    """
    current = parents.get(candidate_id)
    for _ in range(len(parents)):
        if current is None:
            return False
        if current == ancestor_id:
            return True
        current = parents.get(current)
    # Walk did not terminate: the chain above the candidate is cyclic
    return True


def validate_reparent(parents, node_id, new_parent_id):
    """
    Validate moving node_id under new_parent_id.

    Checks run in order: self-parenting, cycle, unknown target.

    Args:
        parents (dict): item id -> parent id for the whole storefront
        node_id: Item being moved
        new_parent_id: New parent id, or None for top level

    Raises:
        UnknownItemError: node_id is not part of the menu
        SelfParentError: node_id == new_parent_id
        CycleError: new_parent_id is a descendant of node_id
        UnknownParentError: new_parent_id does not exist
    """
    if node_id not in parents:
        raise UnknownItemError(item_id=node_id)
    if new_parent_id is None:
        return
    if new_parent_id == node_id:
        raise SelfParentError(item_id=node_id)
    if new_parent_id in parents and is_descendant(parents, node_id, new_parent_id):
        raise CycleError(item_id=node_id)
    if new_parent_id not in parents:
        raise UnknownParentError(item_id=node_id)


def validate_structure(parents, entries):
    """
    Validate a complete "set structure" command against the current menu.

    Args:
        parents (dict): Current item id -> parent id
        entries (list): Dicts with ``id`` and ``parent_id`` keys

    Returns:
        dict: The proposed item id -> parent id map

    Raises:
        MenuTreeError: First problem found (unknown ids, duplicates,
            self-parenting or a cycle in the proposed structure)
    """
    proposed = dict(parents)
    seen = set()
    for entry in entries:
        item_id = entry['id']
        new_parent_id = entry.get('parent_id')
        if item_id not in parents:
            raise UnknownItemError(item_id=item_id)
        if item_id in seen:
            raise MenuTreeError(f'Menu item {item_id} is listed more than once', item_id=item_id)
        seen.add(item_id)
        if new_parent_id == item_id:
            raise SelfParentError(item_id=item_id)
        if new_parent_id is not None and new_parent_id not in parents:
            raise UnknownParentError(item_id=item_id)
        proposed[item_id] = new_parent_id

    for item_id in proposed:
        if is_descendant(proposed, item_id, item_id):
            raise CycleError(item_id=item_id)
    return proposed


def siblings_of(items, parent_id, exclude_id=None):
    """Return items sharing parent_id, in display order"""
    group = [item for item in items if item.parent_id == parent_id and item.id != exclude_id]
    return sorted(group, key=lambda item: item.sort_order or 0)


def next_sort_order(items, parent_id, exclude_id=None):
    """Sort order that appends an item at the end of a sibling group"""
    group = siblings_of(items, parent_id, exclude_id)
    if not group:
        return 0
    return max(item.sort_order or 0 for item in group) + 1


def merge_order(requested_ids, current_ids):
    """
    Put requested ids first, then the remaining current ids in their order.

    Args:
        requested_ids (list): Ids in the requested order
        current_ids (list): All ids of the sibling group, current order

    Returns:
        list: Complete ordering of the sibling group
    """
    requested = list(requested_ids)
    listed = set(requested)
    return requested + [item_id for item_id in current_ids if item_id not in listed]


def splice_children(sibling_ids, removed_id, child_ids):
    """
    Replace removed_id in a sibling ordering with its children.

    Used by the delete policy: children of a deleted item take its slot
    among the former parent's children, keeping their relative order.
    When removed_id is not part of the group the children go last.
    """
    result = []
    spliced = False
    for item_id in sibling_ids:
        if item_id == removed_id:
            result.extend(child_ids)
            spliced = True
        else:
            result.append(item_id)
    if not spliced:
        result.extend(child_ids)
    return result


def insert_at(ordered, entry, position=None):
    """
    Insert entry into an ordered sibling list.

    Args:
        ordered (list): Siblings in display order, without entry
        entry: Item (or id) to place
        position (int, optional): Target index; None or past the end
            appends, negative values clamp to the front

    Returns:
        list: New ordering of the group
    """
    result = list(ordered)
    if position is None or position >= len(result):
        result.append(entry)
    else:
        result.insert(max(position, 0), entry)
    return result
