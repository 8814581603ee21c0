from collections import deque


class AVLNode:
    """Node of an `AVL` tree.

    Attributes
    ----------
    key : float
        Ordering key.

    payloads : deque
        Payloads sharing the key, in insertion order.

    left, right : AVLNode or None
        Sub-trees with smaller and greater keys.

    balance : int
        Height of the right sub-tree minus height of the left one.

    """

    __slots__ = ("key", "payloads", "left", "right", "balance")

    def __init__(self, key, payload):
        self.key = key
        self.payloads = deque([payload])
        self.left = None
        self.right = None
        self.balance = 0


def _rotate_left(node):
    pivot = node.right
    node.right = pivot.left
    pivot.left = node

    node.balance = node.balance - 1 - max(pivot.balance, 0)
    pivot.balance = pivot.balance - 1 + min(node.balance, 0)

    return pivot


def _rotate_right(node):
    pivot = node.left
    node.left = pivot.right
    pivot.right = node

    node.balance = node.balance + 1 - min(pivot.balance, 0)
    pivot.balance = pivot.balance + 1 + max(node.balance, 0)

    return pivot


def _rebalance(node):
    if node.balance == 2:
        if node.right.balance < 0:  # Right-left case
            node.right = _rotate_right(node.right)
        return _rotate_left(node)

    if node.balance == -2:
        if node.left.balance > 0:  # Left-right case
            node.left = _rotate_left(node.left)
        return _rotate_right(node)

    return node


def _insert(node, key, payload):
    """Insert payload under key in the sub-tree.

    Returns
    -------
    node : AVLNode
        New root of the sub-tree.

    grew : bool
        True if the sub-tree height increased.

    """

    if node is None:
        return AVLNode(key, payload), True

    if key == node.key:
        node.payloads.append(payload)
        return node, False

    if key > node.key:
        node.right, grew = _insert(node.right, key, payload)
        if not grew:
            return node, False
        node.balance += 1
    else:
        node.left, grew = _insert(node.left, key, payload)
        if not grew:
            return node, False
        node.balance -= 1

    if node.balance == 0:
        return node, False

    if abs(node.balance) == 1:
        return node, True

    # A rotation after an insertion restores the previous height
    return _rebalance(node), False


def _extract_min(node):
    """Remove the first payload with the smallest key in the sub-tree.

    Returns
    -------
    node : AVLNode or None
        New root of the sub-tree.

    payload : object
        Removed payload.

    shrunk : bool
        True if the sub-tree height decreased.

    """

    if node.left is None:
        payload = node.payloads.popleft()
        if node.payloads:
            return node, payload, False
        return node.right, payload, True

    node.left, payload, shrunk = _extract_min(node.left)
    if not shrunk:
        return node, payload, False

    node.balance += 1

    if node.balance == 1:
        return node, payload, False

    if node.balance == 0:
        return node, payload, True

    node = _rebalance(node)
    return node, payload, node.balance == 0


class AVL:
    """Self-balancing binary search tree used as a priority queue.

    Each node holds every payload inserted with its key, so equal keys are
    served first in, first out.

    Examples
    --------
    >>> index = AVL()
    >>> index.insert(2.5, "b")
    >>> index.insert(0.5, "a")
    >>> index.insert(2.5, "c")
    >>> [index.extract_min() for _ in range(4)]
    ['a', 'b', 'c', None]

    """

    def __init__(self):
        self.root = None
        self._size = 0

    def __len__(self):
        return self._size

    def __bool__(self):
        return self.root is not None

    def is_empty(self):
        return self.root is None

    def __iter__(self):
        """Iterate over (key, payload) pairs in extraction order."""

        stack = []
        node = self.root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            for payload in node.payloads:
                yield node.key, payload
            node = node.right

    def height(self):
        def _height(node):
            if node is None:
                return 0
            return 1 + max(_height(node.left), _height(node.right))

        return _height(self.root)

    def insert(self, key, payload):
        """Add a payload to the tree.

        Parameters
        ----------
        key : float
            Ordering key, must be finite.

        payload : object
            Stored data.

        """

        self.root, _ = _insert(self.root, key, payload)
        self._size += 1

    def _min_node(self):
        node = self.root
        if node is None:
            return None
        while node.left is not None:
            node = node.left
        return node

    def find_min(self):
        """Return the first payload with the smallest key, None if empty."""

        node = self._min_node()
        if node is None:
            return None
        return node.payloads[0]

    def min_key(self):
        node = self._min_node()
        if node is None:
            return None
        return node.key

    def extract_min(self):
        """Remove and return the first payload with the smallest key.

        Returns
        -------
        payload : object or None
            Removed payload, None if the tree is empty.

        """

        if self.root is None:
            return None

        self.root, payload, _ = _extract_min(self.root)
        self._size -= 1
        return payload
