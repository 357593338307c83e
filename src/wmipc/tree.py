""" The layout tree: a recursive hierarchy of containers rooted at a single
    'root' node, with outputs, workspaces, split containers and windows
    below it. A :class:`TreeNode` is built from the decoded GET_TREE reply
    (or the container embedded in a window or workspace event) via
    :func:`build_tree`.

    Node ids are opaque handles. The server derives them from its own
    internal addresses; they are only meaningful for comparison against
    other ids observed on the same connection, and only for as long as the
    container exists.
"""

import re

from .protocol.errors import MalformedPayload


node_types = set(('root', 'output', 'con', 'floating_con', 'workspace', 'dockarea'))


class NodeId:
    """ An opaque, comparable container identifier. The wrapped integer is
        available via :func:`int` for sending back to the server (for
        example in a ``[con_id=...]`` command criterion), but no arithmetic
        is defined on it.
    """

    __slots__ = ('_value',)

    def __init__(self, value):

        if isinstance(value, NodeId):
            value = value._value
        elif isinstance(value, bool) or not isinstance(value, int):
            raise TypeError('node id must be an integer, not ' + type(value).__name__)

        self._value = value


    def __eq__(self, other):
        if isinstance(other, NodeId):
            return self._value == other._value
        return NotImplemented


    def __hash__(self):
        return hash((NodeId, self._value))


    def __int__(self):
        return self._value


    def __repr__(self):
        return 'NodeId(%d)' % (self._value)


    def __str__(self):
        return str(self._value)


# end of class NodeId



class Rect:
    """ A rectangle in pixels, as reported for container geometry.
    """

    __slots__ = ('x', 'y', 'width', 'height')

    def __init__(self, x=0, y=0, width=0, height=0):
        self.x = x
        self.y = y
        self.width = width
        self.height = height


    @classmethod
    def from_json(cls, value):
        """ Return a :class:`Rect` for the decoded JSON *value*, or None if
            the value is absent.
        """

        if value is None:
            return None

        try:
            return cls(value['x'], value['y'], value['width'], value['height'])
        except (KeyError, TypeError):
            raise MalformedPayload('invalid rectangle: ' + repr(value))


    def __eq__(self, other):
        if not isinstance(other, Rect):
            return NotImplemented
        return tuple(self) == tuple(other)


    def __iter__(self):
        return iter((self.x, self.y, self.width, self.height))


    def __repr__(self):
        return 'Rect(x=%r, y=%r, width=%r, height=%r)' % tuple(self)


# end of class Rect



class TreeNode:
    """ One container in the layout tree. Optional fields the server did not
        send are None; in particular :attr:`percent` is None for containers
        that do not have a share of their parent, never 0.

        :ivar id: The :class:`NodeId` for this container.
        :ivar nodes: Ordered list of tiling children.
        :ivar floating_nodes: Ordered list of floating children.
        :ivar parent: The containing :class:`TreeNode`, None for the root.
        :ivar raw: The decoded JSON mapping this node was built from.
    """

    def __init__(self, data, parent=None):

        if not isinstance(data, dict):
            raise MalformedPayload('tree node must be a JSON object, not ' + type(data).__name__)

        try:
            self.id = NodeId(data['id'])
        except (KeyError, TypeError):
            raise MalformedPayload('tree node without a valid id: ' + repr(data.get('id')))

        self.raw = data
        self.parent = parent

        self.name = data.get('name')
        self.type = data.get('type')
        self.border = data.get('border')
        self.current_border_width = data.get('current_border_width')
        self.layout = data.get('layout')
        self.last_split_layout = data.get('last_split_layout')
        self.orientation = data.get('orientation')
        self.percent = data.get('percent')
        self.urgent = bool(data.get('urgent', False))
        self.focused = bool(data.get('focused', False))
        self.sticky = bool(data.get('sticky', False))
        self.fullscreen_mode = data.get('fullscreen_mode')
        self.floating = data.get('floating')
        self.scratchpad_state = data.get('scratchpad_state')
        self.window = data.get('window')
        self.window_type = data.get('window_type')
        self.window_properties = _optional(data, 'window_properties', dict) or dict()
        self.marks = list(_optional(data, 'marks', list) or ())
        self.num = data.get('num')
        self.output = data.get('output')

        self.rect = Rect.from_json(data.get('rect'))
        self.window_rect = Rect.from_json(data.get('window_rect'))
        self.deco_rect = Rect.from_json(data.get('deco_rect'))
        self.geometry = Rect.from_json(data.get('geometry'))

        self.focus = list()
        for value in _optional(data, 'focus', list) or ():
            try:
                self.focus.append(NodeId(value))
            except TypeError:
                raise MalformedPayload('invalid focus entry: ' + repr(value))

        for mark in self.marks:
            if not isinstance(mark, str):
                raise MalformedPayload('invalid mark: ' + repr(mark))

        self.nodes = self._children(_optional(data, 'nodes', list))
        self.floating_nodes = self._children(_optional(data, 'floating_nodes', list))


    def _children(self, values):

        if values is None:
            return list()

        children = list()
        for value in values:
            children.append(TreeNode(value, self))

        return children


    def __iter__(self):
        """ Iterate over this node and all of its descendants; see
            :func:`walk`.
        """

        return self.walk()


    def __repr__(self):
        return 'TreeNode(id=%s, type=%s, name=%s)' % (self.id, self.type, repr(self.name))


    def walk(self):
        """ Generate this node and every descendant depth-first, parents
            before their children, tiling children before floating children.
            Each call starts a new traversal.
        """

        stack = [self]

        while stack:
            node = stack.pop()
            yield node

            # Pushed in reverse so that the first tiling child is popped
            # first, and all tiling children precede the floating ones.

            children = node.nodes + node.floating_nodes
            stack.extend(reversed(children))


    def descendants(self):
        """ Same as :func:`walk`, excluding this node itself.
        """

        walker = self.walk()
        next(walker)
        return walker


    def find_by_id(self, id):
        """ Return the node whose id exactly matches *id*, or None. The *id*
            may be a :class:`NodeId` or the integer received from the server.
        """

        id = NodeId(id)

        for node in self.walk():
            if node.id == id:
                return node

        return None


    def find_by_window(self, window):
        """ Return the node holding the X11 *window* id, or None.
        """

        for node in self.walk():
            if node.window is not None and node.window == window:
                return node

        return None


    def find_focused(self):
        for node in self.walk():
            if node.focused:
                return node

        return None


    def find_named(self, pattern):
        """ Return the list of nodes whose name matches the regular
            expression *pattern*.
        """

        expression = re.compile(pattern)
        found = list()

        for node in self.descendants():
            if node.name is not None and expression.search(node.name):
                found.append(node)

        return found


    def find_marked(self, pattern='.*'):

        expression = re.compile(pattern)
        found = list()

        for node in self.descendants():
            for mark in node.marks:
                if expression.search(mark):
                    found.append(node)
                    break

        return found


    def find_classed(self, pattern):
        """ Return the list of windows whose X11 class matches *pattern*.
        """

        expression = re.compile(pattern)
        found = list()

        for node in self.descendants():
            window_class = node.window_properties.get('class')
            if window_class is not None and expression.search(window_class):
                found.append(node)

        return found


    def leaves(self):
        """ Return the list of containers holding windows: plain containers
            with no tiling children of their own, excluding dock clients.
        """

        found = list()

        for node in self.descendants():
            if node.nodes or node.type != 'con':
                continue
            if node.parent.type == 'dockarea':
                continue
            found.append(node)

        return found


    def root(self):

        node = self
        while node.parent is not None:
            node = node.parent

        return node


    def workspaces(self):
        """ Return the list of workspace nodes, excluding the internal
            scratchpad workspace.
        """

        found = list()

        for node in self.walk():
            if node.type != 'workspace' or node.name is None:
                continue
            if not node.name.startswith('__'):
                found.append(node)

        return found


    def workspace(self):
        """ Return the workspace containing this node, or None if this node
            is not inside a workspace.
        """

        node = self
        while node is not None:
            if node.type == 'workspace':
                return node
            node = node.parent

        return None


# end of class TreeNode



def _optional(data, key, kind):
    """ Return *data[key]*, or None if it is absent or null; any other value
        must be an instance of *kind*.
    """

    value = data.get(key)

    if value is None or isinstance(value, kind):
        return value

    if kind is list:
        expected = 'array'
    else:
        expected = 'object'

    raise MalformedPayload('%s must be a JSON %s, not %s' % (key, expected, type(value).__name__))



def build_tree(value):
    """ Build and return the :class:`TreeNode` hierarchy for the decoded
        JSON *value*. Raises :class:`wmipc.MalformedPayload` if the value
        is not shaped like a container tree.
    """

    return TreeNode(value)


def find_by_id(root, id):
    return root.find_by_id(id)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
