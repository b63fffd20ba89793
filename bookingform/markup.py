"""Typed markup tree and serializer.

Renderers build Element/Text nodes instead of concatenating strings. The
tree can be inspected in tests (find/find_all by id, class or attribute)
and serialized once by ``render``.

Attribute values:
- ``True`` renders a bare boolean attribute (``disabled``)
- ``False`` / ``None`` omits the attribute
- lists/tuples of class names are joined with spaces
- everything else is converted with ``str`` and escaped
"""

from dataclasses import dataclass, field
from html import escape
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr",
})

# Tags whose children are emitted verbatim
RAW_TEXT_TAGS = frozenset({"script", "style"})


class Node:
    """Base class of every markup node."""

    def render(self) -> str:
        raise NotImplementedError

    def walk(self) -> Iterator["Node"]:
        yield self

    def __str__(self) -> str:
        return self.render()


@dataclass
class Text(Node):
    """Escaped text content."""
    value: str

    def render(self) -> str:
        return escape(str(self.value), quote=False)

    def text(self) -> str:
        return str(self.value)


@dataclass
class Raw(Node):
    """Trusted markup emitted as-is (inline SVG paths, style/script bodies)."""
    value: str

    def render(self) -> str:
        return self.value

    def text(self) -> str:
        return ""


Child = Union[Node, str, None]


def _to_node(child: Union[Node, str]) -> Node:
    return child if isinstance(child, Node) else Text(str(child))


def _flatten(children: Iterable[Any]) -> List[Node]:
    nodes: List[Node] = []
    for child in children:
        if child is None or child is False:
            continue
        if isinstance(child, (list, tuple)):
            nodes.extend(_flatten(child))
        else:
            nodes.append(_to_node(child))
    return nodes


def _attr_value(value: Any) -> Optional[str]:
    if value is None or value is False:
        return None
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value if v)
    return str(value)


@dataclass
class Element(Node):
    """An element with attributes and children."""
    tag: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    children: List[Node] = field(default_factory=list)

    def render(self) -> str:
        parts = [f"<{self.tag}"]
        for name, value in self.attrs.items():
            if value is True:
                parts.append(f" {name}")
                continue
            text = _attr_value(value)
            if text is None:
                continue
            parts.append(f' {name}="{escape(text, quote=True)}"')
        parts.append(">")
        if self.tag in VOID_TAGS:
            return "".join(parts)
        if self.tag in RAW_TEXT_TAGS:
            body = "".join(
                c.value if isinstance(c, (Text, Raw)) else c.render() for c in self.children
            )
        else:
            body = "".join(c.render() for c in self.children)
        return "".join(parts) + body + f"</{self.tag}>"

    def walk(self) -> Iterator[Node]:
        yield self
        for child in self.children:
            yield from child.walk()

    def append(self, *children: Child) -> "Element":
        self.children.extend(_flatten(children))
        return self

    def get(self, name: str, default: Any = None) -> Any:
        return self.attrs.get(name, default)

    @property
    def classes(self) -> List[str]:
        value = _attr_value(self.attrs.get("class"))
        return value.split() if value else []

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def text(self) -> str:
        """Concatenated text content of this element."""
        return "".join(
            node.text() for node in self.walk() if isinstance(node, Text)
        )

    def find_all(self, predicate: Callable[["Element"], bool]) -> List["Element"]:
        return [n for n in self.walk() if isinstance(n, Element) and predicate(n)]

    def find(self, predicate: Callable[["Element"], bool]) -> Optional["Element"]:
        for node in self.walk():
            if isinstance(node, Element) and predicate(node):
                return node
        return None

    def by_id(self, element_id: str) -> Optional["Element"]:
        return self.find(lambda e: e.attrs.get("id") == element_id)

    def by_attr(self, name: str, value: Any = True) -> List["Element"]:
        """Elements carrying attribute ``name`` (optionally with ``value``)."""
        if value is True:
            return self.find_all(lambda e: name in e.attrs)
        return self.find_all(lambda e: e.attrs.get(name) == value)

    def by_class(self, name: str) -> List["Element"]:
        return self.find_all(lambda e: e.has_class(name))


@dataclass
class Fragment(Node):
    """A sequence of sibling nodes without a wrapper element."""
    children: List[Node] = field(default_factory=list)

    def render(self) -> str:
        return "".join(c.render() for c in self.children)

    def walk(self) -> Iterator[Node]:
        for child in self.children:
            yield from child.walk()


def h(tag: str, attrs: Optional[Dict[str, Any]] = None, *children: Any) -> Element:
    """Build an element.

    Examples:
        >>> h("button", {"type": "button", "disabled": True}, "Next").render()
        '<button type="button" disabled>Next</button>'
        >>> h("input", {"name": "email", "value": 'a"b'}).render()
        '<input name="email" value="a&quot;b">'
    """
    return Element(tag=tag, attrs=dict(attrs or {}), children=_flatten(children))


def fragment(*children: Any) -> Fragment:
    return Fragment(children=_flatten(children))


def svg_icon(paths: str, view_box: str = "0 0 24 24", css_class: str = "icon", **attrs: Any) -> Element:
    """Inline SVG icon from trusted path markup."""
    base = {
        "class": css_class,
        "xmlns": "http://www.w3.org/2000/svg",
        "viewBox": view_box,
        "fill": "none",
        "stroke": "currentColor",
        "stroke-width": "1.5",
        "aria-hidden": "true",
    }
    base.update(attrs)
    return Element(tag="svg", attrs=base, children=[Raw(paths)])


def render(node: Node) -> str:
    return node.render()


__all__ = [
    "Node",
    "Text",
    "Raw",
    "Element",
    "Fragment",
    "h",
    "fragment",
    "svg_icon",
    "render",
    "VOID_TAGS",
]
