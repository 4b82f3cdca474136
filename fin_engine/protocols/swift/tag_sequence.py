"""
SWIFT Tag Sequence

Ordered container of name/value tags shared by the user header (block 3),
text block (block 4) and trailer (block 5). Wire order is business order:
nothing here reorders the sequence, and duplicate names are kept since they
carry repetitive fields.
"""

from typing import Iterable, Iterator, List, Optional, Union


class Tag:
    """One ``name``/``value`` pair.

    The name is fixed once set; the value can be reassigned. A missing value
    is stored as ``""``, which is how it reads back off the wire.
    """

    __slots__ = ("_name", "_value")

    def __init__(self, name: str, value: Optional[str] = ""):
        if not name:
            raise ValueError("Tag name must not be empty")
        self._name = name
        self.value = value

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> str:
        return self._value

    @value.setter
    def value(self, value: Optional[str]) -> None:
        self._value = "" if value is None else value

    @property
    def number(self) -> str:
        """Name without its trailing letter option (``"32A"`` -> ``"32"``)."""
        if len(self._name) > 1 and self._name[-1].isalpha() and self._name[:-1].isdigit():
            return self._name[:-1]
        return self._name

    @property
    def letter_option(self) -> Optional[str]:
        """Trailing letter option, if any (``"32A"`` -> ``"A"``)."""
        if len(self._name) > 1 and self._name[-1].isalpha() and self._name[:-1].isdigit():
            return self._name[-1]
        return None

    def to_swift(self) -> str:
        """Render as a block 4 tag line."""
        return f":{self._name}:{self._value}"

    def to_sub_block(self) -> str:
        """Render as a block 3/5 sub-block."""
        return "{" + f"{self._name}:{self._value}" + "}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self._name == other._name and self.value == other.value

    __hash__ = None

    def __repr__(self) -> str:
        return f"Tag({self._name!r}, {self.value!r})"


class TagSequence:
    """Ordered sequence of :class:`Tag` with duplicate names allowed."""

    def __init__(self, tags: Optional[Iterable[Tag]] = None):
        self._tags: List[Tag] = list(tags) if tags is not None else []

    # Structure

    def append(self, tag: Tag) -> "TagSequence":
        """Append a tag at the end of the sequence."""
        if not isinstance(tag, Tag):
            raise TypeError(f"Expected Tag, got {type(tag).__name__}")
        self._tags.append(tag)
        return self

    def append_tag(self, name: str, value: Optional[str] = "") -> "TagSequence":
        return self.append(Tag(name, value))

    def extend(self, tags: Iterable[Tag]) -> "TagSequence":
        for tag in tags:
            self.append(tag)
        return self

    def remove_tags(self, name: str) -> int:
        """Remove every tag named ``name``; returns how many were removed."""
        before = len(self._tags)
        self._tags = [t for t in self._tags if t.name != name]
        return before - len(self._tags)

    def is_empty(self) -> bool:
        return not self._tags

    # Queries

    def tags_by_name(self, name: str) -> List[Tag]:
        """All tags named ``name``, in sequence order."""
        return [t for t in self._tags if t.name == name]

    def tags_by_number(self, number: Union[int, str]) -> List[Tag]:
        """All tags whose numeric part is ``number``, whatever the letter option."""
        number = str(number)
        return [t for t in self._tags if t.number == number]

    def first_by_name(self, name: str) -> Optional[Tag]:
        for tag in self._tags:
            if tag.name == name:
                return tag
        return None

    def tag_value(self, name: str) -> Optional[str]:
        tag = self.first_by_name(name)
        return tag.value if tag is not None else None

    def tag_values(self, name: str) -> List[Optional[str]]:
        return [t.value for t in self._tags if t.name == name]

    def contains_tag(self, name: str) -> bool:
        return self.first_by_name(name) is not None

    def index_of(self, name: str, start: int = 0) -> int:
        """Index of the first tag named ``name`` at or after ``start``, or -1."""
        for i in range(max(start, 0), len(self._tags)):
            if self._tags[i].name == name:
                return i
        return -1

    def names(self) -> List[str]:
        return [t.name for t in self._tags]

    def distinct_names(self) -> List[str]:
        """Sorted unique tag names (the sequence itself is left untouched)."""
        return sorted(set(self.names()))

    # Sub-sequences

    def sub_block_between(self, start: str, end: Optional[str] = None) -> "TagSequence":
        """Contiguous run from the first ``start`` tag up to the next ``end`` tag.

        The ``start`` tag is included and the ``end`` tag is not. Without ``end``
        (or when no ``end`` tag follows) the run extends to the end of the
        sequence. Returns an empty sequence when ``start`` is absent.
        """
        begin = self.index_of(start)
        if begin < 0:
            return TagSequence()

        stop = self.index_of(end, begin + 1) if end is not None else -1
        if stop < 0:
            stop = len(self._tags)
        return TagSequence(self._tags[begin:stop])

    def sub_blocks(self, start: str, end: Optional[str] = None) -> List["TagSequence"]:
        """Every repetition of a sequence opened by a ``start`` tag.

        Each run ends before the next ``start`` tag, the next ``end`` tag, or
        the end of the sequence.
        """
        blocks: List[TagSequence] = []
        current: Optional[List[Tag]] = None
        for tag in self._tags:
            if tag.name == start:
                if current is not None:
                    blocks.append(TagSequence(current))
                current = [tag]
            elif current is not None:
                if end is not None and tag.name == end:
                    blocks.append(TagSequence(current))
                    current = None
                else:
                    current.append(tag)
        if current is not None:
            blocks.append(TagSequence(current))
        return blocks

    # Container protocol

    @property
    def tags(self) -> List[Tag]:
        """Copy of the underlying tags list."""
        return list(self._tags)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __getitem__(self, index: int) -> Tag:
        return self._tags[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagSequence):
            return NotImplemented
        return self._tags == other._tags

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._tags!r})"
