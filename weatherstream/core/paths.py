"""
JSON path extraction

Every field of every resource is described by a small path value rather than
hand-written lookups, so all resources share one flattening engine.

Supported syntax:
- "key"              - key of the current record
- "key.nested.deep"  - dot notation through nested objects
- "key[0]"           - array index (e.g. the first "weather" condition)
- "$.key"            - start from the document root instead of the record
- "@name"            - the validated request parameter called name
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from weatherstream.errors import MalformedResponse

_SEGMENT_RE = re.compile(r"([^.\[]+)((?:\[\d+\])*)")
_INDEX_RE = re.compile(r"\[(\d+)\]")


class _Missing:
    """Sentinel for a value that is absent from the document"""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

Step = Union[str, int]


@dataclass(frozen=True)
class JsonPath:
    """
    A compiled extraction path

    Attributes:
        text: Original path text
        steps: Keys (str) and array indices (int) to walk, in order
        from_root: Walk from the document root instead of the current record
        param: Name of the request parameter to read (for "@name" paths)
    """

    text: str
    steps: tuple[Step, ...] = ()
    from_root: bool = False
    param: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "JsonPath":
        """
        Compile a path string

        Raises:
            ValueError: If the path is empty or not valid syntax
        """
        if not text or not text.strip():
            raise ValueError("JSON path must not be empty")

        text = text.strip()

        if text.startswith("@"):
            name = text[1:]
            if not name.isidentifier():
                raise ValueError(f"Invalid parameter reference: '{text}'")
            return cls(text=text, param=name)

        body = text
        from_root = False
        if body == "$":
            return cls(text=text, from_root=True)
        if body.startswith("$."):
            from_root = True
            body = body[2:]

        steps: list[Step] = []
        for part in body.split("."):
            match = _SEGMENT_RE.fullmatch(part)
            if not match:
                raise ValueError(f"Invalid JSON path segment '{part}' in '{text}'")
            key, brackets = match.groups()
            steps.append(key)
            steps.extend(int(index) for index in _INDEX_RE.findall(brackets))

        return cls(text=text, steps=tuple(steps), from_root=from_root)

    def resolve(
        self,
        record: Any,
        document: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Walk the path and return the raw value

        Returns MISSING when a key or index along the way is absent, or when
        the value found is JSON null.

        Raises:
            MalformedResponse: If a key is applied to a non-object or an
                index to a non-array
        """
        if self.param is not None:
            if params is None or self.param not in params:
                return MISSING
            value = params[self.param]
            return MISSING if value is None else value

        current = document if self.from_root else record

        for step in self.steps:
            if current is None:
                return MISSING

            if isinstance(step, int):
                if not isinstance(current, list):
                    raise MalformedResponse(
                        f"cannot index non-array with [{step}] in path '{self.text}'"
                    )
                if step >= len(current):
                    return MISSING
                current = current[step]
            else:
                if not isinstance(current, dict):
                    raise MalformedResponse(
                        f"cannot access key '{step}' on non-object in path '{self.text}'"
                    )
                if step not in current:
                    return MISSING
                current = current[step]

        return MISSING if current is None else current

    def __str__(self) -> str:
        return self.text
