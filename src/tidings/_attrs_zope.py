# -*- test-case-name: tidings.test.test_attrs_zope -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
L{attrs} validators for L{zope.interface} providers.
"""

from typing import Any, Type

from attr import Attribute, attrib, attrs
from zope.interface import Interface


__all__ = ()


@attrs(frozen=True, repr=False)
class _ProvidesValidator:
    interface: Type[Interface] = attrib()
    allowNone: bool = attrib(default=False)

    def __call__(self, inst: object, attr: Attribute, value: Any) -> None:
        if value is None and self.allowNone:
            return
        if not self.interface.providedBy(value):
            raise TypeError(
                f"{attr.name!r} must provide {self.interface.__name__} "
                f"which {value!r} doesn't.",
                attr,
                self.interface,
                value,
            )

    def __repr__(self) -> str:
        return f"<provides validator for interface {self.interface!r}>"


def provides(
    interface: Type[Interface], allowNone: bool = False
) -> _ProvidesValidator:
    """
    An L{attrs} validator that raises L{TypeError} if the attribute's value
    does not provide C{interface}.

    @param interface: The interface to check for.

    @param allowNone: If true, C{None} is accepted as well.
    """
    return _ProvidesValidator(interface, allowNone)
