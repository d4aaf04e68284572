# -*- test-case-name: tidings.test.test_attrs_zope -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Tests for L{tidings._attrs_zope}.
"""

from typing import Optional

from attr import attrib, attrs

from twisted.trial.unittest import SynchronousTestCase

from .._attrs_zope import provides
from .._imessage import IByteStream
from .._stream import CallbackStream, memoryStream


__all__ = ()


@attrs(frozen=True)
class BodyContainer:
    body: IByteStream = attrib(validator=provides(IByteStream))


@attrs(frozen=True)
class OptionalBodyContainer:
    body: Optional[IByteStream] = attrib(
        default=None, validator=provides(IByteStream, allowNone=True)
    )


class ProvidesTestCase(SynchronousTestCase):
    def test_yes(self) -> None:
        BodyContainer(memoryStream())
        BodyContainer(CallbackStream(lambda: b""))

    def test_no(self) -> None:
        e = self.assertRaises(TypeError, BodyContainer, b"body")
        self.assertIn("must provide IByteStream", e.args[0])
        self.assertEqual(e.args[2], IByteStream)
        self.assertEqual(e.args[3], b"body")

    def test_none(self) -> None:
        self.assertRaises(TypeError, BodyContainer, None)
        self.assertIdentical(OptionalBodyContainer().body, None)

    def test_repr(self) -> None:
        self.assertEqual(
            repr(provides(IByteStream)),
            f"<provides validator for interface {IByteStream!r}>",
        )
