# -*- test-case-name: tidings.test.test_response -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Tests for L{tidings._response}.
"""

from typing import Any

from hypothesis import given
from hypothesis.strategies import integers

from .._imessage import IHTTPMessage, IHTTPResponse, InvalidStatusCodeError
from .._response import FrozenHTTPResponse
from ._trial import TestCase
from .test_message import FrozenHTTPMessageTestsMixIn


__all__ = ()


class FrozenHTTPResponseTests(FrozenHTTPMessageTestsMixIn, TestCase):
    """
    Tests for L{FrozenHTTPResponse}.
    """

    @classmethod
    def messageFromBody(cls, body: Any = None) -> IHTTPMessage:
        if body is None:
            return FrozenHTTPResponse()
        return FrozenHTTPResponse(body=body)

    def test_interface(self) -> None:
        """
        L{FrozenHTTPResponse} implements L{IHTTPResponse}.
        """
        self.assertProvides(IHTTPResponse, FrozenHTTPResponse())

    def test_defaults(self) -> None:
        """
        A response defaults to C{200 OK} with no headers.
        """
        response = FrozenHTTPResponse()
        self.assertEqual(response.statusCode, 200)
        self.assertEqual(response.reasonPhrase, "OK")
        self.assertEqual(response.headers.rawHeaders, ())

    @given(integers(min_value=100, max_value=599))
    def test_withStatus(self, code: int) -> None:
        """
        L{FrozenHTTPResponse.withStatus} accepts codes from 100 to 599.
        """
        response = self.assertUnchangedBy(
            FrozenHTTPResponse(), lambda response: response.withStatus(code)
        )
        self.assertEqual(response.statusCode, code)

    def test_statusBoundaries(self) -> None:
        """
        99 and 600 are rejected; 100 and 599 are accepted.
        """
        response = FrozenHTTPResponse()
        self.assertRaises(InvalidStatusCodeError, response.withStatus, 99)
        self.assertRaises(InvalidStatusCodeError, response.withStatus, 600)
        self.assertEqual(response.withStatus(100).statusCode, 100)
        self.assertEqual(response.withStatus(599).statusCode, 599)

    def test_statusNotInteger(self) -> None:
        """
        Status codes must be integers.
        """
        response = FrozenHTTPResponse()
        for code in ("200", 200.0, True, None):
            self.assertRaises(
                InvalidStatusCodeError, response.withStatus, code
            )
        self.assertRaises(
            InvalidStatusCodeError, FrozenHTTPResponse, statusCode="200"
        )

    def test_reasonPhrase(self) -> None:
        """
        A reason phrase given with the status code is used.
        """
        response = FrozenHTTPResponse().withStatus(404, "Gone Fishing")
        self.assertEqual(response.reasonPhrase, "Gone Fishing")

    def test_standardReasonPhrase(self) -> None:
        """
        Without a reason phrase, the standard phrase for the status code is
        used.
        """
        response = (
            FrozenHTTPResponse()
            .withStatus(404, "Gone Fishing")
            .withStatus(418)
        )
        self.assertEqual(response.reasonPhrase, "I'm a teapot")

    def test_unknownReasonPhrase(self) -> None:
        """
        Status codes with no standard phrase have an empty reason phrase.
        """
        response = FrozenHTTPResponse().withStatus(599)
        self.assertEqual(response.reasonPhrase, "")

    def test_reasonPhraseNotText(self) -> None:
        """
        Reason phrases must be text.
        """
        self.assertRaises(
            TypeError, FrozenHTTPResponse().withStatus, 200, b"OK"
        )
