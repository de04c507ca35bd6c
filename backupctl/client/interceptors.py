"""
Call Middleware and Credential Interceptors.

A CallMiddleware wraps the next step of an outgoing call:

    middleware(call_next) -> call

where both call_next and the returned call take (client_call_details,
request) and return the grpc.aio call object. Middlewares are composed in a
fixed order, outermost first, and installed on a channel through one
interceptor per call shape (unary-unary and unary-stream).

Usage:
    interceptors = credential_interceptors(settings.api_token)
    channel = grpc.aio.insecure_channel(address, interceptors=interceptors)
"""

from collections.abc import Awaitable, Callable, Sequence
from functools import reduce
from typing import Any

import grpc

from backupctl.core.logging import get_logger

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "authorization"

Continuation = Callable[[grpc.aio.ClientCallDetails, Any], Awaitable[Any]]
CallMiddleware = Callable[[Continuation], Continuation]


def compose(middlewares: Sequence[CallMiddleware]) -> CallMiddleware:
    """
    Compose middlewares into one.

    The first middleware in the sequence is the outermost: it sees the call
    first and hands it on to the second.
    """

    def composed(call_next: Continuation) -> Continuation:
        return reduce(lambda inner, middleware: middleware(inner), reversed(middlewares), call_next)

    return composed


def with_authorization(
    details: grpc.aio.ClientCallDetails,
    token: str,
) -> grpc.aio.ClientCallDetails:
    """Return call details carrying `authorization: bearer <token>`."""
    pairs = [
        (key, value)
        for key, value in (details.metadata or ())
        if key != AUTHORIZATION_HEADER
    ]
    pairs.append((AUTHORIZATION_HEADER, f"bearer {token}"))
    return details._replace(metadata=grpc.aio.Metadata(*pairs))


def credential_middleware(token: str) -> CallMiddleware:
    """
    Attach the bearer token to every call.

    The header is sent even when the token is empty.
    """

    def middleware(call_next: Continuation) -> Continuation:
        async def call(details: grpc.aio.ClientCallDetails, request: Any) -> Any:
            return await call_next(with_authorization(details, token), request)

        return call

    return middleware


class UnaryUnaryMiddlewareInterceptor(grpc.aio.UnaryUnaryClientInterceptor):
    """Runs a middleware chain around unary-unary calls."""

    def __init__(self, middlewares: Sequence[CallMiddleware]) -> None:
        self._chain = compose(middlewares)

    async def intercept_unary_unary(self, continuation, client_call_details, request):
        logger.debug("Unary call", method=client_call_details.method)
        return await self._chain(continuation)(client_call_details, request)


class UnaryStreamMiddlewareInterceptor(grpc.aio.UnaryStreamClientInterceptor):
    """Runs a middleware chain around unary-stream calls."""

    def __init__(self, middlewares: Sequence[CallMiddleware]) -> None:
        self._chain = compose(middlewares)

    async def intercept_unary_stream(self, continuation, client_call_details, request):
        logger.debug("Streaming call", method=client_call_details.method)
        return await self._chain(continuation)(client_call_details, request)


def build_interceptors(
    middlewares: Sequence[CallMiddleware],
) -> list[grpc.aio.ClientInterceptor]:
    """
    Build one interceptor per call shape running the same middleware chain.

    grpc.aio files each interceptor under a single call shape, so unary and
    streaming calls need separate objects.
    """
    return [
        UnaryUnaryMiddlewareInterceptor(middlewares),
        UnaryStreamMiddlewareInterceptor(middlewares),
    ]


def credential_interceptors(token: str) -> list[grpc.aio.ClientInterceptor]:
    """Interceptors that authenticate unary and streaming calls with `token`."""
    return build_interceptors([credential_middleware(token)])
