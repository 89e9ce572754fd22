# File: crudforge/strategies.py
"""
crudforge - Framework Strategies
==================================
One stateless strategy object per supported backend.  A strategy answers
every backend-specific question a generator may have: how a handler is
declared, how request data is read, how a response is sent and how routes
are registered.  Generators never branch on the backend identity; they only
call into the strategy they were handed.

Adding a backend::

    class KoaStrategy(FrameworkStrategy):
        name = "koa"
        ...

    register_strategy("koa", KoaStrategy)

Strategies hold no per-run state, so the single shared instance returned by
``get_strategy`` can be used for any number of models.
"""

from __future__ import annotations

import abc
import logging
from typing import Dict, List, Optional, Type

from crudforge.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.strategies")


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class FrameworkStrategy(abc.ABC):
    """Backend conventions for emitted handlers and routes."""

    name: str = ""

    # -- Naming -------------------------------------------------------------

    @property
    @abc.abstractmethod
    def request_var(self) -> str:
        """Name of the request parameter in emitted handlers."""

    @property
    @abc.abstractmethod
    def response_var(self) -> str:
        """Name of the response parameter in emitted handlers."""

    @property
    @abc.abstractmethod
    def response_type(self) -> str:
        """TypeScript type of the response parameter."""

    def response_parameter(self) -> str:
        """Typed response parameter for shared helpers such as ``handleError``."""
        return f"{self.response_var}: {self.response_type}"

    # -- Handlers -----------------------------------------------------------

    @abc.abstractmethod
    def get_imports(self, entity_lower: str, alias: str = "@") -> List[str]:
        """Import declarations needed by any handler of *entity_lower*."""

    @abc.abstractmethod
    def generate_handler_signature(
        self, name: str, params_shape: Optional[str] = None
    ) -> str:
        """Exported async handler declaration, up to and including ``=>``."""

    def get_request_param(self, key: str) -> str:
        return f"{self.request_var}.params.{key}"

    def get_request_body(self) -> str:
        return f"{self.request_var}.body"

    def get_request_query(self) -> str:
        return f"{self.request_var}.query"

    @abc.abstractmethod
    def generate_json_response(self, expr: str) -> str:
        """Statement sending *expr* as JSON with the default success status."""

    @abc.abstractmethod
    def generate_status_response(
        self, status_code: int, expr: Optional[str] = None
    ) -> str:
        """Statement sending *status_code* with an optional JSON body."""

    # -- Routes -------------------------------------------------------------

    @abc.abstractmethod
    def router_name(self, entity_lower: str) -> str:
        """Exported symbol of the route registration for *entity_lower*."""

    @abc.abstractmethod
    def get_router_imports(self, entity_lower: str, alias: str = "@") -> List[str]:
        """Import declarations of the routes file."""

    @abc.abstractmethod
    def generate_router_open(self, entity_lower: str) -> str:
        """Opening statement of the route registration."""

    def generate_router_setup(self, entity_lower: str, alias: str = "@") -> str:
        """Imports plus the opening of the route registration."""
        lines: List[str] = self.get_router_imports(entity_lower, alias)
        return "\n".join(lines + ["", self.generate_router_open(entity_lower)])

    @abc.abstractmethod
    def generate_route(
        self, entity_lower: str, method: str, path: str, handler: str
    ) -> str:
        """One route registration statement."""

    def generate_router_close(self) -> str:
        """Closing text of the route registration; empty when none is needed."""
        return ""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} '{self.name}'>"


# ---------------------------------------------------------------------------
# Express
# ---------------------------------------------------------------------------


class ExpressStrategy(FrameworkStrategy):
    """express: ``(req, res)`` handlers and a ``Router()`` instance."""

    name = "express"

    @property
    def request_var(self) -> str:
        return "req"

    @property
    def response_var(self) -> str:
        return "res"

    @property
    def response_type(self) -> str:
        return "Response"

    def get_imports(self, entity_lower: str, alias: str = "@") -> List[str]:
        return [
            "import type { Request, Response } from 'express'",
            f"import {{ {entity_lower}Service }} from '{alias}/services/{entity_lower}'",
        ]

    def generate_handler_signature(
        self, name: str, params_shape: Optional[str] = None
    ) -> str:
        request_type: str = f"Request<{params_shape}>" if params_shape else "Request"
        return (
            f"export const {name} = async "
            f"(req: {request_type}, res: Response) =>"
        )

    def generate_json_response(self, expr: str) -> str:
        return f"return res.json({expr})"

    def generate_status_response(
        self, status_code: int, expr: Optional[str] = None
    ) -> str:
        if expr is None:
            return f"return res.status({status_code}).send()"
        return f"return res.status({status_code}).json({expr})"

    def router_name(self, entity_lower: str) -> str:
        return f"{entity_lower}Router"

    def get_router_imports(self, entity_lower: str, alias: str = "@") -> List[str]:
        return [
            "import { Router } from 'express'",
            f"import * as {entity_lower}Controller from "
            f"'{alias}/controllers/{entity_lower}'",
        ]

    def generate_router_open(self, entity_lower: str) -> str:
        return f"export const {self.router_name(entity_lower)} = Router()"

    def generate_route(
        self, entity_lower: str, method: str, path: str, handler: str
    ) -> str:
        return (
            f"{self.router_name(entity_lower)}.{method}"
            f"('{path}', {entity_lower}Controller.{handler})"
        )


# ---------------------------------------------------------------------------
# Fastify
# ---------------------------------------------------------------------------


class FastifyStrategy(FrameworkStrategy):
    """fastify: ``(request, reply)`` handlers and a plugin function."""

    name = "fastify"

    @property
    def request_var(self) -> str:
        return "request"

    @property
    def response_var(self) -> str:
        return "reply"

    @property
    def response_type(self) -> str:
        return "FastifyReply"

    def get_imports(self, entity_lower: str, alias: str = "@") -> List[str]:
        return [
            "import type { FastifyRequest, FastifyReply } from 'fastify'",
            f"import {{ {entity_lower}Service }} from '{alias}/services/{entity_lower}'",
        ]

    def generate_handler_signature(
        self, name: str, params_shape: Optional[str] = None
    ) -> str:
        request_type: str = (
            f"FastifyRequest<{{ Params: {params_shape} }}>"
            if params_shape
            else "FastifyRequest"
        )
        return (
            f"export const {name} = async "
            f"(request: {request_type}, reply: FastifyReply) =>"
        )

    def generate_json_response(self, expr: str) -> str:
        return f"return reply.send({expr})"

    def generate_status_response(
        self, status_code: int, expr: Optional[str] = None
    ) -> str:
        if expr is None:
            return f"return reply.code({status_code}).send()"
        return f"return reply.code({status_code}).send({expr})"

    def router_name(self, entity_lower: str) -> str:
        return f"{entity_lower}Routes"

    def get_router_imports(self, entity_lower: str, alias: str = "@") -> List[str]:
        return [
            "import type { FastifyInstance } from 'fastify'",
            f"import * as {entity_lower}Controller from "
            f"'{alias}/controllers/{entity_lower}'",
        ]

    def generate_router_open(self, entity_lower: str) -> str:
        return (
            f"export async function {self.router_name(entity_lower)}"
            "(fastify: FastifyInstance) {"
        )

    def generate_route(
        self, entity_lower: str, method: str, path: str, handler: str
    ) -> str:
        params: List[str] = [
            segment[1:] for segment in path.split("/") if segment.startswith(":")
        ]
        type_param: str = ""
        if params:
            shape: str = "; ".join(f"{p}: string" for p in params)
            type_param = f"<{{ Params: {{ {shape} }} }}>"
        return (
            f"  fastify.{method}{type_param}"
            f"('{path}', {entity_lower}Controller.{handler})"
        )

    def generate_router_close(self) -> str:
        return "}"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_STRATEGY_CLASSES: Dict[str, Type[FrameworkStrategy]] = {
    "express": ExpressStrategy,
    "fastify": FastifyStrategy,
}
_STRATEGY_INSTANCES: Dict[str, FrameworkStrategy] = {}


def register_strategy(name: str, strategy_cls: Type[FrameworkStrategy]) -> None:
    """Register (or replace) the strategy class for backend *name*."""
    key: str = name.strip().lower()
    if not key:
        raise ConfigurationError("Backend identifier must not be empty.")
    _STRATEGY_CLASSES[key] = strategy_cls
    _STRATEGY_INSTANCES.pop(key, None)
    logger.debug("Registered strategy '%s' -> %s", key, strategy_cls.__name__)


def available_strategies() -> List[str]:
    return sorted(_STRATEGY_CLASSES)


def get_strategy(name: str) -> FrameworkStrategy:
    """
    Return the shared strategy instance for backend *name*.

    Raises:
        ConfigurationError: If no strategy is registered under *name*.
    """
    key: str = name.strip().lower()
    strategy_cls: Optional[Type[FrameworkStrategy]] = _STRATEGY_CLASSES.get(key)
    if strategy_cls is None:
        raise ConfigurationError(
            f"Unsupported framework '{name}'. "
            f"Available: {', '.join(available_strategies())}"
        )
    instance: Optional[FrameworkStrategy] = _STRATEGY_INSTANCES.get(key)
    if instance is None:
        instance = strategy_cls()
        _STRATEGY_INSTANCES[key] = instance
    return instance


__all__ = [
    "FrameworkStrategy",
    "ExpressStrategy",
    "FastifyStrategy",
    "register_strategy",
    "available_strategies",
    "get_strategy",
]

logger.debug("crudforge.strategies loaded")
