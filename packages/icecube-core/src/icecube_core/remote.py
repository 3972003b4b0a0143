"""Remote method calls on IceComponents.

A rendered IceComponent carries its serialized state (``data-props``) and a
signature of that state (``x-ice``). The client posts both back together with
the method to call:

    POST /__icecube__
    X-Ice: <signature>
    {"id": "...", "component": "app_components_Counter", "snapshot": "{...}",
     "method": "increment", "args": [], "data": {"count": 3}}

handle_component_call() validates the request and dispatches the method. A
web framework mounts it on a route and maps BadComponentRequest to a
400 response. Every check runs before the component is instantiated, so a
rejected request executes nothing.
"""

from __future__ import annotations

import hashlib
import hmac
import inspect
import json
import os
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from icecube_core.components import IceComponent, SingleFileComponent
from icecube_core.errors import BadComponentRequest, ConfigurationError, IceCubeError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from icecube_core.registry import Registry

logger = structlog.get_logger(__name__)

# Request header carrying the snapshot signature
SIGNATURE_HEADER = "X-Ice"

# Environment variable holding the signing secret
SECRET_KEY_ENV_VAR = "ICECUBE_SECRET_KEY"


class ComponentCall(BaseModel):
    """Remote call request body."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="DOM id of the component root")
    component: str = Field(..., min_length=1, description="Flattened component name")
    snapshot: str = Field(..., description="Serialized state as rendered (data-props)")
    method: str | None = Field(default=None, description="Method to call")
    args: list[Any] = Field(default_factory=list, description="Positional method arguments")
    data: dict[str, Any] = Field(default_factory=dict, description="Client-side state")


class ComponentCallResult(BaseModel):
    """Remote call response body.

    ``html`` replaces the component root when non-empty; otherwise ``data``
    is merged into the client-side state.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    html: str = Field(default="", description="Replacement HTML")
    data: dict[str, Any] = Field(default_factory=dict, description="Updated state")


def get_secret_key() -> str:
    """Return the signing secret from the environment.

    Raises:
        ConfigurationError: If ICECUBE_SECRET_KEY is not set.
    """
    secret = os.environ.get(SECRET_KEY_ENV_VAR)
    if not secret:
        raise ConfigurationError(f"{SECRET_KEY_ENV_VAR} must be set to sign component state")
    return secret


def sign_snapshot(secret: str, snapshot: str) -> str:
    """Return the hex SHA-256 of ``secret + snapshot``."""
    return hashlib.sha256((secret + snapshot).encode("utf-8")).hexdigest()


def handle_component_call(
    registry: Registry,
    payload: Mapping[str, Any],
    signature: str | None,
    secret: str | None = None,
) -> ComponentCallResult:
    """Validate and execute a remote component call.

    Args:
        registry: Registry used to resolve the component class.
        payload: Decoded JSON request body.
        signature: Value of the X-Ice header.
        secret: Signing secret. Defaults to ICECUBE_SECRET_KEY.

    Returns:
        ComponentCallResult to serialize as the JSON response.

    Raises:
        BadComponentRequest: If the request is malformed, targets an unknown
            or non-IceComponent class, fails the signature check, names a
            method that cannot be called remotely, or passes arguments that
            do not match the method signature.
    """
    try:
        call = ComponentCall.model_validate(payload)
    except PydanticValidationError as e:
        raise BadComponentRequest("Bad request", internal_details=str(e)) from e

    log = logger.bind(component=call.component, method=call.method)

    expected = sign_snapshot(secret if secret is not None else get_secret_key(), call.snapshot)
    if signature is None or not hmac.compare_digest(
        expected.encode("utf-8"), signature.encode("utf-8")
    ):
        log.warning("component_call_rejected", reason="signature_mismatch")
        raise BadComponentRequest("Bad request")

    component_cls = _resolve_component(registry, call.component)

    try:
        props = json.loads(call.snapshot)
    except json.JSONDecodeError as e:
        raise BadComponentRequest("Bad request", internal_details=str(e)) from e
    if not isinstance(props, dict):
        raise BadComponentRequest("Bad request", internal_details="Snapshot is not an object")

    method = None
    if call.method:
        method = _remote_method(component_cls, call.method)
        try:
            inspect.signature(method).bind(None, *call.args)
        except TypeError as e:
            log.warning("component_call_rejected", reason="arguments_mismatch")
            raise BadComponentRequest("Bad request", internal_details=str(e)) from e

    try:
        component = component_cls(**props)
    except TypeError as e:
        raise BadComponentRequest("Bad request", internal_details=str(e)) from e
    component.set_id(call.id)
    for key, value in call.data.items():
        if key in props:
            setattr(component, key, value)

    if method is not None:
        result = method(component, *call.args)
        log.info("component_method_called")
        if isinstance(result, str) or hasattr(result, "__html__"):
            return ComponentCallResult(html=str(result), data={})

    return ComponentCallResult(html="", data=component.expose_state())


def _resolve_component(registry: Registry, component_name: str) -> type[IceComponent]:
    record = registry.get_by_name(component_name)
    if record is None:
        raise BadComponentRequest(
            "Bad request",
            internal_details=f"Unknown component {component_name}",
        )

    try:
        component_cls = registry.resolve(record.identifier)
    except IceCubeError as e:
        raise BadComponentRequest("Bad request", internal_details=e.user_message) from e

    if not issubclass(component_cls, IceComponent):
        raise BadComponentRequest(
            "Bad request",
            internal_details=f"{component_name} is not an IceComponent",
        )
    return component_cls


def _remote_method(component_cls: type[IceComponent], name: str) -> Any:
    """Return a public method defined by the component itself.

    Methods inherited from the icecube base classes (render, set_id, ...)
    cannot be called remotely.
    """
    if name.startswith("_") or hasattr(SingleFileComponent, name):
        raise BadComponentRequest("Bad request", internal_details=f"Method {name} not allowed")

    method = inspect.getattr_static(component_cls, name, None)
    if not inspect.isfunction(method):
        raise BadComponentRequest("Bad request", internal_details=f"Method {name} not found")
    return method
