"""
Component descriptors.

A component lives in a directory holding a ``component.json`` that maps named
states to template files:

    {"type": "c", "states": {"default": {"__file__": "card.html"},
                             "compact": {"__file__": "card-compact.html"}}}

Components with ``"type": "d"`` render a single ``template`` instead.
"""
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..error.exceptions import ComponentError

logger = logging.getLogger(__name__)

COMPONENT_CONTEXT = "__component__"
COMPONENT_DATA_KEY = "__component_data__"
DESCRIPTOR_NAME = "component.json"
DEFAULT_STATE = "default"


class ComponentState(BaseModel):
    """One renderable state of a component."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    file: str = Field(alias="__file__")


class ComponentDescriptor(BaseModel):
    """Parsed component.json."""

    model_config = ConfigDict(extra="allow")

    type: str = ""
    template: Optional[str] = None
    states: Dict[str, ComponentState] = Field(default_factory=dict)

    def state_file(self, state: Optional[str] = None) -> str:
        """
        File of a state, the default state when none is given.

        Raises:
            ComponentError: If the state is not declared
        """
        name = state or DEFAULT_STATE
        if name not in self.states:
            raise ComponentError(f"Component has no state '{name}'")
        return self.states[name].file

    def entry_file(self, state: Optional[str] = None) -> str:
        """File rendered for a state; single-template components ignore the state."""
        if self.type == "d" and self.template:
            return self.template
        return self.state_file(state)

    def as_data(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def parse_component(text: str, location: Optional[str] = None) -> ComponentDescriptor:
    """
    Parse component.json content.

    Raises:
        ComponentError: If the JSON is malformed or does not describe a component
    """
    try:
        return ComponentDescriptor.model_validate_json(text)
    except ValidationError as e:
        raise ComponentError(f"Invalid component descriptor {location or ''}: {e}".strip()) from e
