"""
Per-call render state.

Every render call gets its own RenderContext, so two renders running on one
engine never share the view being rendered or the queue of dynamic partials.
"""
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from .component import ComponentDescriptor
from .scanner import DynamicBinding


@dataclass
class RenderState:
    """Identity of the view being rendered."""

    project_name: str = ""
    view_name: str = ""
    view_url: Optional[str] = None
    # Per-render option overrides, e.g. {"partial_path": "blocks"}
    config: Dict[str, Any] = field(default_factory=dict)
    locals: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, state: Union["RenderState", Mapping[str, Any], None]) -> "RenderState":
        """Build a private copy from a RenderState, a mapping or None."""
        if state is None:
            return cls()
        if isinstance(state, RenderState):
            return replace(state, config=dict(state.config), locals=dict(state.locals))
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in state.items() if key in known})


@dataclass
class RenderContext:
    """Mutable bookkeeping of one render call."""

    state: RenderState = field(default_factory=RenderState)
    pending: List[DynamicBinding] = field(default_factory=list)
    installing: Set[str] = field(default_factory=set)
    # Registered partials whose recorded dynamic bindings were queued again
    replayed: Set[str] = field(default_factory=set)
    component: Optional[ComponentDescriptor] = None

    def queue(self, binding: DynamicBinding) -> None:
        self.pending.append(binding)

    def drain(self) -> List[DynamicBinding]:
        """Take every queued binding, leaving the queue empty."""
        batch, self.pending = self.pending, []
        return batch
