"""
Engine options with validation.
"""
import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

# Template kind -> option holding its subdirectory
KIND_OPTIONS = {
    "view": "view_path",
    "layout": "layout_path",
    "partial": "partial_path",
    "helper": "helper_path",
    "data": "data_path",
}


class EngineOptions(BaseModel):
    """Configuration for a view engine instance."""

    root: str = Field(default_factory=os.getcwd, description="Root directory holding all projects")
    shared: str = Field(default="shared", description="Project used for shared/ prefixed names")
    extname: str = Field(default=".html", description="Default template extension")
    disable_cache: bool = Field(default=False, description="Reload and recompile on every render")
    template_options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword arguments for the Jinja2 environment"
    )
    default_layout: Optional[str] = Field(default="default", description="Layout used when a view names none")
    view_path: str = Field(default="", description="Views subdirectory inside a project")
    layout_path: Optional[str] = Field(default=None, description="Layouts subdirectory, defaults to view_path")
    partial_path: str = Field(default="", description="Partials subdirectory inside a project")
    helper_path: str = Field(default="", description="Helper modules subdirectory inside a project")
    data_path: str = Field(default="", description="Data files subdirectory inside a project")
    pre_installed_helper: Optional[str] = Field(default=None, description="Helper module installed at startup")
    locals: Dict[str, Any] = Field(default_factory=dict, description="Data merged into every render")

    @field_validator("root", mode="before")
    @classmethod
    def absolute_root(cls, value: Any) -> str:
        """Store the root as an absolute path."""
        if value is None:
            return os.getcwd()
        return os.path.abspath(os.fspath(value))

    @field_validator("extname")
    @classmethod
    def validate_extname(cls, value: str) -> str:
        """Make sure the extension carries its leading dot."""
        value = value.strip()
        if not value:
            raise ValueError("extname cannot be empty")
        return value if value.startswith(".") else f".{value}"

    @model_validator(mode="after")
    def default_layout_path(self) -> "EngineOptions":
        if self.layout_path is None:
            self.layout_path = self.view_path
        return self

    def get(self, prop: str, state: Any = None) -> Any:
        """
        Get an option, preferring the per-render override in ``state.config``.

        Args:
            prop: Option name
            state: Optional render state carrying a ``config`` mapping

        Returns:
            Option value
        """
        overrides = getattr(state, "config", None)
        if overrides and overrides.get(prop):
            return overrides[prop]
        return getattr(self, prop)

    def kind_dir(self, kind: Optional[str], state: Any = None) -> str:
        """Subdirectory for a template kind, honouring per-render overrides."""
        prop = KIND_OPTIONS.get(kind) if kind else None
        if prop is None:
            return ""
        return self.get(prop, state) or ""

    def instance_kind_dir(self, kind: Optional[str]) -> str:
        """Subdirectory for a template kind, ignoring per-render overrides."""
        prop = KIND_OPTIONS.get(kind) if kind else None
        if prop is None:
            return ""
        return getattr(self, prop) or ""
