"""Textual host for lens; the controller itself does not import Textual."""

from .controller import LensController, LensUIHooks, ViewState, build_controller

__all__ = ["LensController", "LensUIHooks", "ViewState", "build_controller"]
