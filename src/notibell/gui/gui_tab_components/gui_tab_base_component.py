"""
Base component system for modular UI components.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field
from notibell.utils.log_service import info, warning


@dataclass
class ComponentConfig:
    """Configuration for a UI component"""
    component_id: str
    title: Optional[str] = None
    classes: str = ""
    properties: Dict[str, Any] = field(default_factory=dict)


class BaseComponent(ABC):
    """Base class for all UI components"""

    def __init__(self, config: ComponentConfig):
        self.config = config
        self._element: Optional[Any] = None
        self._rendered = False
        self._children: List['BaseComponent'] = []

    @property
    def component_id(self) -> str:
        """Get component ID"""
        return self.config.component_id

    @property
    def is_rendered(self) -> bool:
        """Check if component has been rendered"""
        return self._rendered

    @abstractmethod
    def render(self) -> Any:
        """Render the component and return NiceGUI element"""
        pass

    def update(self, data: Any) -> None:
        """Update component with new data"""
        if self._rendered and self._element:
            self._update_element(data)

    @abstractmethod
    def _update_element(self, data: Any) -> None:
        """Implementation-specific update logic"""
        pass

    def get_element(self) -> Any:
        """Get the rendered element, rendering if necessary"""
        if not self._rendered:
            self._element = self.render()
            self._rendered = True
        return self._element

    def cleanup(self) -> None:
        """Cleanup component resources"""
        for child in self._children:
            child.cleanup()
        self._children.clear()
        self._element = None
        self._rendered = False


class TimedComponent(BaseComponent):
    """Component owning ``ui.timer`` instances that must stop on cleanup.

    Subclasses list the attribute names holding their timers in
    ``timer_attributes``.
    """

    timer_attributes: List[str] = []

    def cancel_timers(self) -> None:
        for name in self.timer_attributes:
            timer = getattr(self, name, None)
            if timer is None:
                continue
            try:
                timer.cancel()
            except Exception as e:
                warning(f"Failed to cancel timer {name} of {self.component_id}: {e}")
            setattr(self, name, None)

    def cleanup(self) -> None:
        self.cancel_timers()
        super().cleanup()


class ComponentRegistry:
    """Registry for managing UI components"""

    def __init__(self):
        self._components: Dict[str, BaseComponent] = {}

    def register(self, component: BaseComponent) -> None:
        """Register a component"""
        self._components[component.component_id] = component
        info(f"Registered component: {component.component_id}")

    def unregister(self, component_id: str) -> bool:
        """Unregister a component"""
        component = self._components.pop(component_id, None)
        if component is None:
            return False
        component.cleanup()
        info(f"Unregistered component: {component_id}")
        return True

    def get_component(self, component_id: str) -> Optional[BaseComponent]:
        """Get component by ID"""
        return self._components.get(component_id)

    def get_all_components(self) -> List[BaseComponent]:
        """Get all registered components"""
        return list(self._components.values())

    def cleanup_all(self) -> None:
        """Clean up all components"""
        for component in list(self._components.values()):
            component.cleanup()
        self._components.clear()
        info("Cleaned up all components")


# Global component registry
_component_registry: Optional[ComponentRegistry] = None


def get_component_registry() -> ComponentRegistry:
    """Get the global component registry"""
    global _component_registry
    if _component_registry is None:
        _component_registry = ComponentRegistry()
    return _component_registry
